import typer
from pathlib import Path
from typing import Any, Dict, Optional
from mjo.config.loader import load_config
from mjo.domain.errors import TranscodeError
from mjo.domain.models import JobKind
from mjo.infrastructure.logging import setup_logging
from mjo.pipeline.service import TranscodingService
from mjo.ui.console import ConsoleReporter

app = typer.Typer(help="MJO (Media Job Orchestrator) - ffmpeg conversions with progress, timeouts and cancellation")

CONFIG_OPTION = typer.Option(Path("conf/mjo.yaml"), "--config", "-c", help="Path to YAML config")
DEBUG_OPTION = typer.Option(False, "--debug/--no-debug", help="Enable verbose debug logging")
TIMEOUT_OPTION = typer.Option(None, "--timeout", help="Seconds before the encoder is terminated (0 disables)")

def _build_service(config_path: Optional[Path], debug: bool) -> TranscodingService:
    config = load_config(config_path)
    if debug:
        config.general.debug = True
    logger = setup_logging(config.general.log_dir, debug=config.general.debug)
    logger.info(f"MJO started: ffmpeg={config.general.ffmpeg_path}, debug={config.general.debug}")
    return TranscodingService(config=config)

def _run(kind: JobKind, input_path: Path, output_path: Path, config_path: Optional[Path], debug: bool, overrides: Dict[str, Any]):
    if not input_path.exists():
        typer.secho(f"Error: Input file {input_path} does not exist.", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    service = _build_service(config_path, debug)
    options = {key: value for key, value in overrides.items() if value is not None}
    submit = {
        JobKind.AUDIO: service.convert_audio,
        JobKind.VIDEO: service.convert_video,
        JobKind.AUDIO_EXTRACTION: service.extract_audio,
    }[kind]

    try:
        with ConsoleReporter(service.event_bus):
            result = submit(input_path, output_path, options).result()
    except KeyboardInterrupt:
        cancelled = service.cancel_all_processing()
        typer.echo(f"\nInterrupted by user, cancelled {cancelled} job(s)")
        raise typer.Exit(code=130)

    if not result.success:
        if result.error.diagnostics and service.config.general.debug:
            typer.echo(result.error.diagnostics, err=True)
        raise typer.Exit(code=1)

@app.command("convert-audio")
def convert_audio(
    input_path: Path = typer.Argument(..., help="Source audio file"),
    output_path: Path = typer.Argument(..., help="Destination file (extension selects the codec)"),
    config_path: Optional[Path] = CONFIG_OPTION,
    audio_codec: Optional[str] = typer.Option(None, "--audio-codec", help="Override audio codec"),
    audio_bitrate: Optional[str] = typer.Option(None, "--audio-bitrate", help="e.g. 192k"),
    sample_rate: Optional[int] = typer.Option(None, "--sample-rate", help="Sample rate in Hz"),
    channels: Optional[int] = typer.Option(None, "--channels", help="Number of audio channels"),
    timeout: Optional[float] = TIMEOUT_OPTION,
    debug: bool = DEBUG_OPTION,
):
    """Convert an audio file to another audio format."""
    _run(JobKind.AUDIO, input_path, output_path, config_path, debug, {
        "audio_codec": audio_codec,
        "audio_bitrate": audio_bitrate,
        "audio_sample_rate": sample_rate,
        "audio_channels": channels,
        "timeout": timeout,
    })

@app.command("convert-video")
def convert_video(
    input_path: Path = typer.Argument(..., help="Source video file"),
    output_path: Path = typer.Argument(..., help="Destination file (extension selects the container)"),
    config_path: Optional[Path] = CONFIG_OPTION,
    video_codec: Optional[str] = typer.Option(None, "--video-codec", help="Override video codec"),
    audio_codec: Optional[str] = typer.Option(None, "--audio-codec", help="Override audio codec"),
    video_bitrate: Optional[str] = typer.Option(None, "--video-bitrate", help="e.g. 2500k"),
    crf: Optional[int] = typer.Option(None, "--crf", help="Constant rate factor (0-51, x264/x265 only)"),
    preset: Optional[str] = typer.Option(None, "--preset", help="Encoder preset (x264/x265 only)"),
    resolution: Optional[str] = typer.Option(None, "--resolution", help="e.g. 1280x720"),
    frame_rate: Optional[float] = typer.Option(None, "--fps", help="Output frame rate"),
    video_filters: Optional[str] = typer.Option(None, "--vf", help="ffmpeg video filter graph"),
    timeout: Optional[float] = TIMEOUT_OPTION,
    debug: bool = DEBUG_OPTION,
):
    """Convert a video file to another container/codec."""
    _run(JobKind.VIDEO, input_path, output_path, config_path, debug, {
        "video_codec": video_codec,
        "audio_codec": audio_codec,
        "video_bitrate": video_bitrate,
        "crf": crf,
        "preset": preset,
        "video_resolution": resolution,
        "video_frame_rate": frame_rate,
        "video_filters": video_filters,
        "timeout": timeout,
    })

@app.command("extract-audio")
def extract_audio(
    input_path: Path = typer.Argument(..., help="Source video file"),
    output_path: Path = typer.Argument(..., help="Destination audio file"),
    config_path: Optional[Path] = CONFIG_OPTION,
    audio_codec: Optional[str] = typer.Option(None, "--audio-codec", help="Override audio codec"),
    audio_bitrate: Optional[str] = typer.Option(None, "--audio-bitrate", help="e.g. 192k"),
    timeout: Optional[float] = TIMEOUT_OPTION,
    debug: bool = DEBUG_OPTION,
):
    """Extract the audio track of a video file."""
    _run(JobKind.AUDIO_EXTRACTION, input_path, output_path, config_path, debug, {
        "audio_codec": audio_codec,
        "audio_bitrate": audio_bitrate,
        "timeout": timeout,
    })

@app.command()
def info(
    input_path: Path = typer.Argument(..., help="Media file to analyse"),
    config_path: Optional[Path] = CONFIG_OPTION,
    debug: bool = DEBUG_OPTION,
):
    """Print duration, bitrate and stream details of a media file."""
    service = _build_service(config_path, debug)
    try:
        media = service.get_media_info(input_path)
    except TranscodeError as e:
        typer.secho(f"Error: {e.message}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    typer.echo(media.model_dump_json(indent=2))

@app.command()
def formats(
    config_path: Optional[Path] = CONFIG_OPTION,
):
    """List supported audio/video formats and per-container codecs."""
    service = TranscodingService(config=load_config(config_path))
    supported = service.get_supported_formats()
    typer.echo(f"Audio: {', '.join(supported['audio'])}")
    typer.echo(f"Video: {', '.join(supported['video'])}")
    for container in supported["video"]:
        codecs = service.get_supported_codecs(container, "video")
        if codecs:
            typer.echo(f"  {container}: video={', '.join(codecs)} audio={', '.join(service.get_supported_codecs(container, 'audio'))}")

if __name__ == "__main__":
    app()
