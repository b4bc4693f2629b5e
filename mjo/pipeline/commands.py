import sys
from pathlib import Path
from typing import List, Optional, Union
from mjo.config.models import FormatTables
from mjo.domain.models import ConversionOptions, JobKind

RATE_FACTOR_FAMILIES = ("x264", "x265")
HARDWARE_CODEC_MARKER = "videotoolbox"
HARDWARE_PLATFORMS = ("darwin",)

def format_from_path(path: Union[str, Path]) -> str:
    """Returns the lower-case extension of ``path`` without the leading dot."""
    return Path(path).suffix.lower().lstrip('.')

def supports_rate_factor(codec: Optional[str]) -> bool:
    """True for the x264/x265 family, which accept -crf and -preset."""
    return bool(codec) and any(family in codec for family in RATE_FACTOR_FAMILIES)

class FFmpegCommandBuilder:
    """Turns a conversion request into an ffmpeg argument list (without the binary)."""

    def __init__(self, tables: Optional[FormatTables] = None, platform: str = sys.platform):
        self.tables = tables or FormatTables()
        self.platform = platform

    def optimal_video_codec(self, container: str) -> str:
        codecs = self.tables.video_codecs.get(container)
        if not codecs:
            return self.tables.default_video_codec

        if self.platform in HARDWARE_PLATFORMS:
            hw_codec = next((c for c in codecs if HARDWARE_CODEC_MARKER in c), None)
            if hw_codec:
                return hw_codec

        return codecs[0]

    def optimal_audio_codec(self, container: str) -> str:
        codecs = self.tables.audio_codecs.get(container)
        if not codecs:
            return self.tables.default_audio_codec
        return codecs[0]

    def audio_codec_for_format(self, audio_format: str) -> str:
        return self.tables.audio_format_codecs.get(audio_format, self.tables.default_audio_codec)

    def build(
        self,
        kind: JobKind,
        input_path: Union[str, Path],
        output_path: Union[str, Path],
        options: ConversionOptions,
    ) -> List[str]:
        """Constructs the ffmpeg arguments.

        Order: input, stream selection, codecs, bitrate/quality, sample rate and
        channels, resolution/frame rate/filters, progress, overwrite, output.
        """
        if kind == JobKind.VIDEO:
            cmd = self._video_args(str(input_path), format_from_path(output_path), options)
        else:
            cmd = self._audio_args(kind, str(input_path), format_from_path(output_path), options)

        if options.report_progress:
            cmd.extend(["-progress", "pipe:1"])
        if options.overwrite:
            cmd.append("-y")

        cmd.append(str(output_path))
        return cmd

    def _audio_args(self, kind: JobKind, input_path: str, output_format: str, options: ConversionOptions) -> List[str]:
        cmd = ["-i", input_path]

        if kind == JobKind.AUDIO_EXTRACTION:
            cmd.append("-vn")

        cmd.extend(["-acodec", options.audio_codec or self.audio_codec_for_format(output_format)])

        if options.audio_bitrate:
            cmd.extend(["-ab", options.audio_bitrate])
        if options.audio_sample_rate:
            cmd.extend(["-ar", str(options.audio_sample_rate)])
        if options.audio_channels:
            cmd.extend(["-ac", str(options.audio_channels)])
        return cmd

    def _video_args(self, input_path: str, container: str, options: ConversionOptions) -> List[str]:
        video_codec = options.video_codec or self.optimal_video_codec(container)
        audio_codec = options.audio_codec or self.optimal_audio_codec(container)

        cmd = [
            "-i", input_path,
            "-c:v", video_codec,
            "-c:a", audio_codec,
        ]

        # Quality: constant rate factor for x264/x265, explicit bitrate otherwise
        if options.crf is not None and supports_rate_factor(video_codec):
            cmd.extend(["-crf", str(options.crf)])
        elif options.video_bitrate:
            cmd.extend(["-b:v", options.video_bitrate])

        if options.audio_bitrate:
            cmd.extend(["-b:a", options.audio_bitrate])

        if options.preset and supports_rate_factor(video_codec):
            cmd.extend(["-preset", options.preset])

        if options.video_resolution:
            cmd.extend(["-s", options.video_resolution])
        if options.video_frame_rate:
            cmd.extend(["-r", f"{options.video_frame_rate:g}"])
        if options.video_filters:
            cmd.extend(["-vf", options.video_filters])
        return cmd
