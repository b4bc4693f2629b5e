from unittest.mock import patch
from typer.testing import CliRunner
from mjo.domain.errors import ProcessError
from mjo.domain.models import MediaInfo
from mjo.main import app

runner = CliRunner()

def test_formats_lists_tables(tmp_path):
    result = runner.invoke(app, ["formats", "--config", str(tmp_path / "none.yaml")])

    assert result.exit_code == 0
    assert "Audio: mp3, wav" in result.output
    assert "webm: video=libvpx, libvpx-vp9 audio=vorbis, opus" in result.output

def test_convert_rejects_missing_input(tmp_path):
    result = runner.invoke(app, ["convert-audio", str(tmp_path / "missing.wav"), str(tmp_path / "out.mp3")])

    assert result.exit_code == 1
    assert "does not exist" in result.output

def test_info_prints_media_json(tmp_path):
    with patch("mjo.infrastructure.media_info.FFmpegMediaProbe.get_media_info", return_value=MediaInfo(duration=4.0, bitrate=320)):
        result = runner.invoke(app, ["info", "clip.mp3", "--config", str(tmp_path / "none.yaml")])

    assert result.exit_code == 0
    assert '"duration": 4.0' in result.output
    assert '"bitrate": 320' in result.output

def test_info_failure_exits_nonzero(tmp_path):
    error = ProcessError(1, "clip.mp3: No such file or directory")
    with patch("mjo.infrastructure.media_info.FFmpegMediaProbe.get_media_info", side_effect=error):
        result = runner.invoke(app, ["info", "clip.mp3", "--config", str(tmp_path / "none.yaml")])

    assert result.exit_code == 1
    assert "ffmpeg exited with code 1" in result.output

def test_convert_audio_end_to_end(tmp_path, fake_ffmpeg):
    ffmpeg = fake_ffmpeg("""
sys.stderr.write("  Duration: 00:00:01.00\\n")
with open(out, "w") as f:
    f.write("encoded")
""")
    config_file = tmp_path / "mjo.yaml"
    config_file.write_text(f"general:\n  ffmpeg_path: {ffmpeg}\n")
    source = tmp_path / "in.wav"
    source.write_text("raw")

    result = runner.invoke(app, [
        "convert-audio", str(source), str(tmp_path / "out.mp3"),
        "--config", str(config_file), "--audio-bitrate", "192k",
    ])

    assert result.exit_code == 0, result.output
    assert (tmp_path / "out.mp3").read_text() == "encoded"

def test_convert_failure_exits_nonzero(tmp_path, fake_ffmpeg):
    ffmpeg = fake_ffmpeg("sys.exit(1)\n")
    config_file = tmp_path / "mjo.yaml"
    config_file.write_text(f"general:\n  ffmpeg_path: {ffmpeg}\n")
    source = tmp_path / "in.mov"
    source.write_text("raw")

    result = runner.invoke(app, ["convert-video", str(source), str(tmp_path / "out.mp4"), "--config", str(config_file)])

    assert result.exit_code == 1
