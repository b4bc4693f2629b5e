from pathlib import Path
from typing import List, Dict, Optional
from pydantic import BaseModel, Field, field_validator
from mjo.config import formats
from mjo.domain.models import ConversionOptions

class GeneralConfig(BaseModel):
    ffmpeg_path: str = "ffmpeg"
    log_dir: Optional[Path] = None
    debug: bool = False

class FormatTables(BaseModel):
    audio_formats: List[str] = Field(default_factory=lambda: list(formats.SUPPORTED_AUDIO_FORMATS))
    video_formats: List[str] = Field(default_factory=lambda: list(formats.SUPPORTED_VIDEO_FORMATS))
    video_codecs: Dict[str, List[str]] = Field(default_factory=lambda: {k: list(v) for k, v in formats.VIDEO_CODECS.items()})
    audio_codecs: Dict[str, List[str]] = Field(default_factory=lambda: {k: list(v) for k, v in formats.AUDIO_CODECS.items()})
    audio_format_codecs: Dict[str, str] = Field(default_factory=lambda: dict(formats.AUDIO_FORMAT_CODECS))
    default_video_codec: str = formats.DEFAULT_VIDEO_CODEC
    default_audio_codec: str = formats.DEFAULT_AUDIO_CODEC

    @field_validator('audio_formats', 'video_formats')
    @classmethod
    def normalize_extensions(cls, v: List[str]) -> List[str]:
        return [ext.lower().lstrip('.') for ext in v]

class AppConfig(BaseModel):
    general: GeneralConfig = Field(default_factory=GeneralConfig)
    defaults: ConversionOptions = Field(default_factory=ConversionOptions)
    formats: FormatTables = Field(default_factory=FormatTables)
