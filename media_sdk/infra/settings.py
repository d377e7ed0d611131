# -*- coding: utf-8 -*-
"""
Settings management using pydantic-settings
"""

import json
from pathlib import Path

from pydantic_settings import BaseSettings


class SdkSettings(BaseSettings):
    """Padrões usados pelo compilador quando a timeline não define o valor"""

    ffmpeg_binary: str = "ffmpeg"
    default_frame_rate: int = 25
    canvas_width: int = 1920
    canvas_height: int = 1080
    video_codec: str = "libx264"
    audio_codec: str = "aac"
    crf: int = 23
    preset: str = "medium"
    pixel_format: str = "yuv420p"
    default_video_duration: float = 30.0
    default_audio_duration: float = 30.0
    default_layer_duration: float = 5.0
    default_video_bitrate_kbps: int = 5000
    default_audio_bitrate_kbps: int = 128

    class Config:
        env_prefix = "MEDIA_SDK_"
        env_file = ".env"
        case_sensitive = False


def load_settings(config_path: Path = Path("media_sdk.json")) -> SdkSettings:
    """Carrega as configurações do SDK"""
    # Primeiro tenta o arquivo JSON local
    if config_path.exists():
        with open(config_path, "r", encoding="utf-8") as f:
            config_data = json.load(f)
        return SdkSettings(**config_data)

    # Senão carrega das variáveis de ambiente ou padrões
    return SdkSettings()


# Instância global das configurações
settings = load_settings()
