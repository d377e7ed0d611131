# -*- coding: utf-8 -*-
"""
Presets de plataforma e de codec
"""

from __future__ import annotations
import re
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from ..errors import TimelineValidationError


@dataclass(frozen=True)
class CodecPreset:
    """Configuração de codec recomendada"""

    video_codec: str = "libx264"
    audio_codec: str = "aac"
    crf: int = 23
    preset: str = "medium"
    audio_bitrate: str = "128k"
    video_bitrate: Optional[str] = None


@dataclass(frozen=True)
class PlatformPreset:
    """Canvas alvo de uma plataforma"""

    name: str
    width: int
    height: int
    aspect_ratio: str
    codec: CodecPreset = CodecPreset()

    @property
    def size(self) -> Tuple[int, int]:
        return self.width, self.height


CODEC_PRESETS: Dict[str, CodecPreset] = {
    "youtube": CodecPreset(crf=23, preset="medium", audio_bitrate="192k", video_bitrate="8M"),
    "instagram": CodecPreset(crf=23, preset="fast", audio_bitrate="128k", video_bitrate="5M"),
    "tiktok": CodecPreset(crf=25, preset="fast", audio_bitrate="128k", video_bitrate="4M"),
    "web": CodecPreset(crf=28, preset="fast", audio_bitrate="96k", video_bitrate="2M"),
    "archive": CodecPreset(crf=18, preset="slow", audio_bitrate="320k", video_bitrate="20M"),
}

PLATFORM_PRESETS: Dict[str, PlatformPreset] = {
    "tiktok": PlatformPreset("tiktok", 1080, 1920, "9:16", CODEC_PRESETS["tiktok"]),
    "youtube": PlatformPreset("youtube", 1920, 1080, "16:9", CODEC_PRESETS["youtube"]),
    "youtube-shorts": PlatformPreset("youtube-shorts", 1080, 1920, "9:16", CODEC_PRESETS["tiktok"]),
    "instagram": PlatformPreset("instagram", 1080, 1920, "9:16", CODEC_PRESETS["instagram"]),
    "instagram-reels": PlatformPreset("instagram-reels", 1080, 1920, "9:16", CODEC_PRESETS["instagram"]),
    "instagram-story": PlatformPreset("instagram-story", 1080, 1920, "9:16", CODEC_PRESETS["instagram"]),
    "instagram-square": PlatformPreset("instagram-square", 1080, 1080, "1:1", CODEC_PRESETS["instagram"]),
    "instagram-feed": PlatformPreset("instagram-feed", 1080, 1080, "1:1", CODEC_PRESETS["instagram"]),
    "twitter": PlatformPreset("twitter", 1280, 720, "16:9", CODEC_PRESETS["web"]),
    "linkedin": PlatformPreset("linkedin", 1920, 1080, "16:9", CODEC_PRESETS["youtube"]),
    "facebook": PlatformPreset("facebook", 1280, 720, "16:9", CODEC_PRESETS["web"]),
    "square": PlatformPreset("square", 1080, 1080, "1:1"),
    "portrait": PlatformPreset("portrait", 1080, 1920, "9:16"),
    "landscape": PlatformPreset("landscape", 1920, 1080, "16:9"),
}

_RATIO_RE = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*:\s*(\d+(?:\.\d+)?)\s*$")


def get_platform_preset(name: Optional[str]) -> Optional[PlatformPreset]:
    """Busca um preset pelo nome; nomes desconhecidos retornam None"""
    if not name:
        return None
    return PLATFORM_PRESETS.get(name.lower())


def parse_aspect_ratio(ratio: str) -> Tuple[float, float]:
    """Valida e decompõe 'W:H'"""
    match = _RATIO_RE.match(ratio or "")
    if not match:
        raise TimelineValidationError(f"aspect ratio inválido: {ratio!r} (use 'W:H')")
    w, h = float(match.group(1)), float(match.group(2))
    if w <= 0 or h <= 0:
        raise TimelineValidationError(f"aspect ratio inválido: {ratio!r}")
    return w, h


def canvas_for_aspect_ratio(ratio: str, short_side: int = 1080) -> Tuple[int, int]:
    """
    Calcula o canvas de um aspect ratio: lado menor fixo, lado maior par.
    """
    w, h = parse_aspect_ratio(ratio)
    if w >= h:
        long_side = int(round(short_side * w / h))
        long_side += long_side % 2
        return long_side, short_side
    long_side = int(round(short_side * h / w))
    long_side += long_side % 2
    return short_side, long_side
