# -*- coding: utf-8 -*-
"""
media_sdk/application/services/compilation_service.py
Serviço de compilação: Timeline -> comando FFmpeg
"""

import re
from dataclasses import dataclass
from typing import Optional, Tuple

from ...domain.models.platform import get_platform_preset
from ...domain.models.timeline import Timeline
from ...infra.logging import get_logger
from ...infra.settings import SdkSettings, settings as default_settings
from ...rendering.cli_builder import CliBuilder, render_command, resolve_codecs
from ...rendering.graph_builder import GraphBuilder

_BITRATE_RE = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*([kKmM]?)\s*$")


def bitrate_to_kbps(bitrate: Optional[str], default: int) -> float:
    """'192k' -> 192, '8M' -> 8000; valores ausentes ou ilegíveis usam o padrão"""
    if not bitrate:
        return default
    match = _BITRATE_RE.match(str(bitrate))
    if not match:
        return default
    value = float(match.group(1))
    unit = match.group(2).lower()
    if unit == "m":
        return value * 1000
    if unit == "k":
        return value
    return value / 1000


@dataclass(frozen=True)
class CompiledCommand:
    """Resultado de uma compilação"""

    command: str
    args: Tuple[str, ...]
    width: int
    height: int
    aspect_ratio: Optional[str]
    duration: float
    estimated_size_bytes: int


class CompilationService:
    """Orquestra GraphBuilder e CliBuilder; não executa nada"""

    def __init__(self, settings: SdkSettings = None):
        self.settings = settings or default_settings
        self.logger = get_logger("CompilationService")
        self.graph_builder = GraphBuilder(self.settings)
        self.cli_builder = CliBuilder()

    def compile(self, timeline: Timeline, output_path: str) -> CompiledCommand:
        self.logger.info(
            "Compilando timeline (%d layers) para %s", len(timeline.layers), output_path
        )
        graph = self.graph_builder.build(timeline)
        args = self.cli_builder.make_command(graph, output_path, timeline.options, self.settings)
        command = render_command(args)

        width, height, _ = self.graph_builder.resolve_canvas(timeline)
        duration = timeline.get_duration(self.settings)
        compiled = CompiledCommand(
            command=command,
            args=tuple(str(a) for a in args),
            width=width,
            height=height,
            aspect_ratio=self._aspect_ratio(timeline),
            duration=duration,
            estimated_size_bytes=self.estimate_size(timeline, duration),
        )
        self.logger.debug("Comando compilado: %s", command)
        return compiled

    def _aspect_ratio(self, timeline: Timeline) -> Optional[str]:
        if timeline.options.aspect_ratio:
            return timeline.options.aspect_ratio
        preset = get_platform_preset(timeline.options.platform)
        return preset.aspect_ratio if preset else None

    def estimate_size(self, timeline: Timeline, duration: float) -> int:
        """(kbps de vídeo + kbps de áudio) * 1000 / 8 * duração"""
        codecs = resolve_codecs(timeline.options, self.settings)
        video_kbps = bitrate_to_kbps(codecs.video_bitrate_hint, self.settings.default_video_bitrate_kbps)
        audio_kbps = bitrate_to_kbps(codecs.audio_bitrate, self.settings.default_audio_bitrate_kbps)
        return int((video_kbps + audio_kbps) * 1000 / 8 * duration)
