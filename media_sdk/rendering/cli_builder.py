# -*- coding: utf-8 -*-
"""
Construção de comandos FFmpeg a partir do filtergraph
"""

from __future__ import annotations
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, List, Optional, Sequence

from ..domain.models.platform import CODEC_PRESETS, get_platform_preset
from ..infra.logging import get_logger
from .expressions import format_number, shell_quote
from .graph_builder import FilterGraph, is_stream_ref

if TYPE_CHECKING:
    from ..domain.models.timeline import TimelineOptions
    from ..infra.settings import SdkSettings

_SAFE_TOKEN_RE = re.compile(r"^[\w@%+=:,./-]+$")


class Quoted(str):
    """Argumento sempre renderizado entre aspas (caminhos e filtergraph)"""


@dataclass(frozen=True)
class CodecChoice:
    """Codecs e qualidade efetivos de uma compilação"""

    video_codec: str
    audio_codec: str
    crf: Optional[int]
    preset: Optional[str]
    video_bitrate: Optional[str]
    audio_bitrate: Optional[str]
    # bitrate sugerido pelos presets, usado só para estimativas
    video_bitrate_hint: Optional[str] = None


def resolve_codecs(options: "TimelineOptions", settings: "SdkSettings") -> CodecChoice:
    """
    Precedência: valores explícitos da timeline, preset de codec, preset de
    plataforma e por fim as settings.
    """
    hint = None
    platform = get_platform_preset(options.platform)
    if platform is not None:
        hint = platform.codec
    if options.codec_preset:
        hint = CODEC_PRESETS[options.codec_preset]

    return CodecChoice(
        video_codec=options.video_codec or (hint.video_codec if hint else settings.video_codec),
        audio_codec=options.audio_codec or (hint.audio_codec if hint else settings.audio_codec),
        crf=options.crf if options.crf is not None else (hint.crf if hint else settings.crf),
        preset=options.preset or (hint.preset if hint else settings.preset),
        video_bitrate=options.video_bitrate,
        audio_bitrate=options.audio_bitrate or (hint.audio_bitrate if hint else None),
        video_bitrate_hint=options.video_bitrate or (hint.video_bitrate if hint else None),
    )


def render_command(args: Sequence[str]) -> str:
    """Junta os argumentos em uma linha de shell determinística"""
    parts = []
    for arg in args:
        if isinstance(arg, Quoted) or not _SAFE_TOKEN_RE.match(arg):
            parts.append(shell_quote(arg))
        else:
            parts.append(arg)
    return " ".join(parts)


class CliBuilder:
    """Constrói comandos FFmpeg a partir do filtergraph"""

    def __init__(self):
        self.logger = get_logger("CliBuilder")

    def make_command(
        self,
        graph: FilterGraph,
        out_path: str,
        options: "TimelineOptions",
        settings: "SdkSettings",
    ) -> List[str]:
        """Gera a lista de argumentos do comando FFmpeg completo"""
        self.logger.info("Construindo comando FFmpeg para %d inputs", len(graph.inputs))

        cmd: List[str] = [settings.ffmpeg_binary]

        # Hardware acceleration primeiro, se especificado
        if options.hardware_acceleration:
            cmd.extend(["-hwaccel", options.hardware_acceleration])

        for spec in graph.inputs:
            cmd.extend(spec.options)
            cmd.extend(["-i", Quoted(spec.path)])

        if graph.nodes:
            cmd.extend(["-filter_complex", Quoted(graph.to_string())])

        if graph.video_out is not None:
            cmd.extend(["-map", self._map_video(graph.video_out)])
        if graph.audio_out is not None:
            cmd.extend(["-map", self._map_audio(graph, graph.audio_out)])

        if options.trim_start is not None or options.trim_end is not None:
            start = options.trim_start or 0
            cmd.extend(["-ss", format_number(start)])
            if options.trim_end is not None:
                length = options.trim_end - start
                if options.duration is not None:
                    length = min(length, options.duration)
                cmd.extend(["-t", format_number(length)])
        elif options.duration is not None:
            cmd.extend(["-t", format_number(options.duration)])

        if options.frame_rate:
            cmd.extend(["-r", format_number(options.frame_rate)])
        if options.aspect_ratio:
            cmd.extend(["-aspect", options.aspect_ratio])

        codecs = resolve_codecs(options, settings)
        if graph.video_out is not None:
            cmd.extend(["-c:v", codecs.video_codec])
            if codecs.crf is not None:
                cmd.extend(["-crf", str(codecs.crf)])
            if codecs.preset:
                cmd.extend(["-preset", codecs.preset])
            if codecs.video_bitrate:
                cmd.extend(["-b:v", codecs.video_bitrate])
        if graph.audio_out is not None:
            cmd.extend(["-c:a", codecs.audio_codec])
            if codecs.audio_bitrate:
                cmd.extend(["-b:a", codecs.audio_bitrate])

        if graph.video_out is not None:
            cmd.extend(["-pix_fmt", settings.pixel_format])
        cmd.extend(["-y", Quoted(str(out_path))])

        self.logger.debug("Comando FFmpeg: %s", " ".join(cmd))
        return cmd

    def _map_video(self, pad: str) -> str:
        return pad if is_stream_ref(pad) else f"[{pad}]"

    def _map_audio(self, graph: FilterGraph, pad: str) -> str:
        if not is_stream_ref(pad):
            return f"[{pad}]"
        index = int(pad.split(":")[0])
        # vídeos podem não ter faixa de áudio
        if graph.inputs[index].kind == "audio":
            return pad
        return f"{pad}?"
