# -*- coding: utf-8 -*-
"""
Cadeia de filtros de áudio por layer
"""

from typing import List, Optional

from ....domain.models.layers import FULL, AudioLayer
from ....infra.logging import get_logger
from ....rendering.expressions import format_number, seconds_to_ms
from ....rendering.graph_builder import CompileState, Filter, InputSpec, input_directives, make_filter

SAMPLE_RATE = 44100


def adelay_filter(seconds: float) -> Filter:
    """Atraso aplicado aos dois canais"""
    ms = seconds_to_ms(seconds)
    return make_filter("adelay", f"{ms}|{ms}")


def video_audio_filters(volume: Optional[float], delay: float) -> List[Filter]:
    filters = []
    if volume is not None:
        filters.append(make_filter("volume", volume))
    if delay:
        filters.append(adelay_filter(delay))
    return filters


def _played_length(layer: AudioLayer) -> Optional[float]:
    """Duração efetivamente tocada, quando conhecida"""
    if layer.duration != FULL:
        return layer.duration
    if layer.trim_end is not None:
        return layer.trim_end - (layer.trim_start or 0)
    if layer.source_duration:
        return layer.source_duration - (layer.trim_start or 0)
    return None


class AudioSynthesizer:
    """Transforma um AudioLayer em um pad de áudio pendente"""

    def __init__(self):
        self.logger = get_logger("AudioSynthesizer")

    def filters_for(self, layer: AudioLayer) -> List[Filter]:
        filters: List[Filter] = []
        if layer.volume is not None:
            filters.append(make_filter("volume", layer.volume))
        if layer.fade_in:
            filters.append(make_filter("afade", t="in", st=0, d=layer.fade_in))
        if layer.fade_out:
            length = _played_length(layer)
            if length is None:
                self.logger.warning(
                    "fade_out ignorado em %s: duração desconhecida", layer.source
                )
            else:
                start = max(length - layer.fade_out, 0)
                filters.append(make_filter("afade", t="out", st=start, d=layer.fade_out))
        if layer.pitch:
            filters.append(make_filter("asetrate", f"{SAMPLE_RATE}*{format_number(layer.pitch)}"))
            filters.append(make_filter("aresample", SAMPLE_RATE))
        if layer.tempo:
            filters.append(make_filter("atempo", layer.tempo))
        if layer.lowpass:
            filters.append(make_filter("lowpass", f=layer.lowpass))
        if layer.highpass:
            filters.append(make_filter("highpass", f=layer.highpass))
        if layer.echo is not None:
            filters.append(
                make_filter("aecho", 0.8, 0.9, seconds_to_ms(layer.echo.delay), layer.echo.decay)
            )
        if layer.reverb:
            filters.append(make_filter("aecho", 0.8, 0.88, 60, 0.4))
        if layer.start_time:
            filters.append(adelay_filter(layer.start_time))
        return filters

    def synthesize(self, layer: AudioLayer, state: CompileState) -> None:
        options = input_directives(
            layer.trim_start,
            layer.trim_end,
            layer.duration,
            loop=layer.loop,
            loop_length=state.duration or state.settings.default_audio_duration,
        )
        index = state.graph.add_input(InputSpec(layer.source, options, kind="audio"))
        state.add_audio(f"{index}:a", self.filters_for(layer))
