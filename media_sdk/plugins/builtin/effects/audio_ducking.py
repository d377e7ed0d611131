# -*- coding: utf-8 -*-
"""
Ducking de áudio: abaixa a trilha de fundo enquanto a voz fala

Modos:
- manual: expressão ``volume`` por partes, uma região por vez
- sidechain: ``sidechaincompress`` com a voz como sinal de controle
- automatic: ``agate`` na voz antes do ``sidechaincompress``

Regiões manuais sobrepostas: vale a última região listada.
"""

import math
from dataclasses import dataclass
from typing import Any, Iterable, List, Optional, Tuple

from ....domain.errors import TimelineValidationError
from ....domain.models.layers import AudioDuckingLayer, DuckingRegion
from ....infra.logging import get_logger
from ....rendering.expressions import format_number
from ....rendering.graph_builder import CompileState, Expr, Filter, make_filter


def _fn(value: float) -> str:
    return format_number(value)


def region_expression(region: DuckingRegion, layer: AudioDuckingLayer, otherwise: str) -> str:
    """
    Volume de uma região: desce em fade_in_time até o início, segura o nível
    até end + hold_time e volta em fade_out_time.
    """
    level = region.level if region.level is not None else layer.ducking_level
    fade_start = max(region.start - layer.fade_in_time, 0.0)
    hold_end = region.end + layer.hold_time
    restore_end = hold_end + layer.fade_out_time
    lv = _fn(level)
    drop = _fn(1 - level)

    body = lv
    if layer.fade_out_time > 0:
        rise = f"{lv}+{drop}*(t-{_fn(hold_end)})/{_fn(layer.fade_out_time)}"
        body = f"if(lt(t,{_fn(hold_end)}),{lv},{rise})"
    fade_in = region.start - fade_start
    if fade_in > 0:
        fall = f"1-{drop}*(t-{_fn(fade_start)})/{_fn(fade_in)}"
        body = f"if(lt(t,{_fn(region.start)}),{fall},{body})"
    return f"if(between(t,{_fn(fade_start)},{_fn(restore_end)}),{body},{otherwise})"


def manual_volume_expression(layer: AudioDuckingLayer) -> str:
    """Aninha as regiões; a última listada fica por fora e por isso prevalece"""
    expr = "1"
    for region in layer.regions:
        expr = region_expression(region, layer, expr)
    return expr


# limites (ms) aceitos pelo sidechaincompress e pelo agate
COMPRESS_ATTACK_MS = (0.01, 2000)
RELEASE_MS = (0.01, 9000)
GATE_ATTACK_MS = (0.01, 9000)


def _ms(seconds: float, limits: Tuple[float, float]) -> float:
    low, high = limits
    return round(min(max(seconds * 1000, low), high), 3)


def sidechain_filter(layer: AudioDuckingLayer, threshold: float, ratio: float) -> Filter:
    makeup = min(max(1 / layer.ducking_level, 1), 64)
    return make_filter(
        "sidechaincompress",
        threshold=threshold,
        ratio=ratio,
        attack=_ms(layer.fade_in_time, COMPRESS_ATTACK_MS),
        release=_ms(layer.fade_out_time, RELEASE_MS),
        makeup=round(makeup, 3),
        knee=2.5,
        detection="peak",
    )


class AudioDuckingSynthesizer:
    """Reescreve os pads de áudio pendentes aplicando ducking"""

    def __init__(self):
        self.logger = get_logger("AudioDuckingSynthesizer")

    def synthesize(self, layer: AudioDuckingLayer, state: CompileState) -> None:
        pads = state.audio
        graph = state.graph

        if layer.mode == "manual":
            if layer.background_track >= len(pads):
                self.logger.warning(
                    "Ducking ignorado: track de fundo %d inexistente (%d pads de áudio)",
                    layer.background_track,
                    len(pads),
                )
                return
            volume = make_filter("volume", Expr(manual_volume_expression(layer)), eval="frame")
            pads[layer.background_track] = graph.add_node(
                [pads[layer.background_track]], [volume], prefix="a"
            )
            return

        if len(pads) < 2 or max(layer.background_track, layer.voice_track) >= len(pads):
            self.logger.warning(
                "Ducking %s exige ao menos 2 tracks de áudio; timeline inalterada", layer.mode
            )
            return

        voice = pads[layer.voice_track]
        voice_filters: List[Filter] = []
        if layer.voice_boost != 1:
            voice_filters.append(make_filter("volume", layer.voice_boost))
        voice_filters.append(make_filter("asplit", 2))
        key, voice_out = graph.add_node([voice], voice_filters, prefix="a", outputs=2)

        key_filters: List[Filter] = []
        if layer.frequency_range is not None:
            low, high = layer.frequency_range
            key_filters += [make_filter("highpass", f=low), make_filter("lowpass", f=high)]

        if layer.mode == "automatic":
            key_filters.append(
                make_filter(
                    "agate",
                    threshold=round(math.pow(10, layer.detection_threshold / 20), 6),
                    attack=_ms(layer.anticipation, GATE_ATTACK_MS),
                    release=_ms(layer.hold_time, RELEASE_MS),
                    detection="peak",
                )
            )
            compress = sidechain_filter(layer, threshold=0.1, ratio=10)
        else:
            compress = sidechain_filter(layer, threshold=0.05, ratio=layer.compressor_ratio)

        if key_filters:
            key = graph.add_node([key], key_filters, prefix="a")

        pads[layer.background_track] = graph.add_node(
            [pads[layer.background_track], key], [compress], prefix="a"
        )
        pads[layer.voice_track] = voice_out


def coerce_regions(regions: Iterable[Any]) -> Tuple[DuckingRegion, ...]:
    """Aceita DuckingRegion, dicts {start,end[,level]} ou tuplas (start, end[, level])"""
    result = []
    for region in regions:
        if isinstance(region, DuckingRegion):
            result.append(region)
        elif isinstance(region, dict):
            result.append(DuckingRegion(**region))
        elif isinstance(region, (tuple, list)) and len(region) in (2, 3):
            result.append(DuckingRegion(*region))
        else:
            raise TimelineValidationError(f"região de ducking inválida: {region!r}")
    return tuple(result)


@dataclass(frozen=True)
class AudioDucking:
    """Capacidade de ducking aplicável via ``Timeline.apply``"""

    mode: str = "manual"
    regions: Tuple[Any, ...] = ()
    ducking_level: float = 0.3
    fade_in_time: float = 0.3
    fade_out_time: float = 0.5
    hold_time: float = 0.1
    anticipation: float = 0.1
    detection_threshold: float = -20.0
    compressor_ratio: float = 4.0
    background_track: int = 0
    voice_track: int = 1
    voice_boost: float = 1.0
    frequency_range: Optional[Tuple[float, float]] = None

    def to_layer(self) -> AudioDuckingLayer:
        return AudioDuckingLayer(
            mode=self.mode,
            regions=coerce_regions(self.regions),
            ducking_level=self.ducking_level,
            fade_in_time=self.fade_in_time,
            fade_out_time=self.fade_out_time,
            hold_time=self.hold_time,
            anticipation=self.anticipation,
            detection_threshold=self.detection_threshold,
            compressor_ratio=self.compressor_ratio,
            background_track=self.background_track,
            voice_track=self.voice_track,
            voice_boost=self.voice_boost,
            frequency_range=tuple(self.frequency_range) if self.frequency_range else None,
        )

    def apply_to(self, timeline):
        return timeline.add_layer(self.to_layer())


def duck_at(regions: Iterable[Any], level: float = 0.3, **kwargs) -> AudioDucking:
    """Ducking manual nas regiões dadas"""
    return AudioDucking(mode="manual", regions=tuple(regions), ducking_level=level, **kwargs)


def dialogue_mix(level: float = 0.3, **kwargs) -> AudioDucking:
    """Música (track 0) abaixa sob o diálogo (track 1) via sidechain"""
    kwargs.setdefault("frequency_range", (300.0, 3400.0))
    return AudioDucking(mode="sidechain", ducking_level=level, **kwargs)


def podcast_mix(level: float = 0.2, **kwargs) -> AudioDucking:
    """Detecção automática de voz com resposta rápida"""
    kwargs.setdefault("fade_in_time", 0.1)
    kwargs.setdefault("fade_out_time", 0.8)
    kwargs.setdefault("voice_boost", 1.2)
    return AudioDucking(mode="automatic", ducking_level=level, **kwargs)


def music_bed(level: float = 0.15, **kwargs) -> AudioDucking:
    """Trilha bem baixa sob narração contínua"""
    kwargs.setdefault("fade_in_time", 0.5)
    kwargs.setdefault("fade_out_time", 1.0)
    return AudioDucking(mode="sidechain", ducking_level=level, **kwargs)
