# -*- coding: utf-8 -*-
"""
media_sdk/application/services/validation_service.py
Validação de timelines por estratégias nomeadas

Cada estratégia é uma função ``func(timeline, **params)`` registrada com
``@validation_strategy`` e referenciada por um ``StrategyRef`` serializável.
Ela devolve uma lista de mensagens de erro (vazia quando a timeline passa).
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from ...domain.models.layers import (
    AudioLayer,
    ChromaKeyLayer,
    ImageLayer,
    PanZoomLayer,
    TransitionLayer,
    VideoLayer,
)
from ...domain.models.platform import PLATFORM_PRESETS, get_platform_preset, parse_aspect_ratio
from ...domain.models.timeline import Timeline
from ...infra.logging import get_logger
from ...infra.plugins import plugin_registry, validation_strategy

VISUAL_LAYERS = (VideoLayer, ImageLayer, PanZoomLayer, ChromaKeyLayer, TransitionLayer)

DEFAULT_STRATEGIES = ("has_visual",)


@dataclass(frozen=True)
class StrategyRef:
    """Referência serializável a uma estratégia registrada"""

    name: str
    params: Mapping[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "params": dict(self.params)}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "StrategyRef":
        return cls(name=data["name"], params=dict(data.get("params") or {}))


@dataclass
class ValidationReport:
    """Resultado da validação"""

    is_valid: bool = True
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    suggestions: List[str] = field(default_factory=list)


@validation_strategy("has_visual", "A timeline tem ao menos um layer visual de mídia")
def has_visual(timeline: Timeline) -> List[str]:
    if any(isinstance(layer, VISUAL_LAYERS) for layer in timeline.layers):
        return []
    return ["timeline sem vídeo ou imagem; um canvas preto será usado"]


@validation_strategy("has_audio", "A timeline produz áudio")
def has_audio(timeline: Timeline) -> List[str]:
    for layer in timeline.layers:
        if isinstance(layer, AudioLayer):
            return []
        if isinstance(layer, (VideoLayer, TransitionLayer)) and not layer.mute:
            return []
    return ["timeline sem faixa de áudio"]


@validation_strategy("max_duration", "Duração total não excede o limite (seconds)")
def max_duration(timeline: Timeline, seconds: float) -> List[str]:
    duration = timeline.get_duration()
    if duration > seconds:
        return [f"duração {duration:.1f}s excede o máximo de {seconds}s"]
    return []


@validation_strategy("min_duration", "Duração total atinge o mínimo (seconds)")
def min_duration(timeline: Timeline, seconds: float) -> List[str]:
    duration = timeline.get_duration()
    if duration < seconds:
        return [f"duração {duration:.1f}s abaixo do mínimo de {seconds}s"]
    return []


@validation_strategy("platform_aspect", "Aspect ratio compatível com a plataforma (platform)")
def platform_aspect(timeline: Timeline, platform: str) -> List[str]:
    preset = get_platform_preset(platform)
    if preset is None:
        return [f"plataforma desconhecida: {platform!r}"]
    current = timeline.options.aspect_ratio
    if current is None:
        return [f"aspect ratio não definido; {platform} espera {preset.aspect_ratio}"]
    w, h = parse_aspect_ratio(current)
    pw, ph = parse_aspect_ratio(preset.aspect_ratio)
    if abs(w / h - pw / ph) > 0.01:
        return [f"aspect ratio {current} incompatível com {platform} ({preset.aspect_ratio})"]
    return []


# limites usados por validate_for_platform
PLATFORM_MAX_DURATION = {
    "tiktok": 600,
    "youtube-shorts": 60,
    "instagram": 90,
    "instagram-reels": 90,
    "instagram-story": 60,
    "twitter": 140,
}


def platform_refs(platform: str) -> List[StrategyRef]:
    refs = [StrategyRef("has_visual"), StrategyRef("platform_aspect", {"platform": platform})]
    limit = PLATFORM_MAX_DURATION.get(platform)
    if limit is not None:
        refs.append(StrategyRef("max_duration", {"seconds": limit}))
    return refs


StrategySpec = Union[str, StrategyRef, Mapping[str, Any]]


def _coerce_ref(spec: StrategySpec) -> StrategyRef:
    if isinstance(spec, StrategyRef):
        return spec
    if isinstance(spec, str):
        return StrategyRef(spec)
    return StrategyRef.from_dict(spec)


class ValidationService:
    """Executa estratégias de validação sobre uma timeline"""

    # estratégias cujo resultado é apenas aviso
    ADVISORY = {"has_visual", "has_audio"}

    def __init__(self):
        self.logger = get_logger("ValidationService")

    def validate(
        self, timeline: Timeline, strategies: Optional[Sequence[StrategySpec]] = None
    ) -> ValidationReport:
        refs = [_coerce_ref(s) for s in (strategies or DEFAULT_STRATEGIES)]
        report = ValidationReport()

        for ref in refs:
            func = plugin_registry.get_strategy(ref.name)
            messages = func(timeline, **dict(ref.params))
            if ref.name in self.ADVISORY:
                report.warnings.extend(messages)
            else:
                report.errors.extend(messages)

        for message in report.errors:
            if "aspect ratio" in message:
                platform = next(
                    (r.params.get("platform") for r in refs if r.name == "platform_aspect"), None
                )
                if platform in PLATFORM_PRESETS:
                    report.suggestions.append(f"use timeline.set_platform({platform!r})")
                    break

        report.is_valid = not report.errors
        self.logger.info(
            "Validação: %d erro(s), %d aviso(s)", len(report.errors), len(report.warnings)
        )
        return report
