# -*- coding: utf-8 -*-
"""
Modelos de efeitos para o domínio
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Literal, Mapping, Protocol, Tuple

if TYPE_CHECKING:
    from ...rendering.graph_builder import Filter
    from .timeline import Timeline


@dataclass(frozen=True)
class EffectDescriptor:
    """Descritor de um efeito disponível no sistema"""

    name: str
    params: Mapping[str, str]  # nome_param: tipo_validacao
    target: Literal["video", "audio", "both"]
    description: str = ""
    timeline_support: bool = True  # aceita enable='...'


class FilterContext:
    """Contexto para construção de filtros FFmpeg"""

    def __init__(
        self,
        width: int,
        height: int,
        frame_rate: float,
        timeline_duration: float = 0.0,
        **kwargs,
    ):
        self.width = width
        self.height = height
        self.frame_rate = frame_rate
        self.timeline_duration = timeline_duration
        self.params = kwargs


@dataclass(frozen=True)
class FilterSnippet:
    """Cadeia de filtros produzida por um efeito"""

    filters: Tuple["Filter", ...] = field(default_factory=tuple)


class Effect(Protocol):
    """Interface para implementação de efeitos nomeados"""

    def build_filter(self, ctx: FilterContext) -> FilterSnippet:
        """Constrói o filtro FFmpeg para este efeito"""
        ...


class TimelineEffect(Protocol):
    """
    Capacidade aplicável a uma timeline via ``Timeline.apply``.

    Implementações retornam uma nova timeline; nunca alteram a recebida.
    """

    def apply_to(self, timeline: "Timeline") -> "Timeline":
        ...
