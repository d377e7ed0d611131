# -*- coding: utf-8 -*-
from abc import ABC, abstractmethod
from typing import List, Optional

from ....rendering.graph_builder import CompileState, Filter, make_filter


def normalize_filters(state: CompileState) -> List[Filter]:
    """Iguala tamanho, SAR, fps e formato dos dois lados de uma transição"""
    w, h = state.width, state.height
    return [
        make_filter("scale", w, h, force_original_aspect_ratio="decrease"),
        make_filter("pad", w, h, "(ow-iw)/2", "(oh-ih)/2"),
        make_filter("setsar", 1),
        make_filter("fps", state.frame_rate),
        make_filter("format", state.settings.pixel_format),
    ]


class Transition(ABC):
    """Classe base para transições de vídeo."""

    name: str

    @abstractmethod
    def build_filter(self, duration: float, offset: float = 0.0) -> Optional[Filter]:
        """Retorna o filtro FFmpeg da transição (None quando não há filtro)."""

    def compose(
        self, state: CompileState, current: str, incoming: str, duration: float, offset: float
    ) -> str:
        """Une o pad corrente ao clipe que entra; retorna o novo pad de vídeo"""
        graph = state.graph
        norm = normalize_filters(state)
        current = graph.add_node([current], norm)
        incoming = graph.add_node([incoming], norm)
        return graph.add_node([current, incoming], [self.build_filter(duration, offset)])
