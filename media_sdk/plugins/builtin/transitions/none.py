# -*- coding: utf-8 -*-
from ....rendering.expressions import format_number
from ....rendering.graph_builder import CompileState, make_filter
from .base import Transition, normalize_filters


class NoneTransition(Transition):
    """Corte seco: o clipe novo cobre o anterior a partir do offset"""

    name = "none"

    def build_filter(self, duration: float, offset: float = 0.0):
        # Sem transição, não há filtro de mistura
        return None

    def compose(
        self, state: CompileState, current: str, incoming: str, duration: float, offset: float
    ) -> str:
        filters = normalize_filters(state)
        if offset:
            filters.append(make_filter("setpts", f"PTS-STARTPTS+{format_number(offset)}/TB"))
        incoming = state.graph.add_node([incoming], filters)
        return state.graph.add_node(
            [current, incoming], [make_filter("overlay", x=0, y=0, eof_action="pass")]
        )
