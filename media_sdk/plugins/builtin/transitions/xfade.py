# -*- coding: utf-8 -*-
from typing import Optional

from ....rendering.graph_builder import make_filter
from .base import Transition


class XfadeTransition(Transition):
    """Transição baseada no filtro xfade"""

    def __init__(self, name: str, xfade_name: Optional[str] = None):
        self.name = name
        self.xfade_name = xfade_name or name

    def build_filter(self, duration: float, offset: float = 0.0):
        # Exemplo: xfade=transition=fade:duration=1:offset=5
        return make_filter("xfade", transition=self.xfade_name, duration=duration, offset=offset)

    def __repr__(self):
        return f"XfadeTransition({self.name!r})"
