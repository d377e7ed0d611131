# -*- coding: utf-8 -*-
"""
Registro de transições e sintetizador de TransitionLayer
"""

from typing import Dict

from ....domain.errors import TimelineValidationError
from ....domain.models.layers import TransitionLayer
from ....infra.logging import get_logger
from ....rendering.graph_builder import CompileState, InputSpec
from ..effects.audio import adelay_filter
from .base import Transition
from .none import NoneTransition
from .xfade import XfadeTransition

XFADE_NAMES = (
    "fade",
    "fadeblack",
    "fadewhite",
    "dissolve",
    "smoothleft",
    "smoothright",
    "smoothup",
    "smoothdown",
    "circleopen",
    "circleclose",
    "wipeleft",
    "wiperight",
    "wipeup",
    "wipedown",
    "slideleft",
    "slideright",
    "slideup",
    "slidedown",
    "zoomin",
    "pixelize",
    "radial",
    "distance",
)

TRANSITIONS: Dict[str, Transition] = {name: XfadeTransition(name) for name in XFADE_NAMES}
TRANSITIONS["crossfade"] = XfadeTransition("crossfade", "fade")
TRANSITIONS["none"] = NoneTransition()


def get_transition(name: str) -> Transition:
    transition = TRANSITIONS.get(name)
    if transition is None:
        raise TimelineValidationError(
            f"transição desconhecida: {name!r} (opções: {', '.join(sorted(TRANSITIONS))})"
        )
    return transition


class TransitionSynthesizer:
    """Encadeia um clipe novo ao vídeo corrente através de uma transição"""

    def __init__(self):
        self.logger = get_logger("TransitionSynthesizer")

    def synthesize(self, layer: TransitionLayer, state: CompileState) -> None:
        transition = get_transition(layer.transition)
        index = state.graph.add_input(InputSpec(layer.source))
        stream = f"{index}:v"

        if state.video is None:
            self.logger.warning(
                "Transição '%s' sem vídeo base; %s usado como base", layer.transition, layer.source
            )
            state.set_base(stream)
            delay = 0.0
        else:
            state.video = transition.compose(
                state, state.video, stream, layer.duration, layer.start_time
            )
            delay = layer.start_time

        if not layer.mute:
            filters = [adelay_filter(delay)] if delay else []
            state.add_audio(f"{index}:a", filters)
