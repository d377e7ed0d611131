# -*- coding: utf-8 -*-
"""
Sobreposição de vídeos, imagens e marcas d'água sobre a base
"""

from typing import List, Optional

from ....domain.models.layers import FULL, ImageLayer, VideoLayer, WatermarkLayer
from ....infra.logging import get_logger
from ....rendering.expressions import (
    OVERLAY,
    enable_gate,
    format_number,
    resolve_end,
    resolve_position,
)
from ....rendering.graph_builder import (
    CompileState,
    Expr,
    Filter,
    InputSpec,
    input_directives,
    make_filter,
)
from .audio import video_audio_filters

OVERLAY_MARGIN = 20


def scale_filter(scale: float) -> Filter:
    return make_filter("scale", f"iw*{format_number(scale)}", f"ih*{format_number(scale)}")


def opacity_filters(opacity: float) -> List[Filter]:
    """Ajuste de transparência do overlay"""
    return [make_filter("format", "rgba"), make_filter("colorchannelmixer", aa=opacity)]


def overlay_filter(
    position, start: float, end: Optional[float], margin: float = OVERLAY_MARGIN, **extra
) -> Filter:
    x, y = resolve_position(position, OVERLAY, margin)
    gate = enable_gate(start, end)
    return make_filter(
        "overlay", x=x, y=y, enable=Expr(gate) if gate else None, **extra
    )


class OverlaySynthesizer:
    """Sintetiza vídeos, imagens e marcas d'água (base ou overlay)"""

    def __init__(self):
        self.logger = get_logger("OverlaySynthesizer")

    def synthesize(self, layer, state: CompileState) -> None:
        if isinstance(layer, VideoLayer):
            self._video(layer, state)
        elif isinstance(layer, WatermarkLayer):
            self._watermark(layer, state)
        else:
            self._image(layer, state)

    def _video(self, layer: VideoLayer, state: CompileState) -> None:
        graph = state.graph
        index = graph.add_input(
            InputSpec(
                layer.source,
                input_directives(layer.trim_start, layer.trim_end, layer.duration),
            )
        )
        stream = f"{index}:v"
        is_base = state.video is None

        if is_base:
            if layer.start_time:
                self.logger.debug("start_time ignorado no vídeo base %s", layer.source)
            filters = [scale_filter(layer.scale)] if layer.scale else []
            pad = graph.add_node([stream], filters) if filters else stream
            state.set_base(pad)
        else:
            filters = []
            if layer.start_time:
                filters.append(make_filter("setpts", f"PTS-STARTPTS+{format_number(layer.start_time)}/TB"))
            if layer.scale:
                filters.append(scale_filter(layer.scale))
            pad = graph.add_node([stream], filters) if filters else stream
            end = resolve_end(layer.start_time, layer.duration, layer.source_duration)
            state.video = graph.add_node(
                [state.video, pad],
                [overlay_filter(layer.position or "center", layer.start_time, end, eof_action="pass")],
            )

        if not layer.mute:
            delay = 0 if is_base else layer.start_time
            state.add_audio(f"{index}:a", video_audio_filters(layer.volume, delay))

    def _image_input(self, layer, state: CompileState, as_base: bool) -> int:
        if as_base:
            # a base cobre a timeline inteira; overlays posteriores ficam por cima
            end = resolve_end(layer.start_time, layer.duration) or 0
            length = max(state.duration, end) or state.settings.default_layer_duration
            options = ("-loop", "1", "-t", format_number(length))
        elif layer.duration == FULL:
            options = ("-loop", "1")
        else:
            options = ("-loop", "1", "-t", format_number(layer.start_time + layer.duration))
        return state.graph.add_input(InputSpec(layer.source, options, kind="image"))

    def _decorate(self, layer, stream: str, state: CompileState) -> str:
        filters: List[Filter] = []
        if layer.scale:
            filters.append(scale_filter(layer.scale))
        if layer.opacity is not None and layer.opacity < 1:
            filters.extend(opacity_filters(layer.opacity))
        return state.graph.add_node([stream], filters) if filters else stream

    def _image(self, layer: ImageLayer, state: CompileState) -> None:
        as_base = state.video is None
        index = self._image_input(layer, state, as_base)
        pad = self._decorate(layer, f"{index}:v", state)
        if as_base:
            state.set_base(pad)
            return

        end = resolve_end(layer.start_time, layer.duration)
        extra = {"shortest": 1} if end is None else {}
        state.video = state.graph.add_node(
            [state.video, pad], [overlay_filter(layer.position, layer.start_time, end, **extra)]
        )

    def _watermark(self, layer: WatermarkLayer, state: CompileState) -> None:
        base = state.ensure_video()
        index = self._image_input(layer, state, as_base=False)
        pad = self._decorate(layer, f"{index}:v", state)
        end = resolve_end(layer.start_time, layer.duration)
        extra = {"shortest": 1} if end is None else {}
        state.video = state.graph.add_node(
            [base, pad],
            [overlay_filter(layer.position, layer.start_time, end, margin=layer.margin, **extra)],
        )
