# -*- coding: utf-8 -*-
"""
Overlay de texto sobre vídeo
"""

from typing import Optional

from ....domain.models.layers import PositionSpec, TextLayer, TextStyle
from ....rendering.expressions import (
    TEXT,
    enable_gate,
    escape_path,
    escape_text,
    normalize_color,
    resolve_end,
    resolve_position,
)
from ....rendering.graph_builder import CompileState, Expr, Filter, make_filter

TEXT_MARGIN = 50


def drawtext_filter(
    text: str,
    position: Optional[PositionSpec],
    style: TextStyle,
    start: float,
    end: Optional[float],
    margin: float = TEXT_MARGIN,
) -> Filter:
    """Constrói um drawtext com posição, estilo e janela de tempo"""
    x, y = resolve_position(position or "center", TEXT, margin)
    options = {
        "text": escape_text(text),
        "x": x,
        "y": y,
        "fontsize": style.font_size,
        "fontcolor": normalize_color(style.color),
    }
    # Prioridade: arquivo de fonte > família de fonte > padrão
    if style.font_file:
        options["fontfile"] = escape_path(style.font_file)
    elif style.font_family:
        options["font"] = escape_text(style.font_family)
    if style.background_color:
        options["box"] = 1
        options["boxcolor"] = normalize_color(style.background_color)
        options["boxborderw"] = style.padding if style.padding is not None else 10
    if style.stroke_width:
        options["borderw"] = style.stroke_width
        options["bordercolor"] = normalize_color(style.stroke_color or "black")
    if style.shadow_color:
        options["shadowcolor"] = normalize_color(style.shadow_color)
        options["shadowx"] = style.shadow_x if style.shadow_x is not None else 2
        options["shadowy"] = style.shadow_y if style.shadow_y is not None else 2
    if style.line_spacing is not None:
        options["line_spacing"] = style.line_spacing

    gate = enable_gate(start, end)
    if gate:
        options["enable"] = Expr(gate)
    return make_filter("drawtext", **options)


class TextSynthesizer:
    """Desenha um TextLayer sobre o pad de vídeo corrente"""

    def synthesize(self, layer: TextLayer, state: CompileState) -> None:
        end = resolve_end(layer.start_time, layer.duration)
        state.apply_video(
            [drawtext_filter(layer.text, layer.position, layer.style, layer.start_time, end)]
        )
