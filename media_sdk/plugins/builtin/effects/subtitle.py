# -*- coding: utf-8 -*-
"""
media_sdk/plugins/builtin/effects/subtitle.py
Legendas e destaque de palavras renderizados com drawtext
"""

from dataclasses import dataclass
from typing import Any, Optional, Sequence, Tuple

from ....domain.errors import TimelineValidationError
from ....domain.models.layers import (
    CaptionLayer,
    CaptionUnit,
    Position,
    TextStyle,
    coerce_position,
)
from ....domain.models.subtitle import (
    Caption,
    coerce_captions,
    generate_word_timings,
    get_caption_preset,
    get_highlight_preset,
    group_into_lines,
    line_layout,
    parse_srt,
)
from ....rendering.graph_builder import CompileState
from .text_overlay import drawtext_filter


class CaptionSynthesizer:
    """Um nó drawtext por unidade, cada um com sua própria janela"""

    def synthesize(self, layer: CaptionLayer, state: CompileState) -> None:
        for unit in layer.units:
            start = layer.start_time + unit.start
            end = layer.start_time + unit.end
            state.apply_video(
                [drawtext_filter(unit.text, unit.position, unit.style, start, end)]
            )


def _resolve_style(style: Any, base: TextStyle) -> TextStyle:
    """Estilo explícito substitui o base; dict sobrescreve só os campos dados"""
    if style is None:
        return base
    if isinstance(style, TextStyle):
        return style
    return base.merged(**dict(style))


@dataclass(frozen=True)
class Captions:
    """Legendas temporizadas: cada legenda vira uma unidade drawtext"""

    captions: Tuple[Caption, ...]
    style: Any = None
    preset: Optional[str] = None
    position: Any = "bottom"

    def to_layer(self) -> CaptionLayer:
        if not self.captions:
            raise TimelineValidationError("lista de legendas vazia")
        base = get_caption_preset(self.preset) if self.preset else TextStyle()
        style = _resolve_style(self.style, base)
        position = coerce_position(self.position)
        units = tuple(
            CaptionUnit(text=c.text, start=c.start, end=c.end, position=position, style=style)
            for c in self.captions
        )
        return CaptionLayer(units=units)

    def apply_to(self, timeline):
        return timeline.add_layer(self.to_layer())

    @classmethod
    def from_srt(cls, content: str, **kwargs) -> "Captions":
        captions = parse_srt(content)
        if not captions:
            raise TimelineValidationError("conteúdo SRT sem legendas válidas")
        return cls(captions=tuple(captions), **kwargs)

    @classmethod
    def from_items(cls, items: Sequence[Any], **kwargs) -> "Captions":
        return cls(captions=tuple(coerce_captions(items)), **kwargs)


@dataclass(frozen=True)
class WordHighlighting:
    """
    Destaque palavra a palavra.

    Cada palavra gera duas unidades na mesma posição: a base, visível durante
    toda a linha, e o destaque, visível só na janela da própria palavra.
    """

    text: str
    start_time: float = 0.0
    words_per_second: float = 2.5
    preset: str = "tiktok"
    base_style: Any = None
    highlight_style: Any = None
    max_words_per_line: int = 5
    line_spacing: float = 1.5
    word_spacing: int = 120
    base_y: str = "0.8*h"

    def to_layer(self) -> CaptionLayer:
        if not isinstance(self.text, str) or not self.text.strip():
            raise TimelineValidationError("texto para destaque não pode ser vazio")
        preset = get_highlight_preset(self.preset)
        base = _resolve_style(self.base_style, preset.base)
        highlight = _resolve_style(self.highlight_style, preset.highlight)

        words = generate_word_timings(self.text, self.start_time, self.words_per_second)
        if not words:
            raise TimelineValidationError("nenhuma palavra válida para destaque")

        units = []
        for line_index, line in enumerate(group_into_lines(words, self.max_words_per_line)):
            line_start, line_end = line[0].start, line[-1].end
            for word_index, word in enumerate(line):
                x, y = line_layout(
                    line_index,
                    word_index,
                    len(line),
                    base_y=self.base_y,
                    line_spacing=self.line_spacing,
                    word_spacing=self.word_spacing,
                )
                position = Position(x=x, y=y)
                units.append(CaptionUnit(word.word, line_start, line_end, position, base))
                units.append(CaptionUnit(word.word, word.start, word.end, position, highlight))
        return CaptionLayer(units=tuple(units))

    def apply_to(self, timeline):
        return timeline.add_layer(self.to_layer())
