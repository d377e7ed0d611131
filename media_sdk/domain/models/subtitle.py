# -*- coding: utf-8 -*-
"""
media_sdk/domain/models/subtitle.py
Modelos de domínio para legendas e destaque de palavras
"""

from __future__ import annotations
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Tuple

from ..errors import TimelineValidationError
from .layers import TextStyle


@dataclass(frozen=True)
class Caption:
    """Representa uma legenda com timing em segundos"""

    text: str
    start: float
    end: float

    @property
    def duration(self) -> float:
        return self.end - self.start


@dataclass(frozen=True)
class WordTiming:
    """Palavra com janela de tempo própria"""

    word: str
    start: float
    end: float


@dataclass(frozen=True)
class HighlightPreset:
    """Par de estilos: base (linha inteira) e destaque (palavra ativa)"""

    base: TextStyle
    highlight: TextStyle


CAPTION_PRESETS: Dict[str, TextStyle] = {
    "instagram": TextStyle(font_size=36, color="white", stroke_color="black", stroke_width=2),
    "tiktok": TextStyle(font_size=48, color="white", stroke_color="black", stroke_width=3),
    "youtube": TextStyle(font_size=32, color="white", background_color="rgba(0,0,0,0.8)", padding=8),
    "pinterest": TextStyle(font_size=30, color="#333333", background_color="rgba(255,255,255,0.9)", padding=10),
    "linkedin": TextStyle(font_size=28, color="white", background_color="rgba(0,0,0,0.6)", padding=6),
}

WORD_HIGHLIGHT_PRESETS: Dict[str, HighlightPreset] = {
    "tiktok": HighlightPreset(
        base=TextStyle(font_size=48, color="#ffffff", stroke_color="#000000", stroke_width=3),
        highlight=TextStyle(font_size=48, color="#ff0066", stroke_color="#000000", stroke_width=4),
    ),
    "instagram": HighlightPreset(
        base=TextStyle(font_size=36, color="#ffffff", stroke_color="#000000", stroke_width=2),
        highlight=TextStyle(font_size=36, color="#ff4400", background_color="rgba(255,68,0,0.3)", padding=8),
    ),
    "youtube": HighlightPreset(
        base=TextStyle(font_size=32, color="#ffffff", background_color="rgba(0,0,0,0.8)", padding=6),
        highlight=TextStyle(font_size=32, color="#ff0000", background_color="rgba(255,0,0,0.9)", padding=8),
    ),
    "karaoke": HighlightPreset(
        base=TextStyle(font_size=40, color="#cccccc", stroke_color="#000000", stroke_width=2),
        highlight=TextStyle(font_size=40, color="#ffff00", stroke_color="#ff0000", stroke_width=3),
    ),
    "typewriter": HighlightPreset(
        base=TextStyle(font_size=24, color="#333333", background_color="rgba(255,255,255,0.9)", padding=10),
        highlight=TextStyle(font_size=24, color="#0066cc"),
    ),
}

_SRT_TIME = r"(\d{2}):(\d{2}):(\d{2})[,.](\d{3})"
_SRT_CUE_RE = re.compile(_SRT_TIME + r"\s*-->\s*" + _SRT_TIME)
_WORD_CLEAN_RE = re.compile(r"[^\w\s!?.,']")


def get_caption_preset(name: str) -> TextStyle:
    try:
        return CAPTION_PRESETS[name]
    except KeyError:
        raise TimelineValidationError(
            f"preset de legenda desconhecido: {name!r} (opções: {', '.join(CAPTION_PRESETS)})"
        )


def get_highlight_preset(name: str) -> HighlightPreset:
    try:
        return WORD_HIGHLIGHT_PRESETS[name]
    except KeyError:
        raise TimelineValidationError(
            f"preset de destaque desconhecido: {name!r} (opções: {', '.join(WORD_HIGHLIGHT_PRESETS)})"
        )


def reading_duration(text: str, words_per_minute: float = 180) -> float:
    """Tempo de leitura de uma legenda, limitado entre 1 e 10 segundos"""
    words = len(text.split())
    seconds = words / words_per_minute * 60 + 0.5
    return min(max(seconds, 1.0), 10.0)


def staggered_captions(
    texts: List[str],
    start_time: float = 0.0,
    overlap: float = 0.0,
    words_per_minute: float = 180,
) -> List[Caption]:
    """Distribui textos em sequência; cada um começa antes do fim do anterior conforme overlap"""
    if not 0 <= overlap < 1:
        raise TimelineValidationError("overlap deve estar em [0, 1)")
    captions = []
    current = start_time
    for text in texts:
        duration = reading_duration(text, words_per_minute)
        captions.append(Caption(text=text, start=current, end=current + duration))
        current = current + duration - duration * overlap
    return captions


def generate_word_timings(
    text: str, start_time: float = 0.0, words_per_second: float = 2.5
) -> List[WordTiming]:
    """Gera uma janela por palavra a partir de uma taxa de palavras por segundo"""
    if words_per_second <= 0:
        raise TimelineValidationError("words_per_second deve ser > 0")
    word_duration = 1 / words_per_second
    timings = []
    for word in text.split():
        cleaned = _WORD_CLEAN_RE.sub("", word)
        if not cleaned:
            continue
        start = start_time + len(timings) * word_duration
        timings.append(WordTiming(cleaned, start, start + word_duration))
    return timings


def group_into_lines(words: List[WordTiming], max_words_per_line: int) -> List[List[WordTiming]]:
    if max_words_per_line < 1:
        raise TimelineValidationError("max_words_per_line deve ser >= 1")
    return [words[i:i + max_words_per_line] for i in range(0, len(words), max_words_per_line)]


def parse_srt(content: str) -> List[Caption]:
    """Lê conteúdo SRT; blocos sem linha de tempo válida são ignorados"""
    captions = []
    for block in re.split(r"\r?\n\s*\r?\n", content.strip()):
        lines = [line.strip() for line in block.splitlines() if line.strip()]
        for i, line in enumerate(lines):
            match = _SRT_CUE_RE.search(line)
            if not match:
                continue
            values = [int(g) for g in match.groups()]
            start = values[0] * 3600 + values[1] * 60 + values[2] + values[3] / 1000
            end = values[4] * 3600 + values[5] * 60 + values[6] + values[7] / 1000
            text = " ".join(lines[i + 1:])
            if text and end > start:
                captions.append(Caption(text=text, start=start, end=end))
            break
    return captions


def _seconds_to_srt_time(seconds: float) -> str:
    """Converte segundos para formato SRT (HH:MM:SS,mmm)"""
    ms = int(round(seconds * 1000))
    hours = ms // 3600000
    minutes = (ms % 3600000) // 60000
    secs = (ms % 60000) // 1000
    milliseconds = ms % 1000
    return f"{hours:02d}:{minutes:02d}:{secs:02d},{milliseconds:03d}"


def to_srt(captions: List[Caption]) -> str:
    srt_content = []
    for i, caption in enumerate(captions, 1):
        srt_content.append(f"{i}")
        srt_content.append(
            f"{_seconds_to_srt_time(caption.start)} --> {_seconds_to_srt_time(caption.end)}"
        )
        srt_content.append(caption.text)
        srt_content.append("")
    return "\n".join(srt_content)


def save_as_srt(captions: List[Caption], output_path: Path) -> None:
    """Salva as legendas como arquivo SRT"""
    with open(output_path, "w", encoding="utf-8") as f:
        f.write(to_srt(captions))


def coerce_captions(items) -> List[Caption]:
    """Aceita Caption, dicts {text,start,end} ou tuplas (text, start, end)"""
    captions = []
    for item in items:
        if isinstance(item, Caption):
            captions.append(item)
        elif isinstance(item, dict):
            captions.append(Caption(text=item["text"], start=item["start"], end=item["end"]))
        elif isinstance(item, (tuple, list)) and len(item) == 3:
            captions.append(Caption(*item))
        else:
            raise TimelineValidationError(f"legenda inválida: {item!r}")
    return captions


def line_layout(
    line_index: int,
    word_index: int,
    words_in_line: int,
    base_y: str = "0.8*h",
    line_spacing: float = 1.5,
    word_spacing: int = 120,
) -> Tuple[str, str]:
    """Expressões drawtext (x, y) de uma palavra numa grade centralizada"""
    from ...rendering.expressions import format_number

    offset = (word_index - (words_in_line - 1) / 2) * word_spacing
    x = "(w-text_w)/2"
    if offset:
        x += f"{'+' if offset > 0 else '-'}{format_number(abs(offset))}"
    y = base_y
    line_offset = line_index * 40 * line_spacing
    if line_offset:
        y += f"+{format_number(line_offset)}"
    return x, y
