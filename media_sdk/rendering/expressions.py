# -*- coding: utf-8 -*-
"""
Resolução de coordenadas, janelas de tempo e escape de valores FFmpeg

Funções puras: nenhuma delas depende do estado da compilação.
"""

from __future__ import annotations
import math
import re
from dataclasses import dataclass
from typing import Any, Optional, Tuple, Union

from ..domain.models.layers import FULL, Position

_HEX_RE = re.compile(r"^#([0-9a-fA-F]{3}|[0-9a-fA-F]{6}|[0-9a-fA-F]{8})$")
_RGBA_RE = re.compile(
    r"^rgba?\(\s*(\d{1,3})\s*,\s*(\d{1,3})\s*,\s*(\d{1,3})\s*(?:,\s*([\d.]+)\s*)?\)$"
)
_SHELL_BACKSLASH_RE = re.compile(r'\\(?=[\\"$`]|$)')


@dataclass(frozen=True)
class Placeholders:
    """Nomes das variáveis de dimensão de um filtro"""

    canvas_w: str
    canvas_h: str
    item_w: str
    item_h: str


# overlay: W/H = vídeo principal, w/h = overlay
OVERLAY = Placeholders("W", "H", "w", "h")
# drawtext: w/h = vídeo, text_w/text_h = texto
TEXT = Placeholders("w", "h", "text_w", "text_h")


def format_number(value: Any) -> str:
    """Formata números sem zeros supérfluos (2.0 -> '2', 0.5 -> '0.5')"""
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if math.isinf(value):
            return "inf" if value > 0 else "-inf"
        value = round(value, 6)
        if value.is_integer():
            return str(int(value))
        return repr(value)
    return str(value)


def seconds_to_ms(seconds: float) -> int:
    return int(round(seconds * 1000))


def resolve_end(start: float, duration: Any, source_duration: Optional[float] = None) -> Optional[float]:
    """Fim da janela do layer; None quando ilimitado"""
    if duration == FULL or duration is None:
        if source_duration:
            return start + source_duration
        return None
    return start + duration


def enable_gate(start: float, end: Optional[float]) -> Optional[str]:
    """Expressão ``between(t,start,end)`` ou None para janelas ilimitadas"""
    if end is None:
        return None
    return f"between(t,{format_number(start)},{format_number(end)})"


def _minus(expr: str, margin: float) -> str:
    return f"{expr}-{format_number(margin)}" if margin else expr


def keyword_position(keyword: str, ph: Placeholders, margin: float = 0) -> Tuple[str, str]:
    """Tabela fixa de posições por palavra-chave"""
    m = format_number(margin)
    center_x = f"({ph.canvas_w}-{ph.item_w})/2"
    center_y = f"({ph.canvas_h}-{ph.item_h})/2"
    right = _minus(f"{ph.canvas_w}-{ph.item_w}", margin)
    bottom = _minus(f"{ph.canvas_h}-{ph.item_h}", margin)
    table = {
        "center": (center_x, center_y),
        "top": (center_x, m),
        "bottom": (center_x, bottom),
        "left": (m, center_y),
        "right": (right, center_y),
        "top-left": (m, m),
        "top-right": (right, m),
        "bottom-left": (m, bottom),
        "bottom-right": (right, bottom),
    }
    return table[keyword]


def _axis(value: Union[float, str], canvas: str) -> str:
    if isinstance(value, str):
        if value.endswith("%"):
            return f"{format_number(float(value[:-1]) / 100)}*{canvas}"
        return value
    return format_number(value)


def resolve_position(
    position: Any, ph: Placeholders, margin: float = 0
) -> Tuple[str, str]:
    """Converte posição simbólica ou explícita em expressões (x, y)"""
    if position is None:
        position = "top-left"
        margin = 0
    if isinstance(position, str):
        return keyword_position(position, ph, margin)
    if not isinstance(position, Position):
        raise TypeError(f"posição inválida: {position!r}")

    x = _axis(position.x, ph.canvas_w)
    y = _axis(position.y, ph.canvas_h)
    anchor = position.anchor
    if anchor in ("center", "top-center", "bottom-center"):
        x = f"{x}-{ph.item_w}/2"
    elif anchor.endswith("right"):
        x = f"{x}-{ph.item_w}"
    if anchor in ("center", "center-left", "center-right"):
        y = f"{y}-{ph.item_h}/2"
    elif anchor.startswith("bottom"):
        y = f"{y}-{ph.item_h}"
    return x, y


def escape_text(text: str) -> str:
    """
    Escapa texto para drawtext e devolve o token já entre aspas simples.

    Três níveis: expansão do drawtext (``\\`` e ``%``), parser de opções
    (``\\``, ``'`` e ``:``) e parser do filtergraph, onde o valor fica entre
    aspas e cada aspa interna vira ``'\\''``.
    """
    text = text.replace("\\", "\\\\").replace("%", "\\%")
    text = text.replace("\\", "\\\\").replace("'", "\\'").replace(":", "\\:")
    return "'" + text.replace("'", "'\\''") + "'"


def escape_path(path: str) -> str:
    """Escapa caminhos usados como valor de opção (fontfile, movie)"""
    return escape_text(path.replace("\\", "/"))


def normalize_color(color: str) -> str:
    """'#RRGGBB' -> '0xRRGGBB', 'rgba(r,g,b,a)' -> '0xRRGGBB@a'; nomes passam inalterados"""
    color = color.strip()
    match = _HEX_RE.match(color)
    if match:
        digits = match.group(1)
        if len(digits) == 3:
            digits = "".join(c * 2 for c in digits)
        if len(digits) == 8:
            alpha = int(digits[6:], 16) / 255
            return f"0x{digits[:6].upper()}@{format_number(round(alpha, 2))}"
        return f"0x{digits.upper()}"
    match = _RGBA_RE.match(color)
    if match:
        r, g, b = (min(int(match.group(i)), 255) for i in (1, 2, 3))
        hex_color = f"0x{r:02X}{g:02X}{b:02X}"
        if match.group(4) is not None:
            return f"{hex_color}@{format_number(float(match.group(4)))}"
        return hex_color
    return color


def shell_quote(value: str) -> str:
    """Coloca o valor (filtergraph ou caminho) entre aspas duplas para o shell"""
    escaped = _SHELL_BACKSLASH_RE.sub(r"\\\\", value)
    for ch in ('"', "$", "`"):
        escaped = escaped.replace(ch, "\\" + ch)
    return f'"{escaped}"'
