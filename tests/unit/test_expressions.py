# -*- coding: utf-8 -*-
"""
Testes do resolvedor de coordenadas, janelas de tempo e escapes
"""

import pytest

from media_sdk.domain.models.layers import Position
from media_sdk.rendering.expressions import (
    OVERLAY,
    TEXT,
    enable_gate,
    escape_text,
    format_number,
    normalize_color,
    resolve_end,
    resolve_position,
    seconds_to_ms,
    shell_quote,
)


class TestFormatNumber:
    def test_integral_float(self):
        assert format_number(2.0) == "2"

    def test_fraction(self):
        assert format_number(0.5) == "0.5"

    def test_float_noise_removed(self):
        assert format_number(0.1 + 0.2) == "0.3"

    def test_bool(self):
        assert format_number(True) == "1"

    def test_string_passthrough(self):
        assert format_number("iw*0.5") == "iw*0.5"


def test_seconds_to_ms():
    """Testa conversão para milissegundos"""
    assert seconds_to_ms(2) == 2000
    assert seconds_to_ms(1.5) == 1500


class TestTiming:
    """Testes de janelas de tempo"""

    def test_bounded_gate(self):
        assert enable_gate(2, resolve_end(2, 3)) == "between(t,2,5)"

    def test_unbounded_has_no_gate(self):
        assert resolve_end(4, "full") is None
        assert enable_gate(4, None) is None

    def test_source_duration_bounds_full(self):
        assert resolve_end(1, "full", source_duration=10) == 11


class TestPositions:
    """Testes de posições por palavra-chave e explícitas"""

    def test_center_overlay(self):
        assert resolve_position("center", OVERLAY) == ("(W-w)/2", "(H-h)/2")

    def test_corner_with_margin(self):
        assert resolve_position("bottom-right", OVERLAY, 20) == ("W-w-20", "H-h-20")

    def test_text_placeholders(self):
        assert resolve_position("bottom", TEXT, 50) == ("(w-text_w)/2", "h-text_h-50")

    def test_top_left_margin(self):
        assert resolve_position("top-left", OVERLAY, 20) == ("20", "20")

    def test_none_is_origin(self):
        assert resolve_position(None, OVERLAY, 20) == ("0", "0")

    def test_percentages(self):
        assert resolve_position(Position(x="50%", y="30%"), OVERLAY) == ("0.5*W", "0.3*H")

    def test_absolute_passthrough(self):
        assert resolve_position(Position(x=100, y=40), OVERLAY) == ("100", "40")

    def test_center_anchor_offsets(self):
        x, y = resolve_position(Position(x="50%", y="50%", anchor="center"), TEXT)
        assert x == "0.5*w-text_w/2"
        assert y == "0.5*h-text_h/2"

    def test_bottom_right_anchor(self):
        x, y = resolve_position(Position(x=100, y=200, anchor="bottom-right"), OVERLAY)
        assert (x, y) == ("100-w", "200-h")

    def test_invalid_type(self):
        with pytest.raises(TypeError):
            resolve_position(42, OVERLAY)


class TestEscapeText:
    """Testes do escape único de texto para drawtext"""

    def test_plain(self):
        assert escape_text("Hello") == "'Hello'"

    def test_colon(self):
        assert escape_text("Hello: world") == "'Hello\\: world'"

    def test_apostrophe(self):
        assert escape_text("it's") == "'it\\'\\''s'"

    def test_percent(self):
        assert escape_text("100%") == "'100\\\\%'"


class TestColors:
    def test_hex(self):
        assert normalize_color("#ff0000") == "0xFF0000"

    def test_short_hex(self):
        assert normalize_color("#fff") == "0xFFFFFF"

    def test_hex_alpha(self):
        assert normalize_color("#FF000080") == "0xFF0000@0.5"

    def test_rgba(self):
        assert normalize_color("rgba(0,0,0,0.8)") == "0x000000@0.8"

    def test_keyword_passthrough(self):
        assert normalize_color("white") == "white"


def test_shell_quote():
    """Testa aspas duplas para o shell"""
    assert shell_quote("a b") == '"a b"'
    assert shell_quote('a"b$c') == '"a\\"b\\$c"'
    assert shell_quote("text='a\\: b'") == "\"text='a\\: b'\""
