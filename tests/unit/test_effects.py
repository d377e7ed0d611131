# -*- coding: utf-8 -*-
"""
Testes dos sintetizadores de filtros, áudio, overlays e texto
"""

import pytest

from media_sdk.domain.errors import TimelineValidationError
from media_sdk.domain.models.layers import FilterLayer
from media_sdk.domain.models.timeline import Timeline
from media_sdk.infra.plugins import plugin_registry
from media_sdk.plugins.builtin.effects.filters import FilterSynthesizer  # noqa: F401  registra os efeitos
from media_sdk.rendering.graph_builder import GraphBuilder


def _graph(timeline):
    return GraphBuilder().build(timeline).to_string()


class TestNamedFilters:
    """Testes da biblioteca de filtros nomeados"""

    def test_registry_lists_builtin_effects(self):
        names = {d.name for d in plugin_registry.list_effects()}
        assert {"blur", "grayscale", "sepia", "fade_in", "fade_out", "normalize"} <= names

    def test_blur(self):
        t = Timeline().add_video("v.mp4").add_filter("blur", {"radius": 3})
        assert _graph(t) == "[0:v]boxblur=3[v0]"

    def test_raw_filter_passthrough(self):
        t = Timeline().add_video("v.mp4").add_filter("eq", {"brightness": 0.1})
        assert _graph(t) == "[0:v]eq=brightness=0.1[v0]"

    def test_time_window(self):
        t = Timeline().add_video("v.mp4").add_filter("invert", start_time=1, duration=2)
        assert _graph(t) == "[0:v]negate=enable='between(t,1,3)'[v0]"

    def test_speed(self):
        t = Timeline().add_video("v.mp4").add_filter("speed", {"factor": 2})
        assert _graph(t) == "[0:v]setpts=0.5*PTS[v0]"

    def test_speed_rejects_time_window(self):
        """Testa que setpts não recebe janela de tempo (FFmpeg não aceita enable)"""
        with pytest.raises(TimelineValidationError, match="speed"):
            Timeline().add_video("v.mp4").add_filter("speed", {"factor": 2}, start_time=1, duration=2)

    def test_fades_and_raw_setpts_reject_time_window(self):
        for name in ("fade_in", "fade_out", "setpts"):
            with pytest.raises(TimelineValidationError):
                Timeline().add_filter(name, start_time=0, duration=3)

    def test_window_checked_again_when_compiling(self):
        """Testa layers montados sem add_filter (ex.: vindos de JSON)"""
        t = Timeline().add_video("v.mp4").add_layer(
            FilterLayer("speed", {"factor": 2}, start_time=1, duration=2)
        )
        with pytest.raises(TimelineValidationError):
            _graph(t)

    def test_descriptor_flags_timeline_support(self):
        assert plugin_registry.supports_timeline("blur")
        assert not plugin_registry.supports_timeline("speed")
        assert plugin_registry.supports_timeline("filtro_cru")

    def test_fade_out_ends_with_timeline(self):
        t = Timeline().add_video("v.mp4", source_duration=10).add_filter("fade_out", {"duration": 2})
        assert _graph(t) == "[0:v]fade=t=out:st=8:d=2[v0]"

    def test_composite_preset_is_one_node(self):
        t = Timeline().add_video("v.mp4").add_filter("vintage")
        assert _graph(t) == "[0:v]curves=preset=vintage,eq=saturation=0.8,vignette[v0]"


class TestAudioChain:
    """Testes da cadeia de filtros por faixa de áudio"""

    def test_fades(self):
        t = Timeline().add_audio("m.mp3", fade_in=1, fade_out=2, source_duration=10)
        assert _graph(t) == "[0:a]afade=t=in:st=0:d=1,afade=t=out:st=8:d=2[a0]"

    def test_fade_out_without_length_is_skipped(self):
        t = Timeline().add_audio("m.mp3", fade_out=2)
        assert _graph(t) == ""

    def test_echo(self):
        t = Timeline().add_audio("m.mp3", echo={"delay": 0.5, "decay": 0.3})
        assert _graph(t) == "[0:a]aecho=0.8:0.9:500:0.3[a0]"

    def test_pitch_and_tempo(self):
        t = Timeline().add_audio("m.mp3", pitch=1.2, tempo=1.5)
        assert _graph(t) == "[0:a]asetrate=44100*1.2,aresample=44100,atempo=1.5[a0]"

    def test_percent_volume(self):
        t = Timeline().add_audio("m.mp3", volume=50)
        assert _graph(t) == "[0:a]volume=0.5[a0]"

    def test_delay_is_last(self):
        t = Timeline().add_audio("m.mp3", volume=0.8, lowpass=3000, start_time=1.5)
        assert _graph(t) == "[0:a]volume=0.8,lowpass=f=3000,adelay=1500|1500[a0]"

    def test_loop_matches_timeline(self):
        t = Timeline().add_video("v.mp4", source_duration=12).add_audio("m.mp3", loop=True)
        graph = GraphBuilder().build(t)
        assert graph.inputs[1].options == ("-stream_loop", "-1", "-t", "12")

    def test_trimmed_input(self):
        t = Timeline().add_audio("m.mp3", trim_start=5, trim_end=15)
        graph = GraphBuilder().build(t)
        assert graph.inputs[0].options == ("-ss", "5", "-t", "10")


class TestOverlays:
    """Testes de vídeos, imagens e marcas d'água sobrepostos"""

    def test_image_overlay_window(self):
        t = Timeline().add_video("v.mp4").add_image(
            "logo.png", start_time=2, duration=3, position="top-right"
        )
        graph = GraphBuilder().build(t)
        assert graph.to_string() == "[0:v][1:v]overlay=x=W-w-20:y=20:enable='between(t,2,5)'[v0]"
        assert graph.inputs[1].options == ("-loop", "1", "-t", "5")

    def test_watermark_opacity(self):
        t = Timeline().add_video("v.mp4").add_watermark("logo.png", opacity=0.5)
        assert _graph(t) == (
            "[1:v]format=rgba,colorchannelmixer=aa=0.5[v0];"
            "[0:v][v0]overlay=x=W-w-20:y=H-h-20:shortest=1[v1]"
        )

    def test_watermark_scale_and_margin(self):
        t = Timeline().add_video("v.mp4").add_watermark("logo.png", "top-left", margin=10, scale=0.2)
        assert _graph(t) == (
            "[1:v]scale=iw*0.2:ih*0.2[v0];[0:v][v0]overlay=x=10:y=10:shortest=1[v1]"
        )

    def test_image_as_base_covers_timeline(self):
        t = Timeline().add_image("a.jpg", duration=4)
        graph = GraphBuilder().build(t)
        assert graph.nodes == []
        assert graph.video_out == "0:v"
        assert graph.inputs[0].options == ("-loop", "1", "-t", "4")

    def test_second_video_is_delayed_overlay(self):
        t = Timeline().add_video("a.mp4").add_video("b.mp4", start_time=2, duration=3)
        text = _graph(t)
        assert "[1:v]setpts=PTS-STARTPTS+2/TB[v0]" in text
        assert "[0:v][v0]overlay=x=(W-w)/2:y=(H-h)/2:enable='between(t,2,5)':eof_action=pass[v1]" in text
        assert "[1:a]adelay=2000|2000[a0]" in text
        assert "[0:a][a0]amix=inputs=2:duration=longest[a1]" in text


class TestText:
    """Testes do drawtext"""

    def test_escaped_text_with_window(self):
        t = Timeline().add_video("v.mp4").add_text("Hello: world", start_time=1, duration=2, position="top")
        assert _graph(t) == (
            "[0:v]drawtext=text='Hello\\: world':x=(w-text_w)/2:y=50:"
            "fontsize=24:fontcolor=white:enable='between(t,1,3)'[v0]"
        )

    def test_full_duration_has_no_gate(self):
        t = Timeline().add_video("v.mp4").add_text("Olá", duration="full")
        assert "enable" not in _graph(t)

    def test_style_box_and_stroke(self):
        t = Timeline().add_video("v.mp4").add_text(
            "Olá",
            font_size=64,
            color="#ff0000",
            background_color="rgba(0,0,0,0.8)",
            stroke_width=2,
        )
        text = _graph(t)
        assert "fontsize=64:fontcolor=0xFF0000" in text
        assert "box=1:boxcolor=0x000000@0.8:boxborderw=10" in text
        assert "borderw=2:bordercolor=black" in text

    def test_font_file_preferred_over_family(self):
        t = Timeline().add_video("v.mp4").add_text(
            "Olá", style={"font_file": "fonts/Bold.ttf", "font_family": "Arial"}
        )
        text = _graph(t)
        assert "fontfile='fonts/Bold.ttf'" in text
        assert ":font=" not in text

    def test_text_on_empty_timeline_uses_canvas(self):
        t = Timeline().add_text("Olá", duration=3)
        text = _graph(t)
        assert text.startswith("color=c=black:s=1920x1080:r=25:d=3[v0];[v0]drawtext=")
