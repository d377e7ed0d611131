# -*- coding: utf-8 -*-
"""
Testes unitários para o modelo de layers e a API de construção da timeline
"""

import pytest

from media_sdk.domain.errors import MediaSdkError, TimelineValidationError
from media_sdk.domain.models.layers import (
    AudioDuckingLayer,
    AudioLayer,
    CaptionUnit,
    Position,
    TextLayer,
    TextStyle,
    VideoLayer,
    normalize_volume,
    shift_layer,
)
from media_sdk.domain.models.timeline import Timeline


def test_add_returns_new_timeline():
    """Testa que add_* não altera a timeline original"""
    t1 = Timeline().add_video("v.mp4")
    before = t1.to_json()
    t2 = t1.add_text("Olá")

    assert t1 is not t2
    assert t1.to_json() == before
    assert len(t1.layers) == 1
    assert len(t2.layers) == 2
    assert t2.layers[0] is t1.layers[0]


def test_layers_are_frozen():
    """Testa que layers são imutáveis"""
    layer = TextLayer(text="Olá")
    with pytest.raises(AttributeError):
        layer.text = "outro"


def test_validation_error_is_value_error():
    """Testa a hierarquia de erros"""
    assert issubclass(TimelineValidationError, MediaSdkError)
    assert issubclass(TimelineValidationError, ValueError)


class TestBuilderValidation:
    """Testes de validação síncrona dos builders"""

    def test_empty_text_rejected(self):
        with pytest.raises(TimelineValidationError):
            Timeline().add_text("   ")

    def test_empty_path_rejected(self):
        with pytest.raises(TimelineValidationError):
            Timeline().add_video("")

    def test_watermark_requires_corner(self):
        with pytest.raises(TimelineValidationError):
            Timeline().add_watermark("logo.png", position="center")

    def test_non_positive_scale_rejected(self):
        with pytest.raises(TimelineValidationError):
            Timeline().add_image("img.png", scale=0)

    def test_negative_start_rejected(self):
        with pytest.raises(TimelineValidationError):
            Timeline().add_audio("m.mp3", start_time=-1)

    def test_trim_end_before_start_rejected(self):
        with pytest.raises(TimelineValidationError):
            Timeline().add_video("v.mp4", trim_start=5, trim_end=2)

    def test_unknown_position_keyword_rejected(self):
        with pytest.raises(TimelineValidationError):
            Timeline().add_text("Olá", position="middle")

    def test_invalid_anchor_rejected(self):
        with pytest.raises(TimelineValidationError):
            Position(x="50%", y="50%", anchor="somewhere")

    def test_manual_ducking_requires_regions(self):
        with pytest.raises(TimelineValidationError):
            AudioDuckingLayer(mode="manual")

    def test_unknown_transition_rejected(self):
        with pytest.raises(TimelineValidationError):
            Timeline().add_video("a.mp4").add_transition("b.mp4", transition="spin")

    def test_invalid_aspect_ratio_rejected(self):
        with pytest.raises(TimelineValidationError):
            Timeline().set_aspect_ratio("wide")

    def test_unknown_codec_preset_rejected(self):
        with pytest.raises(TimelineValidationError):
            Timeline().use_codec_preset("vhs")

    def test_caption_unit_end_after_start(self):
        with pytest.raises(TimelineValidationError):
            CaptionUnit(text="a", start=2, end=1)


class TestVolume:
    """Testes de normalização de volume"""

    def test_gain_kept(self):
        assert normalize_volume(0.5) == 0.5
        assert normalize_volume(2) == 2

    def test_percentage_divided(self):
        assert normalize_volume(50) == 0.5
        assert Timeline().add_audio("m.mp3", volume=80).layers[0].volume == 0.8

    def test_out_of_range_rejected(self):
        with pytest.raises(TimelineValidationError):
            normalize_volume(150)
        with pytest.raises(TimelineValidationError):
            normalize_volume(-1)


def test_position_dict_is_coerced():
    """Testa conversão de dict para Position"""
    t = Timeline().add_text("Olá", position={"x": "50%", "y": "30%", "anchor": "center"})
    assert t.layers[0].position == Position(x="50%", y="30%", anchor="center")


def test_text_style_overrides():
    """Testa kwargs de estilo em add_text"""
    t = Timeline().add_text("Olá", font_size=64, color="#ff0000")
    style = t.layers[0].style
    assert style.font_size == 64
    assert style.color == "#ff0000"
    assert TextStyle().font_size == 24


def test_echo_flag_becomes_defaults():
    t = Timeline().add_audio("m.mp3", echo=True)
    assert t.layers[0].echo.delay == 0.5


def test_shift_layer_moves_ducking_regions():
    """Testa deslocamento temporal de regiões de ducking"""
    layer = AudioDuckingLayer(regions=(), mode="sidechain")
    assert shift_layer(layer, 0) is layer

    manual = Timeline().duck_audio_at([(1, 2)]).layers[0]
    shifted = shift_layer(manual, 10)
    assert shifted.start_time == 10
    assert shifted.regions[0].start == 11
    assert shifted.regions[0].end == 12


class TestDuration:
    """Testes de get_duration"""

    def test_empty_timeline(self):
        assert Timeline().get_duration() == 0

    def test_source_duration_used(self):
        t = Timeline().add_video("v.mp4", source_duration=12).add_text("a", start_time=3, duration=2)
        assert t.get_duration() == 12

    def test_bounded_layers(self):
        t = Timeline().add_text("a", start_time=8, duration=4)
        assert t.get_duration() == 12

    def test_full_media_uses_settings_default(self):
        t = Timeline().add_audio("m.mp3", start_time=2)
        assert t.get_duration() == 32

    def test_looped_audio_does_not_extend(self):
        t = Timeline().add_image("a.png", duration=6).add_audio("m.mp3", loop=True)
        assert t.get_duration() == 6

    def test_override(self):
        t = Timeline().add_video("v.mp4").set_duration(7)
        assert t.get_duration() == 7

    def test_trimmed_video(self):
        t = Timeline().add_video("v.mp4", trim_start=2, trim_end=6)
        assert t.get_duration() == 4


class TestComposition:
    """Testes de concat, merge, apply e pipe"""

    def test_concat_shifts_layers(self):
        first = Timeline().add_video("a.mp4", source_duration=4)
        second = Timeline().add_text("Olá", start_time=1, duration=2)
        joined = first.concat(second)
        assert joined.layers[1].start_time == 5

    def test_merge_keeps_times(self):
        first = Timeline().add_video("a.mp4", source_duration=4)
        second = Timeline().add_text("Olá", start_time=1, duration=2)
        assert first.merge(second).layers[1].start_time == 1

    def test_apply_requires_capability(self):
        with pytest.raises(TimelineValidationError):
            Timeline().apply(object())

    def test_apply_custom_capability(self):
        class Title:
            def apply_to(self, timeline):
                return timeline.add_text("Título", position="top")

        t = Timeline().apply(Title())
        assert isinstance(t.layers[0], TextLayer)

    def test_pipe(self):
        t = Timeline().pipe(lambda tl, path: tl.add_video(path), "v.mp4")
        assert isinstance(t.layers[0], VideoLayer)

    def test_nested_timeline_as_video(self):
        inner = Timeline().add_text("Intro", duration=2)
        outer = Timeline().add_video(inner, start_time=3)
        assert outer.layers[0].is_nested
        assert outer.get_duration() == 5


class TestOptions:
    """Testes de opções globais"""

    def test_platform_sets_aspect_ratio(self):
        t = Timeline().set_platform("tiktok")
        assert t.options.platform == "tiktok"
        assert t.options.aspect_ratio == "9:16"

    def test_unknown_platform_accepted(self):
        t = Timeline().set_platform("myspace")
        assert t.options.platform == "myspace"
        assert t.options.aspect_ratio is None

    def test_aspect_ratio_clears_platform(self):
        t = Timeline().set_platform("tiktok").set_aspect_ratio("4:3")
        assert t.options.platform is None
        assert t.options.aspect_ratio == "4:3"

    def test_video_codec(self):
        t = Timeline().set_video_codec("libx265", crf=28, bitrate="2M")
        assert t.options.video_codec == "libx265"
        assert t.options.crf == 28
        assert t.options.video_bitrate == "2M"

    def test_invalid_crop(self):
        with pytest.raises(TimelineValidationError):
            Timeline().crop(0, 100)

    def test_get_layers_returns_copy(self):
        t = Timeline().add_audio("m.mp3")
        layers = t.get_layers()
        layers.clear()
        assert isinstance(t.layers[0], AudioLayer)
