# -*- coding: utf-8 -*-
"""
Testes do alocador de filtergraph
"""

import pytest

from media_sdk.domain.errors import MediaSdkError
from media_sdk.domain.models.timeline import Timeline
from media_sdk.rendering.graph_builder import (
    Expr,
    Filter,
    FilterGraph,
    GraphBuilder,
    InputSpec,
    input_directives,
    make_filter,
)


class TestFilterRender:
    """Testes da stringificação centralizada de filtros"""

    def test_bare_name(self):
        assert Filter("hflip").render() == "hflip"

    def test_positional_and_named(self):
        f = make_filter("scale", 1280, 720, force_original_aspect_ratio="increase")
        assert f.render() == "scale=1280:720:force_original_aspect_ratio=increase"

    def test_none_options_dropped(self):
        assert make_filter("overlay", x=0, y=0, enable=None).render() == "overlay=x=0:y=0"

    def test_expr_always_quoted(self):
        f = make_filter("overlay", enable=Expr("between(t,1,2)"))
        assert f.render() == "overlay=enable='between(t,1,2)'"

    def test_special_chars_quoted(self):
        assert make_filter("drawtext", text="a:b").render() == "drawtext=text='a:b'"

    def test_prequoted_not_requoted(self):
        assert make_filter("drawtext", text="'a\\:b'").render() == "drawtext=text='a\\:b'"


class TestFilterGraph:
    """Testes de labels e nós"""

    def test_labels_are_sequential_per_prefix(self):
        graph = FilterGraph()
        assert graph.new_label() == "v0"
        assert graph.new_label() == "v1"
        assert graph.new_label("a") == "a0"

    def test_add_input_returns_index(self):
        graph = FilterGraph()
        assert graph.add_input(InputSpec("a.mp4")) == 0
        assert graph.add_input(InputSpec("b.mp4")) == 1

    def test_chain(self):
        graph = FilterGraph()
        first = graph.add_node(["0:v"], [Filter("hflip")])
        second = graph.add_node([first], [Filter("vflip")])
        graph.video_out = second
        assert graph.to_string() == "[0:v]hflip[v0];[v0]vflip[v1]"
        assert graph.dangling_labels() == []

    def test_label_consumed_twice_raises(self):
        graph = FilterGraph()
        pad = graph.add_node(["0:v"], [Filter("hflip")])
        graph.add_node([pad], [Filter("vflip")])
        with pytest.raises(MediaSdkError):
            graph.add_node([pad], [Filter("negate")])

    def test_unknown_label_raises(self):
        with pytest.raises(MediaSdkError):
            FilterGraph().add_node(["v9"], [Filter("hflip")])

    def test_multiple_outputs(self):
        graph = FilterGraph()
        a, b = graph.add_node(["0:a"], [make_filter("asplit", 2)], prefix="a", outputs=2)
        assert (a, b) == ("a0", "a1")
        assert graph.to_string() == "[0:a]asplit=2[a0][a1]"

    def test_dangling(self):
        graph = FilterGraph()
        graph.add_node(["0:v"], [Filter("hflip")])
        assert graph.dangling_labels() == ["v0"]


class TestInputDirectives:
    def test_none(self):
        assert input_directives() == ()

    def test_trim(self):
        assert input_directives(trim_start=1, trim_end=4) == ("-ss", "1", "-t", "3")

    def test_duration_caps_trim(self):
        assert input_directives(trim_start=1, trim_end=10, duration=2) == ("-ss", "1", "-t", "2")

    def test_loop_uses_length(self):
        assert input_directives(loop=True, loop_length=30) == ("-stream_loop", "-1", "-t", "30")


class TestGraphBuilder:
    """Testes da dobra de layers sobre os acumuladores"""

    def test_empty_timeline_synthesizes_canvas(self):
        graph = GraphBuilder().build(Timeline())
        assert graph.to_string() == "color=c=black:s=1920x1080:r=25:d=1[v0]"
        assert graph.video_out == "v0"
        assert graph.audio_out is None

    def test_single_video_needs_no_nodes(self):
        graph = GraphBuilder().build(Timeline().add_video("v.mp4"))
        assert graph.nodes == []
        assert graph.video_out == "0:v"
        assert graph.audio_out == "0:a"

    def test_muted_video_has_no_audio(self):
        graph = GraphBuilder().build(Timeline().add_video("v.mp4", mute=True))
        assert graph.audio_out is None

    def test_audio_mix_arity(self):
        t = Timeline().add_audio("a.mp3").add_audio("b.mp3").add_audio("c.mp3")
        graph = GraphBuilder().build(t)
        assert "amix=inputs=3:duration=longest" in graph.to_string()
        assert graph.video_out is None

    def test_single_audio_has_no_amix(self):
        graph = GraphBuilder().build(Timeline().add_audio("a.mp3", volume=0.5))
        assert "amix" not in graph.to_string()
        assert graph.audio_out == "a0"

    def test_base_is_first_video_even_if_listed_later(self):
        t = Timeline().add_text("Olá").add_video("v.mp4")
        graph = GraphBuilder().build(t)
        assert graph.to_string().startswith("[0:v]drawtext=")
        assert graph.inputs[0].path == "v.mp4"

    def test_filters_in_call_order(self):
        t = Timeline().add_video("v.mp4").add_filter("hflip").add_filter("vflip")
        graph = GraphBuilder().build(t)
        assert graph.to_string() == "[0:v]hflip[v0];[v0]vflip[v1]"

    def test_filters_reordered_differ(self):
        a = Timeline().add_video("v.mp4").add_filter("hflip").add_filter("negate")
        b = Timeline().add_video("v.mp4").add_filter("negate").add_filter("hflip")
        assert GraphBuilder().build(a).to_string() != GraphBuilder().build(b).to_string()

    def test_platform_inserts_cover_scale_and_crop(self):
        t = Timeline().add_video("v.mp4").set_platform("tiktok")
        graph = GraphBuilder().build(t)
        assert graph.to_string() == (
            "[0:v]scale=1080:1920:force_original_aspect_ratio=increase,"
            "crop=1080:1920:(iw-1080)/2:(ih-1920)/2[v0]"
        )

    def test_aspect_ratio_canvas(self):
        t = Timeline().set_aspect_ratio("4:3")
        assert GraphBuilder().resolve_canvas(t) == (1440, 1080, True)

    def test_unknown_platform_ignored(self):
        t = Timeline().add_video("v.mp4").set_platform("myspace")
        assert GraphBuilder().resolve_canvas(t) == (1920, 1080, False)

    def test_global_crop_and_scale(self):
        t = Timeline().add_video("v.mp4").crop(640, 480, 10, 20).scale(320, 240)
        graph = GraphBuilder().build(t)
        assert graph.to_string() == "[0:v]crop=640:480:10:20,scale=320:240[v0]"

    def test_nested_timeline_is_flattened(self):
        inner = Timeline().add_text("Intro", duration=2)
        outer = Timeline().add_video("v.mp4").add_video(inner, start_time=3)
        graph = GraphBuilder().build(outer)
        assert "enable='between(t,3,5)'" in graph.to_string()
        assert len(graph.inputs) == 1

    def test_audio_filter_applied_after_mix(self):
        t = Timeline().add_audio("a.mp3").add_audio("b.mp3").add_filter("normalize", target="audio")
        graph = GraphBuilder().build(t)
        assert graph.to_string().endswith("[a0]loudnorm[a1]")
        assert graph.audio_out == "a1"

    def test_overlapping_overlays_follow_layer_order(self):
        t = (
            Timeline()
            .add_video("v.mp4")
            .add_text("primeiro", start_time=0, duration=4)
            .add_text("segundo", start_time=1, duration=4)
        )
        text = GraphBuilder().build(t).to_string()
        assert text.index("primeiro") < text.index("segundo")
