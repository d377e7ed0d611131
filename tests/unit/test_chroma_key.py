# -*- coding: utf-8 -*-
"""
Testes da composição chroma key (green screen)
"""

import pytest

from media_sdk.domain.errors import TimelineValidationError
from media_sdk.domain.models.timeline import Timeline
from media_sdk.plugins.builtin.effects.chroma_key import (
    background_scale_filters,
    detect_background_type,
    meme_green_screen,
)
from media_sdk.rendering.graph_builder import GraphBuilder


def _build(timeline):
    return GraphBuilder().build(timeline)


def test_image_background():
    """Testa green screen com fundo de imagem"""
    graph = _build(Timeline().add_green_screen("fg.mp4", "bg.jpg"))
    assert graph.to_string() == (
        "[0:v]chromakey=color=0x00FF00:similarity=0.4:blend=0.1[fg0];"
        "[1:v]scale=1920:1080:force_original_aspect_ratio=increase,crop=1920:1080[bg0];"
        "[bg0][fg0]overlay=x=0:y=0:shortest=1[v0]"
    )
    assert graph.inputs[1].options == ("-loop", "1")
    assert graph.audio_out == "0:a"


def test_color_background():
    """Testa fundo de cor sólida"""
    text = _build(Timeline().add_green_screen_with_color_background("fg.mp4", "blue")).to_string()
    assert "color=c=blue:s=1920x1080:r=25,trim=end_frame=1,loop=loop=-1:size=1[bg0]" in text


def test_video_background_audio_ends_with_foreground():
    """Testa que o áudio do fundo em loop termina junto com o foreground"""
    t = Timeline().add_green_screen_with_video_background("fg.mp4", "bg.mp4", audio_mix="both")
    graph = _build(t)
    assert graph.inputs[1].options == ("-stream_loop", "-1")
    assert "[0:a][1:a]amix=inputs=2:duration=first[a0]" in graph.to_string()
    assert "duration=longest" not in graph.to_string()
    assert graph.audio_out == "a0"


def test_video_background_only_audio_is_bounded():
    t = Timeline().add_green_screen_with_video_background("fg.mp4", "bg.mp4", audio_mix="background")
    text = _build(t).to_string()
    assert "[0:a][1:a]amix=inputs=2:duration=first:weights='0 1'[a0]" in text


def test_video_background_with_duration_gets_length():
    """Testa que o fundo em loop recebe -t quando a duração é conhecida"""
    t = Timeline().add_green_screen_with_video_background(
        "fg.mp4", "bg.mp4", audio_mix="both", duration=6
    )
    graph = _build(t)
    assert graph.inputs[0].options == ("-t", "6")
    assert graph.inputs[1].options == ("-stream_loop", "-1", "-t", "6")
    assert "[0:a][1:a]amix=inputs=2:duration=longest" in graph.to_string()
    command = t.get_command("o.mp4")
    assert '-stream_loop -1 -t 6 -i "bg.mp4"' in command


def test_blue_key_and_yuv():
    t = Timeline().add_green_screen("fg.mp4", "bg.jpg", color="blue", yuv=True)
    assert "chromakey=color=0x0000FF:similarity=0.4:blend=0.1:yuv=1" in _build(t).to_string()


def test_without_background_overlays_current_video():
    """Testa foreground recortado sobre o vídeo base"""
    t = Timeline().add_video("v.mp4").add_green_screen("fg.mp4", start_time=2)
    text = _build(t).to_string()
    assert "[1:v]setpts=PTS+2/TB,chromakey=color=0x00FF00:similarity=0.4:blend=0.1[fg0]" in text
    assert "[0:v][fg0]overlay=x=(W-w)/2:y=(H-h)/2:eof_action=pass[v0]" in text
    assert "[1:a]adelay=2000|2000[a0]" in text


def test_positioned_foreground_uses_margin():
    t = Timeline().add_green_screen("fg.mp4", "bg.jpg", position="bottom-right", scale=0.5)
    text = _build(t).to_string()
    assert "[0:v]scale=iw*0.5:ih*0.5,chromakey=" in text
    assert "[bg0][fg0]overlay=x=W-w-20:y=H-h-20:shortest=1[v0]" in text


class TestBackgroundDetection:
    def test_image(self):
        assert detect_background_type("bg.JPG") == "image"

    def test_color(self):
        assert detect_background_type("#00ff00") == "color"
        assert detect_background_type("black") == "color"

    def test_video(self):
        assert detect_background_type("clip.mp4") == "video"


class TestBackgroundScale:
    def test_fit_pads(self):
        filters = [f.render() for f in background_scale_filters("fit", 1280, 720)]
        assert filters == [
            "scale=1280:720:force_original_aspect_ratio=decrease",
            "pad=1280:720:(ow-iw)/2:(oh-ih)/2",
        ]

    def test_stretch(self):
        assert [f.render() for f in background_scale_filters("stretch", 640, 360)] == ["scale=640:360"]


class TestMemeTemplates:
    """Testes dos templates de meme"""

    def test_high_intensity(self):
        assert meme_green_screen("fg.mp4", "bg.jpg", "reaction", intensity="high").similarity == 0.5

    def test_low_intensity(self):
        assert meme_green_screen("fg.mp4", "bg.jpg", "reaction", intensity="low").similarity == 0.3

    def test_professional_quality(self):
        screen = meme_green_screen("fg.mp4", "bg.jpg", "comedy", quality="professional")
        assert (screen.similarity, screen.blend) == (0.3, 0.05)

    def test_overrides_win(self):
        screen = meme_green_screen("fg.mp4", "bg.jpg", "news", position="top-left")
        assert screen.position == "top-left"

    def test_unknown_template(self):
        with pytest.raises(TimelineValidationError):
            Timeline().add_green_screen_meme("fg.mp4", "bg.jpg", "horror")


def test_invalid_similarity():
    with pytest.raises(TimelineValidationError):
        Timeline().add_green_screen("fg.mp4", "bg.jpg", similarity=1.5)
