# -*- coding: utf-8 -*-
"""
Testes de serialização da timeline
"""

import json

import pytest

from media_sdk.domain.errors import SerializationError
from media_sdk.domain.models.timeline import Timeline
from media_sdk.infra.serialization import FORMAT_VERSION, layer_from_dict


@pytest.fixture
def complex_timeline():
    """Timeline cobrindo todos os tipos de layer"""
    intro = Timeline().add_text("Intro", duration=2, style={"font_size": 72})
    return (
        Timeline()
        .set_platform("tiktok")
        .add_video("main.mp4", volume=0.8, trim_start=1, trim_end=11)
        .add_video(intro, start_time=1)
        .add_text("Olá: mundo", start_time=1, duration=3, position={"x": "50%", "y": 100, "anchor": "center"})
        .add_image("logo.png", start_time=2, position="top-right", opacity=0.7)
        .add_watermark("wm.png", opacity=0.5)
        .add_filter("blur", {"radius": 2}, start_time=3, duration=1)
        .add_audio("music.mp3", volume=0.3, fade_in=1, echo=True, loop=True)
        .add_audio("voice.mp3", start_time=0.5)
        .add_dialogue_mix()
        .add_captions([("Primeira", 0, 2), ("Segunda", 2, 4)], preset="youtube")
        .add_ken_burns("photo.jpg", start_time=5, duration=3, seed=3)
        .add_green_screen("fg.mp4", "bg.jpg", start_time=6, duration=2)
        .add_transition("outro.mp4", transition="slideleft")
        .crop(1080, 1600, 0, 160)
        .use_codec_preset("web")
    )


def test_json_round_trip(complex_timeline):
    """Testa que to_json/from_json preserva a timeline"""
    data = json.dumps(complex_timeline.to_json())
    restored = Timeline.from_json(data)
    assert restored == complex_timeline
    assert restored.get_command("o.mp4") == complex_timeline.get_command("o.mp4")


def test_document_shape(complex_timeline):
    data = complex_timeline.to_json()
    assert data["version"] == FORMAT_VERSION
    assert data["layers"][0]["kind"] == "video"
    assert data["layers"][1]["source"]["timeline"]["layers"][0]["kind"] == "text"
    assert data["options"]["platform"] == "tiktok"


def test_from_dict():
    t = Timeline.from_json({"layers": [{"kind": "text", "text": "Olá", "duration": 2}]})
    assert t.layers[0].text == "Olá"
    assert t.get_duration() == 2


class TestErrors:
    """Testes de documentos malformados"""

    def test_invalid_json(self):
        with pytest.raises(SerializationError):
            Timeline.from_json("{not json")

    def test_missing_layers(self):
        with pytest.raises(SerializationError):
            Timeline.from_json({"options": {}})

    def test_unknown_version(self):
        with pytest.raises(SerializationError):
            Timeline.from_json({"version": 99, "layers": []})

    def test_unknown_kind(self):
        with pytest.raises(SerializationError):
            layer_from_dict({"kind": "hologram"})

    def test_unknown_field(self):
        with pytest.raises(SerializationError):
            layer_from_dict({"kind": "text", "text": "Olá", "blink": True})

    def test_missing_required_field(self):
        with pytest.raises(SerializationError):
            layer_from_dict({"kind": "video"})

    def test_invalid_value(self):
        with pytest.raises(SerializationError):
            layer_from_dict({"kind": "text", "text": ""})

    def test_unknown_option(self):
        with pytest.raises(SerializationError):
            Timeline.from_json({"layers": [], "options": {"resolution": "4k"}})
