# -*- coding: utf-8 -*-
"""
Atalhos para criar timelines já configuradas para uma plataforma
"""

from typing import Optional, Sequence

from .domain.errors import TimelineValidationError
from .domain.models.timeline import Timeline


def for_platform(name: str) -> Timeline:
    return Timeline().set_platform(name)


def tiktok() -> Timeline:
    return for_platform("tiktok")


def youtube() -> Timeline:
    return for_platform("youtube")


def youtube_shorts() -> Timeline:
    return for_platform("youtube-shorts")


def instagram() -> Timeline:
    """Reels (9:16)"""
    return for_platform("instagram")


def instagram_square() -> Timeline:
    return for_platform("instagram-square")


def instagram_story() -> Timeline:
    return for_platform("instagram-story")


def twitter() -> Timeline:
    return for_platform("twitter")


def linkedin() -> Timeline:
    return for_platform("linkedin")


def slideshow(
    images: Sequence[str],
    seconds_per_image: float = 3.0,
    platform: Optional[str] = None,
    music: Optional[str] = None,
    music_volume: float = 0.5,
) -> Timeline:
    """
    Uma imagem após a outra, cada uma por ``seconds_per_image`` segundos.

    Com ``music``, a trilha entra em loop e termina junto com a última imagem.
    """
    if not images:
        raise TimelineValidationError("slideshow precisa de ao menos uma imagem")
    if seconds_per_image <= 0:
        raise TimelineValidationError("seconds_per_image deve ser > 0")

    timeline = Timeline()
    if platform:
        timeline = timeline.set_platform(platform)
    for index, image in enumerate(images):
        timeline = timeline.add_image(
            image, start_time=index * seconds_per_image, duration=seconds_per_image
        )
    if music:
        timeline = timeline.add_audio(music, volume=music_volume, loop=True)
    return timeline
