# -*- coding: utf-8 -*-
"""
Timeline imutável: lista ordenada de layers e opções globais de render

Todo método ``add_*``/``set_*`` valida os argumentos e devolve uma nova
Timeline; a instância original nunca é alterada.
"""

from __future__ import annotations
import dataclasses
import json
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from ..errors import TimelineValidationError
from .layers import (
    FULL,
    CORNERS,
    AudioDuckingLayer,
    AudioLayer,
    ChromaKeyLayer,
    Duration,
    Echo,
    FilterLayer,
    ImageLayer,
    Layer,
    TextLayer,
    TransitionLayer,
    VideoLayer,
    WatermarkLayer,
    coerce_position,
    coerce_style,
    normalize_volume,
    shift_layer,
)
from .platform import CODEC_PRESETS, get_platform_preset, parse_aspect_ratio

if TYPE_CHECKING:
    from ...application.services.compilation_service import CompiledCommand
    from ...application.services.validation_service import ValidationReport
    from ...infra.settings import SdkSettings
    from .effects import TimelineEffect


@dataclass(frozen=True)
class CropOptions:
    """Crop global aplicado à base da composição"""

    width: int
    height: int
    x: int = 0
    y: int = 0

    def __post_init__(self):
        if self.width <= 0 or self.height <= 0:
            raise TimelineValidationError("crop: largura e altura devem ser > 0")
        if self.x < 0 or self.y < 0:
            raise TimelineValidationError("crop: x e y devem ser >= 0")


@dataclass(frozen=True)
class TimelineOptions:
    """Opções globais de render"""

    platform: Optional[str] = None
    aspect_ratio: Optional[str] = None
    frame_rate: Optional[float] = None
    duration: Optional[float] = None
    trim_start: Optional[float] = None
    trim_end: Optional[float] = None
    crop: Optional[CropOptions] = None
    scale: Optional[Tuple[int, int]] = None
    codec_preset: Optional[str] = None
    video_codec: Optional[str] = None
    audio_codec: Optional[str] = None
    crf: Optional[int] = None
    preset: Optional[str] = None
    video_bitrate: Optional[str] = None
    audio_bitrate: Optional[str] = None
    hardware_acceleration: Optional[str] = None


def layer_end(layer: Layer, settings: "SdkSettings") -> float:
    """
    Fim estimado do layer na timeline.

    Mídias ``"full"`` usam ``source_duration`` quando informado e, senão, os
    padrões das settings. Layers que só acompanham a timeline (filtros,
    marcas d'água, áudio em loop, ducking) não a estendem.
    """
    if isinstance(layer, AudioDuckingLayer):
        return 0.0
    if isinstance(layer, TransitionLayer):
        return layer.start_time + (layer.source_duration or settings.default_video_duration)
    if isinstance(layer, ChromaKeyLayer) and layer.duration == FULL:
        return layer.start_time + settings.default_video_duration
    if isinstance(layer, VideoLayer) and layer.is_nested:
        if layer.duration != FULL:
            return layer.start_time + layer.duration
        return layer.start_time + layer.source.get_duration(settings)
    if layer.duration != FULL:
        return layer.start_time + layer.duration

    if isinstance(layer, (VideoLayer, AudioLayer)):
        if isinstance(layer, AudioLayer) and layer.loop:
            return 0.0
        if layer.trim_end is not None:
            return layer.start_time + layer.trim_end - (layer.trim_start or 0)
        if layer.source_duration:
            return layer.start_time + layer.source_duration - (layer.trim_start or 0)
        default = (
            settings.default_video_duration
            if isinstance(layer, VideoLayer)
            else settings.default_audio_duration
        )
        return layer.start_time + default
    return 0.0


def _default_settings() -> "SdkSettings":
    from ...infra.settings import settings

    return settings


@dataclass(frozen=True)
class Timeline:
    """Timeline de composição: layers aplicados da esquerda para a direita"""

    layers: Tuple[Layer, ...] = ()
    options: TimelineOptions = field(default_factory=TimelineOptions)

    def __post_init__(self):
        if not isinstance(self.layers, tuple):
            object.__setattr__(self, "layers", tuple(self.layers))

    # ------------------------------------------------------------------
    # Primitivas

    def add_layer(self, layer: Layer) -> "Timeline":
        """Nova timeline com o layer anexado ao fim"""
        return dataclasses.replace(self, layers=self.layers + (layer,))

    def _with_options(self, **changes: Any) -> "Timeline":
        return dataclasses.replace(self, options=dataclasses.replace(self.options, **changes))

    def apply(self, effect: "TimelineEffect") -> "Timeline":
        """Aplica uma capacidade (objeto com ``apply_to(timeline)``)"""
        if not hasattr(effect, "apply_to"):
            raise TimelineValidationError(f"{effect!r} não implementa apply_to(timeline)")
        result = effect.apply_to(self)
        if not isinstance(result, Timeline):
            raise TimelineValidationError(f"{effect!r}.apply_to deve retornar uma Timeline")
        return result

    def pipe(self, func: Callable[..., "Timeline"], *args: Any, **kwargs: Any) -> "Timeline":
        return func(self, *args, **kwargs)

    # ------------------------------------------------------------------
    # Mídia

    def add_video(
        self,
        source: Union[str, "Timeline"],
        start_time: float = 0.0,
        duration: Duration = FULL,
        position: Any = None,
        volume: Optional[float] = None,
        mute: bool = False,
        trim_start: Optional[float] = None,
        trim_end: Optional[float] = None,
        scale: Optional[float] = None,
        source_duration: Optional[float] = None,
    ) -> "Timeline":
        return self.add_layer(
            VideoLayer(
                source=source,
                start_time=start_time,
                duration=duration,
                position=coerce_position(position),
                volume=normalize_volume(volume),
                mute=mute,
                trim_start=trim_start,
                trim_end=trim_end,
                scale=scale,
                source_duration=source_duration,
            )
        )

    def add_audio(
        self,
        source: str,
        start_time: float = 0.0,
        duration: Duration = FULL,
        volume: Optional[float] = None,
        fade_in: Optional[float] = None,
        fade_out: Optional[float] = None,
        loop: bool = False,
        trim_start: Optional[float] = None,
        trim_end: Optional[float] = None,
        pitch: Optional[float] = None,
        tempo: Optional[float] = None,
        lowpass: Optional[float] = None,
        highpass: Optional[float] = None,
        echo: Any = None,
        reverb: bool = False,
        source_duration: Optional[float] = None,
    ) -> "Timeline":
        if isinstance(echo, Mapping):
            echo = Echo(**echo)
        elif echo is True:
            echo = Echo()
        elif echo is False:
            echo = None
        return self.add_layer(
            AudioLayer(
                source=source,
                start_time=start_time,
                duration=duration,
                volume=normalize_volume(volume),
                fade_in=fade_in,
                fade_out=fade_out,
                loop=loop,
                trim_start=trim_start,
                trim_end=trim_end,
                pitch=pitch,
                tempo=tempo,
                lowpass=lowpass,
                highpass=highpass,
                echo=echo,
                reverb=reverb,
                source_duration=source_duration,
            )
        )

    def add_text(
        self,
        text: str,
        start_time: float = 0.0,
        duration: Duration = 5.0,
        position: Any = "center",
        style: Any = None,
        **style_overrides: Any,
    ) -> "Timeline":
        """Texto com drawtext; kwargs extras (font_size, color, ...) ajustam o estilo"""
        text_style = coerce_style(style)
        if style_overrides:
            text_style = text_style.merged(**style_overrides)
        return self.add_layer(
            TextLayer(
                text=text,
                start_time=start_time,
                duration=duration,
                position=coerce_position(position),
                style=text_style,
            )
        )

    def add_image(
        self,
        source: str,
        start_time: float = 0.0,
        duration: Duration = 5.0,
        position: Any = None,
        scale: Optional[float] = None,
        opacity: Optional[float] = None,
    ) -> "Timeline":
        return self.add_layer(
            ImageLayer(
                source=source,
                start_time=start_time,
                duration=duration,
                position=coerce_position(position),
                scale=scale,
                opacity=opacity,
            )
        )

    def add_watermark(
        self,
        source: str,
        position: str = "bottom-right",
        margin: int = 20,
        scale: Optional[float] = None,
        opacity: Optional[float] = None,
        start_time: float = 0.0,
        duration: Duration = FULL,
    ) -> "Timeline":
        return self.add_layer(
            WatermarkLayer(
                source=source,
                position=coerce_position(position, CORNERS),
                margin=margin,
                scale=scale,
                opacity=opacity,
                start_time=start_time,
                duration=duration,
            )
        )

    def add_filter(
        self,
        name: str,
        params: Optional[Mapping[str, Any]] = None,
        target: str = "video",
        start_time: float = 0.0,
        duration: Duration = FULL,
    ) -> "Timeline":
        """Filtro nomeado da biblioteca ou filtro FFmpeg cru, aplicado na ordem das chamadas"""
        from ...plugins.builtin.effects.filters import check_filter_window

        layer = FilterLayer(
            name=name,
            params=dict(params or {}),
            target=target,
            start_time=start_time,
            duration=duration,
        )
        check_filter_window(layer)
        return self.add_layer(layer)

    # ------------------------------------------------------------------
    # Legendas

    def add_captions(
        self,
        captions: Iterable[Any],
        style: Any = None,
        preset: Optional[str] = None,
        position: Any = "bottom",
    ) -> "Timeline":
        from ...plugins.builtin.effects.subtitle import Captions

        return self.apply(Captions.from_items(list(captions), style=style, preset=preset, position=position))

    def add_captions_from_srt(
        self,
        srt_content: str,
        style: Any = None,
        preset: Optional[str] = None,
        position: Any = "bottom",
    ) -> "Timeline":
        from ...plugins.builtin.effects.subtitle import Captions

        return self.apply(Captions.from_srt(srt_content, style=style, preset=preset, position=position))

    def add_word_highlighting(
        self,
        text: str,
        start_time: float = 0.0,
        words_per_second: float = 2.5,
        preset: str = "tiktok",
        **kwargs: Any,
    ) -> "Timeline":
        from ...plugins.builtin.effects.subtitle import WordHighlighting

        return self.apply(
            WordHighlighting(
                text=text,
                start_time=start_time,
                words_per_second=words_per_second,
                preset=preset,
                **kwargs,
            )
        )

    # ------------------------------------------------------------------
    # Pan/zoom

    def add_pan_zoom(self, source: Optional[str] = None, **kwargs: Any) -> "Timeline":
        from ...plugins.builtin.effects.pan_zoom import PanZoom

        return self.apply(PanZoom(source=source, **kwargs))

    def add_ken_burns(self, source: Optional[str] = None, **kwargs: Any) -> "Timeline":
        from ...plugins.builtin.effects.pan_zoom import KenBurns

        return self.apply(KenBurns(source=source, **kwargs))

    def add_zoom_in(self, source: Optional[str] = None, **kwargs: Any) -> "Timeline":
        from ...plugins.builtin.effects.pan_zoom import zoom_in

        return self.apply(zoom_in(source, **kwargs))

    def add_zoom_out(self, source: Optional[str] = None, **kwargs: Any) -> "Timeline":
        from ...plugins.builtin.effects.pan_zoom import zoom_out

        return self.apply(zoom_out(source, **kwargs))

    # ------------------------------------------------------------------
    # Green screen

    def add_green_screen(
        self, foreground: str, background: Optional[str] = None, **kwargs: Any
    ) -> "Timeline":
        from ...plugins.builtin.effects.chroma_key import GreenScreen

        return self.apply(GreenScreen(foreground=foreground, background=background, **kwargs))

    def add_green_screen_with_image_background(
        self, foreground: str, image: str, **kwargs: Any
    ) -> "Timeline":
        return self.add_green_screen(foreground, image, background_type="image", **kwargs)

    def add_green_screen_with_video_background(
        self, foreground: str, video: str, loop: bool = True, **kwargs: Any
    ) -> "Timeline":
        return self.add_green_screen(
            foreground, video, background_type="video", background_loop=loop, **kwargs
        )

    def add_green_screen_with_color_background(
        self, foreground: str, color: str = "black", **kwargs: Any
    ) -> "Timeline":
        return self.add_green_screen(foreground, color, background_type="color", **kwargs)

    def add_green_screen_meme(
        self,
        foreground: str,
        background: str,
        template: str,
        intensity: str = "medium",
        quality: str = "standard",
        **overrides: Any,
    ) -> "Timeline":
        from ...plugins.builtin.effects.chroma_key import meme_green_screen

        return self.apply(
            meme_green_screen(foreground, background, template, intensity, quality, **overrides)
        )

    # ------------------------------------------------------------------
    # Ducking

    def add_audio_ducking(
        self, mode: str = "manual", regions: Iterable[Any] = (), **kwargs: Any
    ) -> "Timeline":
        from ...plugins.builtin.effects.audio_ducking import AudioDucking

        return self.apply(AudioDucking(mode=mode, regions=tuple(regions), **kwargs))

    def duck_audio_at(self, regions: Iterable[Any], level: float = 0.3, **kwargs: Any) -> "Timeline":
        from ...plugins.builtin.effects.audio_ducking import duck_at

        return self.apply(duck_at(regions, level, **kwargs))

    def add_dialogue_mix(self, **kwargs: Any) -> "Timeline":
        from ...plugins.builtin.effects.audio_ducking import dialogue_mix

        return self.apply(dialogue_mix(**kwargs))

    def add_podcast_mix(self, **kwargs: Any) -> "Timeline":
        from ...plugins.builtin.effects.audio_ducking import podcast_mix

        return self.apply(podcast_mix(**kwargs))

    def add_music_bed(self, **kwargs: Any) -> "Timeline":
        from ...plugins.builtin.effects.audio_ducking import music_bed

        return self.apply(music_bed(**kwargs))

    # ------------------------------------------------------------------
    # Transições

    def add_transition(
        self,
        source: str,
        transition: str = "fade",
        duration: float = 1.0,
        offset: Optional[float] = None,
        mute: bool = False,
        source_duration: Optional[float] = None,
    ) -> "Timeline":
        """
        Encadeia um clipe com transição. Sem ``offset``, a transição começa
        ``duration`` segundos antes do fim atual da timeline.
        """
        from ...plugins.builtin.transitions.registry import get_transition

        get_transition(transition)
        if offset is None:
            offset = max(self.get_duration() - duration, 0.0)
        return self.add_layer(
            TransitionLayer(
                source=source,
                transition=transition,
                duration=duration,
                start_time=offset,
                mute=mute,
                source_duration=source_duration,
            )
        )

    # ------------------------------------------------------------------
    # Opções globais

    def trim(self, start: float, end: Optional[float] = None) -> "Timeline":
        if start < 0:
            raise TimelineValidationError("trim: início deve ser >= 0")
        if end is not None and end <= start:
            raise TimelineValidationError("trim: fim deve ser maior que o início")
        return self._with_options(trim_start=start, trim_end=end)

    def crop(self, width: int, height: int, x: int = 0, y: int = 0) -> "Timeline":
        return self._with_options(crop=CropOptions(width, height, x, y))

    def scale(self, width: int, height: int) -> "Timeline":
        if width <= 0 or height <= 0:
            raise TimelineValidationError("scale: largura e altura devem ser > 0")
        return self._with_options(scale=(width, height))

    def set_aspect_ratio(self, ratio: str) -> "Timeline":
        parse_aspect_ratio(ratio)
        return self._with_options(aspect_ratio=ratio.replace(" ", ""), platform=None)

    def set_platform(self, name: str) -> "Timeline":
        """Plataformas desconhecidas são aceitas e ignoradas na compilação"""
        preset = get_platform_preset(name)
        return self._with_options(
            platform=name, aspect_ratio=preset.aspect_ratio if preset else None
        )

    def set_frame_rate(self, fps: float) -> "Timeline":
        if fps <= 0:
            raise TimelineValidationError("frame rate deve ser > 0")
        return self._with_options(frame_rate=fps)

    def set_duration(self, seconds: float) -> "Timeline":
        if seconds <= 0:
            raise TimelineValidationError("duração deve ser > 0")
        return self._with_options(duration=seconds)

    def use_codec_preset(self, name: str) -> "Timeline":
        if name not in CODEC_PRESETS:
            raise TimelineValidationError(
                f"preset de codec desconhecido: {name!r} (opções: {', '.join(CODEC_PRESETS)})"
            )
        return self._with_options(codec_preset=name)

    def set_video_codec(
        self,
        codec: str,
        crf: Optional[int] = None,
        preset: Optional[str] = None,
        bitrate: Optional[str] = None,
    ) -> "Timeline":
        if not codec:
            raise TimelineValidationError("codec de vídeo não pode ser vazio")
        if crf is not None and not 0 <= crf <= 51:
            raise TimelineValidationError("crf deve estar entre 0 e 51")
        changes = {"video_codec": codec, "crf": crf, "preset": preset, "video_bitrate": bitrate}
        return self._with_options(**{k: v for k, v in changes.items() if v is not None})

    def set_audio_codec(self, codec: str, bitrate: Optional[str] = None) -> "Timeline":
        if not codec:
            raise TimelineValidationError("codec de áudio não pode ser vazio")
        if bitrate is None:
            return self._with_options(audio_codec=codec)
        return self._with_options(audio_codec=codec, audio_bitrate=bitrate)

    def set_hardware_acceleration(self, name: str) -> "Timeline":
        return self._with_options(hardware_acceleration=name)

    # ------------------------------------------------------------------
    # Composição

    def concat(self, other: "Timeline") -> "Timeline":
        """Anexa os layers de ``other`` deslocados pela duração desta timeline"""
        offset = self.get_duration()
        shifted = tuple(shift_layer(layer, offset) for layer in other.layers)
        return dataclasses.replace(self, layers=self.layers + shifted)

    def merge(self, other: "Timeline") -> "Timeline":
        """Anexa os layers de ``other`` sem deslocamento"""
        return dataclasses.replace(self, layers=self.layers + other.layers)

    # ------------------------------------------------------------------
    # Consulta e compilação

    def get_layers(self) -> List[Layer]:
        return list(self.layers)

    def get_duration(self, settings: "SdkSettings" = None) -> float:
        if self.options.duration is not None:
            return self.options.duration
        settings = settings or _default_settings()
        duration = max((layer_end(layer, settings) for layer in self.layers), default=0.0)
        if self.options.trim_end is not None:
            duration = min(duration, self.options.trim_end)
        if self.options.trim_start:
            duration = max(duration - self.options.trim_start, 0.0)
        return duration

    def compile(self, output_path: str, settings: "SdkSettings" = None) -> "CompiledCommand":
        from ...application.services.compilation_service import CompilationService

        return CompilationService(settings).compile(self, output_path)

    def get_command(self, output_path: str, settings: "SdkSettings" = None) -> str:
        """Linha de comando FFmpeg; idêntica para a mesma timeline e saída"""
        return self.compile(output_path, settings).command

    def to_json(self) -> dict:
        from ...infra.serialization import timeline_to_dict

        return timeline_to_dict(self)

    @classmethod
    def from_json(cls, data: Union[str, Mapping[str, Any]]) -> "Timeline":
        from ...infra.serialization import timeline_from_dict

        if isinstance(data, str):
            try:
                data = json.loads(data)
            except json.JSONDecodeError as e:
                from ..errors import SerializationError

                raise SerializationError(f"JSON inválido: {e}") from e
        return timeline_from_dict(data)

    def validate(self, strategies: Optional[Sequence[Any]] = None) -> "ValidationReport":
        from ...application.services.validation_service import ValidationService

        return ValidationService().validate(self, strategies)

    def validate_for_platform(self, name: str) -> "ValidationReport":
        from ...application.services.validation_service import ValidationService, platform_refs

        return ValidationService().validate(self, platform_refs(name))
