# -*- coding: utf-8 -*-
"""
media_sdk/domain/models/layers.py
Modelo de layers da timeline

Cada layer é um valor imutável que descreve uma unidade de composição
temporizada. O conjunto de variantes é fechado: ``Layer`` é a união de
todas elas e o compilador trata cada variante explicitamente.
"""

from __future__ import annotations
import dataclasses
from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, Literal, Mapping, Optional, Tuple, Union

from ..errors import TimelineValidationError

FULL = "full"

Duration = Union[float, Literal["full"]]

ANCHORS = (
    "top-left",
    "top-center",
    "top-right",
    "center-left",
    "center",
    "center-right",
    "bottom-left",
    "bottom-center",
    "bottom-right",
)

CORNERS = ("top-left", "top-right", "bottom-left", "bottom-right")

POSITION_KEYWORDS = ("center", "top", "bottom", "left", "right") + CORNERS

EASINGS = ("linear", "ease-in", "ease-out", "ease-in-out")

KEN_BURNS_DIRECTIONS = ("center-out", "top-bottom", "left-right", "diagonal", "random")

BACKGROUND_TYPES = ("image", "video", "color")

BACKGROUND_SCALES = ("fit", "fill", "crop", "stretch")

CHROMA_AUDIO_MIXES = ("greenscreen", "background", "both", "none")

DUCKING_MODES = ("manual", "sidechain", "automatic")


def _require(condition: bool, message: str) -> None:
    if not condition:
        raise TimelineValidationError(message)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _check_source(source: Any, what: str = "source") -> None:
    _require(isinstance(source, str), f"{what} deve ser um caminho (str)")
    _require(bool(source.strip()), f"{what} não pode ser vazio")


def _check_start(start_time: Any) -> None:
    _require(_is_number(start_time), "start_time deve ser numérico")
    _require(start_time >= 0, f"start_time deve ser >= 0 (recebido {start_time})")


def _check_duration(duration: Any, allow_full: bool = True) -> None:
    if duration == FULL and allow_full:
        return
    _require(_is_number(duration), f"duration inválida: {duration!r}")
    _require(duration > 0, f"duration deve ser > 0 (recebido {duration})")


def _check_optional_positive(value: Any, name: str) -> None:
    if value is None:
        return
    _require(_is_number(value), f"{name} deve ser numérico")
    _require(value > 0, f"{name} deve ser > 0 (recebido {value})")


def _check_unit_interval(value: Any, name: str) -> None:
    if value is None:
        return
    _require(_is_number(value), f"{name} deve ser numérico")
    _require(0 <= value <= 1, f"{name} deve estar entre 0 e 1 (recebido {value})")


def _check_choice(value: Any, choices: Tuple[str, ...], name: str) -> None:
    _require(value in choices, f"{name} inválido: {value!r} (opções: {', '.join(choices)})")


def _check_trim(trim_start: Any, trim_end: Any) -> None:
    if trim_start is not None:
        _require(_is_number(trim_start) and trim_start >= 0, "trim_start deve ser >= 0")
    if trim_end is not None:
        _require(_is_number(trim_end) and trim_end > 0, "trim_end deve ser > 0")
        _require(
            trim_end > (trim_start or 0), "trim_end deve ser maior que trim_start"
        )


def normalize_volume(volume: Any) -> Optional[float]:
    """
    Normaliza volume: 0 a 2 é ganho linear, acima de 2 até 100 é percentual.
    """
    if volume is None:
        return None
    _require(_is_number(volume), "volume deve ser numérico")
    _require(0 <= volume <= 100, f"volume deve estar entre 0 e 100 (recebido {volume})")
    if volume > 2:
        return volume / 100
    return volume


@dataclass(frozen=True)
class Position:
    """Posição explícita: números absolutos, percentuais ('50%') ou expressões"""

    x: Union[float, str]
    y: Union[float, str]
    anchor: str = "top-left"

    def __post_init__(self):
        _check_choice(self.anchor, ANCHORS, "anchor")
        for axis in (self.x, self.y):
            _require(
                _is_number(axis) or (isinstance(axis, str) and axis.strip() != ""),
                f"coordenada inválida: {axis!r}",
            )
            if isinstance(axis, str) and axis.endswith("%"):
                try:
                    float(axis[:-1])
                except ValueError:
                    raise TimelineValidationError(f"percentual inválido: {axis!r}")


PositionSpec = Union[str, Position]


def coerce_position(value: Any, allowed: Tuple[str, ...] = POSITION_KEYWORDS) -> Optional[PositionSpec]:
    """Converte dict/str/Position para uma posição validada"""
    if value is None or isinstance(value, Position):
        return value
    if isinstance(value, Mapping):
        return Position(**value)
    if isinstance(value, str):
        _check_choice(value, allowed, "position")
        return value
    raise TimelineValidationError(f"position inválida: {value!r}")


@dataclass(frozen=True)
class TextStyle:
    """Estilo de texto desenhado com drawtext"""

    font_size: int = 24
    color: str = "white"
    font_family: Optional[str] = None
    font_file: Optional[str] = None
    background_color: Optional[str] = None
    padding: Optional[int] = None
    stroke_color: Optional[str] = None
    stroke_width: Optional[int] = None
    shadow_color: Optional[str] = None
    shadow_x: Optional[int] = None
    shadow_y: Optional[int] = None
    line_spacing: Optional[int] = None

    def __post_init__(self):
        _require(_is_number(self.font_size) and self.font_size > 0, "font_size deve ser > 0")
        _require(bool(self.color), "color não pode ser vazio")

    def merged(self, **overrides: Any) -> "TextStyle":
        """Retorna novo estilo com os campos informados sobrescritos"""
        values = {k: v for k, v in overrides.items() if v is not None}
        return dataclasses.replace(self, **values)


def coerce_style(value: Any) -> TextStyle:
    if value is None:
        return TextStyle()
    if isinstance(value, TextStyle):
        return value
    if isinstance(value, Mapping):
        return TextStyle(**value)
    raise TimelineValidationError(f"style inválido: {value!r}")


@dataclass(frozen=True)
class Echo:
    """Parâmetros de eco (aecho)"""

    delay: float = 0.5
    decay: float = 0.5

    def __post_init__(self):
        _check_optional_positive(self.delay, "echo.delay")
        _check_unit_interval(self.decay, "echo.decay")


@dataclass(frozen=True)
class VideoLayer:
    """Clipe de vídeo; o primeiro vídeo da timeline vira a base da composição"""

    kind: ClassVar[str] = "video"

    source: Any  # caminho ou Timeline aninhada
    start_time: float = 0.0
    duration: Duration = FULL
    position: Optional[PositionSpec] = None
    volume: Optional[float] = None
    mute: bool = False
    trim_start: Optional[float] = None
    trim_end: Optional[float] = None
    scale: Optional[float] = None
    source_duration: Optional[float] = None

    def __post_init__(self):
        if isinstance(self.source, str):
            _check_source(self.source)
        else:
            _require(hasattr(self.source, "layers"), "source deve ser caminho ou Timeline")
        _check_start(self.start_time)
        _check_duration(self.duration)
        _check_trim(self.trim_start, self.trim_end)
        _check_optional_positive(self.scale, "scale")
        _check_optional_positive(self.source_duration, "source_duration")
        if self.volume is not None:
            _require(_is_number(self.volume) and 0 <= self.volume <= 2, "volume deve estar entre 0 e 2")

    @property
    def is_nested(self) -> bool:
        return not isinstance(self.source, str)


@dataclass(frozen=True)
class AudioLayer:
    """Faixa de áudio; cada uma vira um pad pendente para o amix final"""

    kind: ClassVar[str] = "audio"

    source: str
    start_time: float = 0.0
    duration: Duration = FULL
    volume: Optional[float] = None
    fade_in: Optional[float] = None
    fade_out: Optional[float] = None
    loop: bool = False
    trim_start: Optional[float] = None
    trim_end: Optional[float] = None
    pitch: Optional[float] = None
    tempo: Optional[float] = None
    lowpass: Optional[float] = None
    highpass: Optional[float] = None
    echo: Optional[Echo] = None
    reverb: bool = False
    source_duration: Optional[float] = None

    def __post_init__(self):
        _check_source(self.source)
        _check_start(self.start_time)
        _check_duration(self.duration)
        _check_trim(self.trim_start, self.trim_end)
        if self.volume is not None:
            _require(_is_number(self.volume) and 0 <= self.volume <= 2, "volume deve estar entre 0 e 2")
        for name in ("fade_in", "fade_out", "pitch", "lowpass", "highpass", "source_duration"):
            _check_optional_positive(getattr(self, name), name)
        if self.tempo is not None:
            _require(_is_number(self.tempo) and 0.5 <= self.tempo <= 100, "tempo deve estar entre 0.5 e 100")


@dataclass(frozen=True)
class ImageLayer:
    """Imagem estática sobreposta (ou base, se não houver vídeo)"""

    kind: ClassVar[str] = "image"

    source: str
    start_time: float = 0.0
    duration: Duration = 5.0
    position: Optional[PositionSpec] = None
    scale: Optional[float] = None
    opacity: Optional[float] = None

    def __post_init__(self):
        _check_source(self.source)
        _check_start(self.start_time)
        _check_duration(self.duration)
        _check_optional_positive(self.scale, "scale")
        _check_unit_interval(self.opacity, "opacity")


@dataclass(frozen=True)
class TextLayer:
    """Texto desenhado com drawtext"""

    kind: ClassVar[str] = "text"

    text: str
    start_time: float = 0.0
    duration: Duration = 5.0
    position: Optional[PositionSpec] = "center"
    style: TextStyle = field(default_factory=TextStyle)

    def __post_init__(self):
        _require(isinstance(self.text, str) and self.text.strip() != "", "text não pode ser vazio")
        _check_start(self.start_time)
        _check_duration(self.duration)


@dataclass(frozen=True)
class CaptionUnit:
    """Uma unidade de legenda (frase ou palavra) com janela própria, relativa ao layer"""

    text: str
    start: float
    end: float
    position: Optional[PositionSpec] = "bottom"
    style: TextStyle = field(default_factory=TextStyle)

    def __post_init__(self):
        _require(isinstance(self.text, str) and self.text.strip() != "", "texto da legenda não pode ser vazio")
        _require(_is_number(self.start) and self.start >= 0, "start da legenda deve ser >= 0")
        _require(_is_number(self.end) and self.end > self.start, "end da legenda deve ser maior que start")


@dataclass(frozen=True)
class CaptionLayer:
    """Lista de legendas ou palavras destacadas, uma drawtext por unidade"""

    kind: ClassVar[str] = "caption"

    units: Tuple[CaptionUnit, ...]
    start_time: float = 0.0

    def __post_init__(self):
        _require(len(self.units) > 0, "legenda sem unidades")
        _check_start(self.start_time)

    @property
    def duration(self) -> float:
        return max(unit.end for unit in self.units)


@dataclass(frozen=True)
class WatermarkLayer:
    """Marca d'água fixa em um dos cantos"""

    kind: ClassVar[str] = "watermark"

    source: str
    position: str = "bottom-right"
    margin: int = 20
    scale: Optional[float] = None
    opacity: Optional[float] = None
    start_time: float = 0.0
    duration: Duration = FULL

    def __post_init__(self):
        _check_source(self.source)
        _check_choice(self.position, CORNERS, "position da marca d'água")
        _require(_is_number(self.margin) and self.margin >= 0, "margin deve ser >= 0")
        _check_optional_positive(self.scale, "scale")
        _check_unit_interval(self.opacity, "opacity")
        _check_start(self.start_time)
        _check_duration(self.duration)


@dataclass(frozen=True)
class FilterLayer:
    """Filtro nomeado (biblioteca) ou filtro FFmpeg cru aplicado em ordem"""

    kind: ClassVar[str] = "filter"

    name: str
    params: Mapping[str, Any] = field(default_factory=dict)
    target: Literal["video", "audio"] = "video"
    start_time: float = 0.0
    duration: Duration = FULL

    def __post_init__(self):
        _require(isinstance(self.name, str) and self.name.strip() != "", "nome do filtro não pode ser vazio")
        _check_choice(self.target, ("video", "audio"), "target")
        _check_start(self.start_time)
        _check_duration(self.duration)


@dataclass(frozen=True)
class PanZoomLayer:
    """
    Movimento de câmera (zoompan)

    ``start_x``/``start_y``/``end_x``/``end_y`` são frações de pan: 0 é a borda
    esquerda/superior, 0.5 o centro e 1 a borda direita/inferior. Quando
    ``direction`` está definido (Ken Burns) os pontos são derivados dele.
    """

    kind: ClassVar[str] = "pan_zoom"

    source: Optional[str] = None
    start_time: float = 0.0
    duration: float = 5.0
    start_zoom: float = 1.0
    end_zoom: float = 1.3
    start_x: float = 0.5
    start_y: float = 0.5
    end_x: float = 0.5
    end_y: float = 0.5
    easing: str = "linear"
    direction: Optional[str] = None
    seed: Optional[int] = None

    def __post_init__(self):
        if self.source is not None:
            _check_source(self.source)
        _check_start(self.start_time)
        _check_duration(self.duration, allow_full=False)
        _check_optional_positive(self.start_zoom, "start_zoom")
        _check_optional_positive(self.end_zoom, "end_zoom")
        for name in ("start_x", "start_y", "end_x", "end_y"):
            _check_unit_interval(getattr(self, name), name)
        _check_choice(self.easing, EASINGS, "easing")
        if self.direction is not None:
            _check_choice(self.direction, KEN_BURNS_DIRECTIONS, "direction")


@dataclass(frozen=True)
class ChromaKeyLayer:
    """Composição chroma key: remove a cor do foreground e sobrepõe num fundo"""

    kind: ClassVar[str] = "chroma_key"

    source: str
    background: Optional[str] = None
    background_type: Optional[str] = None
    color: str = "#00FF00"
    similarity: float = 0.4
    blend: float = 0.1
    yuv: bool = False
    background_scale: str = "fill"
    background_loop: bool = False
    audio_mix: str = "greenscreen"
    start_time: float = 0.0
    duration: Duration = FULL
    position: Optional[PositionSpec] = None
    scale: Optional[float] = None

    def __post_init__(self):
        _check_source(self.source, "foreground")
        if self.background is not None:
            _check_source(self.background, "background")
            _check_choice(self.background_type, BACKGROUND_TYPES, "background_type")
        _require(bool(self.color), "color não pode ser vazio")
        _check_unit_interval(self.similarity, "similarity")
        _check_unit_interval(self.blend, "blend")
        _check_choice(self.background_scale, BACKGROUND_SCALES, "background_scale")
        _check_choice(self.audio_mix, CHROMA_AUDIO_MIXES, "audio_mix")
        _check_start(self.start_time)
        _check_duration(self.duration)
        _check_optional_positive(self.scale, "scale")


@dataclass(frozen=True)
class DuckingRegion:
    """Intervalo em que a trilha de fundo deve abaixar"""

    start: float
    end: float
    level: Optional[float] = None

    def __post_init__(self):
        _require(_is_number(self.start) and self.start >= 0, "start da região deve ser >= 0")
        _require(_is_number(self.end) and self.end > self.start, "end da região deve ser maior que start")
        _check_unit_interval(self.level, "level")


@dataclass(frozen=True)
class AudioDuckingLayer:
    """Ducking da trilha de fundo em função da voz (manual, sidechain ou automático)"""

    kind: ClassVar[str] = "audio_ducking"

    mode: str = "manual"
    regions: Tuple[DuckingRegion, ...] = ()
    ducking_level: float = 0.3
    fade_in_time: float = 0.3
    fade_out_time: float = 0.5
    hold_time: float = 0.1
    anticipation: float = 0.1
    detection_threshold: float = -20.0
    compressor_ratio: float = 4.0
    background_track: int = 0
    voice_track: int = 1
    voice_boost: float = 1.0
    frequency_range: Optional[Tuple[float, float]] = None
    start_time: float = 0.0

    def __post_init__(self):
        _check_choice(self.mode, DUCKING_MODES, "mode")
        _require(
            0 < self.ducking_level <= 1,
            f"ducking_level deve estar entre 0 e 1 (recebido {self.ducking_level})",
        )
        for name in ("fade_in_time", "fade_out_time", "hold_time", "anticipation"):
            value = getattr(self, name)
            _require(_is_number(value) and value >= 0, f"{name} deve ser >= 0")
        _require(self.detection_threshold <= 0, "detection_threshold deve ser <= 0 dB")
        _require(1 <= self.compressor_ratio <= 20, "compressor_ratio deve estar entre 1 e 20")
        _require(self.background_track >= 0 and self.voice_track >= 0, "índices de track devem ser >= 0")
        _require(self.background_track != self.voice_track, "background_track e voice_track devem ser diferentes")
        _check_optional_positive(self.voice_boost, "voice_boost")
        if self.mode == "manual":
            _require(len(self.regions) > 0, "ducking manual exige ao menos uma região")
        if self.frequency_range is not None:
            low, high = self.frequency_range
            _require(0 < low < high, "frequency_range deve ser (baixa, alta) com baixa < alta")
        _check_start(self.start_time)

    @property
    def duration(self) -> Duration:
        return FULL


@dataclass(frozen=True)
class TransitionLayer:
    """Clipe que entra com transição xfade a partir de ``start_time``"""

    kind: ClassVar[str] = "transition"

    source: str
    transition: str = "fade"
    duration: float = 1.0
    start_time: float = 0.0
    mute: bool = False
    source_duration: Optional[float] = None

    def __post_init__(self):
        _check_source(self.source)
        _require(isinstance(self.transition, str) and self.transition != "", "transition inválida")
        _check_duration(self.duration, allow_full=False)
        _check_start(self.start_time)
        _check_optional_positive(self.source_duration, "source_duration")


Layer = Union[
    VideoLayer,
    AudioLayer,
    ImageLayer,
    TextLayer,
    CaptionLayer,
    WatermarkLayer,
    FilterLayer,
    PanZoomLayer,
    ChromaKeyLayer,
    AudioDuckingLayer,
    TransitionLayer,
]

LAYER_TYPES: Dict[str, type] = {
    cls.kind: cls
    for cls in (
        VideoLayer,
        AudioLayer,
        ImageLayer,
        TextLayer,
        CaptionLayer,
        WatermarkLayer,
        FilterLayer,
        PanZoomLayer,
        ChromaKeyLayer,
        AudioDuckingLayer,
        TransitionLayer,
    )
}


def shift_layer(layer: Layer, offset: float) -> Layer:
    """Desloca o layer no tempo (usado por concat e timelines aninhadas)"""
    if not offset:
        return layer
    if isinstance(layer, AudioDuckingLayer):
        regions = tuple(
            dataclasses.replace(r, start=r.start + offset, end=r.end + offset)
            for r in layer.regions
        )
        return dataclasses.replace(layer, start_time=layer.start_time + offset, regions=regions)
    return dataclasses.replace(layer, start_time=layer.start_time + offset)
