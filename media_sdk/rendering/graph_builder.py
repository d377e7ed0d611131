# -*- coding: utf-8 -*-
"""
Construção de filtergraph FFmpeg a partir da timeline

O grafo é montado como uma lista de nós explícitos (entradas, cadeia de
filtros, saídas) e só vira texto em ``FilterGraph.to_string``.
"""

from __future__ import annotations
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Sequence, Set, Tuple

from ..domain.errors import MediaSdkError
from ..domain.models.layers import (
    ChromaKeyLayer,
    FilterLayer,
    ImageLayer,
    Layer,
    PanZoomLayer,
    VideoLayer,
    shift_layer,
)
from ..domain.models.platform import canvas_for_aspect_ratio, get_platform_preset
from ..infra.logging import get_logger
from .expressions import format_number

if TYPE_CHECKING:
    from ..domain.models.timeline import Timeline
    from ..infra.settings import SdkSettings


_NEEDS_QUOTES = re.compile(r"[,;:\[\]]")


class Expr(str):
    """Valor de opção renderizado entre aspas simples"""


@dataclass(frozen=True)
class Filter:
    """Um filtro FFmpeg: nome e argumentos ordenados (chave None = posicional)"""

    name: str
    args: Tuple[Tuple[Optional[str], Any], ...] = ()

    def render(self) -> str:
        if not self.args:
            return self.name
        parts = []
        for key, value in self.args:
            text = format_number(value)
            if isinstance(value, Expr) or (
                isinstance(value, str) and not text.startswith("'") and _NEEDS_QUOTES.search(text)
            ):
                text = f"'{text}'"
            parts.append(text if key is None else f"{key}={text}")
        return f"{self.name}=" + ":".join(parts)


def make_filter(name: str, *positional: Any, **options: Any) -> Filter:
    """Atalho: argumentos None são omitidos"""
    args = [(None, value) for value in positional]
    args.extend((key, value) for key, value in options.items() if value is not None)
    return Filter(name, tuple(args))


@dataclass(frozen=True)
class GraphNode:
    """Nó do filtergraph: pads consumidos, cadeia de filtros e pads produzidos"""

    inputs: Tuple[str, ...]
    filters: Tuple[Filter, ...]
    outputs: Tuple[str, ...]

    def render(self) -> str:
        ins = "".join(f"[{pad}]" for pad in self.inputs)
        outs = "".join(f"[{pad}]" for pad in self.outputs)
        return ins + ",".join(f.render() for f in self.filters) + outs


@dataclass(frozen=True)
class InputSpec:
    """Uma entrada externa (-i) com suas diretivas de trim/loop"""

    path: str
    options: Tuple[str, ...] = ()
    kind: str = "video"  # video | audio | image


def input_directives(
    trim_start: Optional[float] = None,
    trim_end: Optional[float] = None,
    duration: Any = None,
    loop: bool = False,
    loop_length: Optional[float] = None,
) -> Tuple[str, ...]:
    """Diretivas -stream_loop/-ss/-t que precedem o -i de uma entrada"""
    options: List[str] = []
    if loop:
        options += ["-stream_loop", "-1"]
    if trim_start:
        options += ["-ss", format_number(trim_start)]
    length = None
    if trim_end is not None:
        length = trim_end - (trim_start or 0)
    if isinstance(duration, (int, float)):
        length = duration if length is None or loop else min(length, duration)
    if loop and length is None:
        length = loop_length
    if length:
        options += ["-t", format_number(length)]
    return tuple(options)


def is_stream_ref(pad: str) -> bool:
    """'0:v', '2:a' referenciam streams de entrada; demais pads são labels"""
    return ":" in pad


class FilterGraph:
    """Representa um filtergraph FFmpeg e sua tabela de entradas"""

    def __init__(self):
        self.inputs: List[InputSpec] = []
        self.nodes: List[GraphNode] = []
        self.video_out: Optional[str] = None
        self.audio_out: Optional[str] = None
        self._counters: Dict[str, int] = {}
        self._produced: Set[str] = set()
        self._consumed: Set[str] = set()

    def add_input(self, spec: InputSpec) -> int:
        """Adiciona um input ao comando e retorna seu índice"""
        self.inputs.append(spec)
        return len(self.inputs) - 1

    def new_label(self, prefix: str = "v") -> str:
        index = self._counters.get(prefix, 0)
        self._counters[prefix] = index + 1
        return f"{prefix}{index}"

    def add_node(
        self,
        inputs: Sequence[str],
        filters: Sequence[Filter],
        prefix: str = "v",
        outputs: int = 1,
    ):
        """Adiciona um nó; retorna o label produzido (ou tupla, se mais de um)"""
        for pad in inputs:
            if is_stream_ref(pad):
                continue
            if pad not in self._produced:
                raise MediaSdkError(f"Pad [{pad}] consumido antes de ser produzido")
            if pad in self._consumed:
                raise MediaSdkError(f"Pad [{pad}] consumido mais de uma vez")
            self._consumed.add(pad)

        labels = tuple(self.new_label(prefix) for _ in range(outputs))
        self._produced.update(labels)
        self.nodes.append(GraphNode(tuple(inputs), tuple(filters), labels))
        return labels[0] if outputs == 1 else labels

    def dangling_labels(self) -> List[str]:
        """Labels produzidos que não são consumidos nem mapeados na saída"""
        mapped = {self.video_out, self.audio_out}
        return sorted(p for p in self._produced if p not in self._consumed and p not in mapped)

    def to_string(self) -> str:
        """Converte o filtergraph para string FFmpeg"""
        return ";".join(node.render() for node in self.nodes)


class CompileState:
    """Acumuladores de uma compilação: pad de vídeo corrente e pads de áudio pendentes"""

    def __init__(
        self,
        graph: FilterGraph,
        settings: "SdkSettings",
        width: int,
        height: int,
        frame_rate: float,
        duration: float,
        normalize: bool = False,
        crop=None,
        scale=None,
    ):
        self.graph = graph
        self.settings = settings
        self.width = width
        self.height = height
        self.frame_rate = frame_rate
        self.duration = duration
        self.normalize = normalize
        self.crop = crop
        self.scale = scale
        self.video: Optional[str] = None
        self.audio: List[str] = []
        self.logger = get_logger("GraphBuilder")

    @property
    def size(self) -> str:
        return f"{self.width}x{self.height}"

    def cover_filters(self) -> List[Filter]:
        """scale cobrindo o canvas seguido de crop centralizado"""
        w, h = self.width, self.height
        return [
            make_filter("scale", w, h, force_original_aspect_ratio="increase"),
            make_filter("crop", w, h, f"(iw-{w})/2", f"(ih-{h})/2"),
        ]

    def set_base(self, pad: str, from_input: bool = True) -> str:
        """Define a base da composição aplicando preset e crop/scale globais"""
        filters: List[Filter] = []
        if from_input and self.normalize:
            filters.extend(self.cover_filters())
        if self.crop is not None:
            filters.append(make_filter("crop", self.crop.width, self.crop.height, self.crop.x, self.crop.y))
        if self.scale is not None:
            filters.append(make_filter("scale", self.scale[0], self.scale[1]))
        if filters:
            pad = self.graph.add_node([pad], filters)
        self.video = pad
        return pad

    def canvas_source(self, color: str = "black") -> Filter:
        duration = self.duration if self.duration > 0 else 1
        return make_filter("color", c=color, s=self.size, r=self.frame_rate, d=duration)

    def ensure_video(self) -> str:
        """Garante um pad de vídeo, sintetizando um canvas quando não há base"""
        if self.video is None:
            self.logger.debug("Sem vídeo base; sintetizando canvas %s", self.size)
            self.video = self.graph.add_node([], [self.canvas_source()])
        return self.video

    def apply_video(self, filters: Sequence[Filter]) -> str:
        """Encadeia filtros no pad de vídeo corrente"""
        self.video = self.graph.add_node([self.ensure_video()], filters)
        return self.video

    def add_audio(self, pad: str, filters: Sequence[Filter] = ()) -> str:
        if filters:
            pad = self.graph.add_node([pad], filters, prefix="a")
        self.audio.append(pad)
        return pad


def _flatten(layers: Sequence[Layer], offset: float = 0.0) -> List[Layer]:
    """Expande vídeos cuja fonte é uma timeline aninhada"""
    flat: List[Layer] = []
    for layer in layers:
        if isinstance(layer, VideoLayer) and layer.is_nested:
            flat.extend(_flatten(layer.source.layers, offset + layer.start_time))
        else:
            flat.append(shift_layer(layer, offset))
    return flat


def _is_base_candidate(layer: Layer) -> bool:
    if isinstance(layer, (VideoLayer, ImageLayer)):
        return True
    if isinstance(layer, PanZoomLayer):
        return layer.source is not None
    if isinstance(layer, ChromaKeyLayer):
        return layer.background is not None
    return False


class GraphBuilder:
    """Constrói filtergraph a partir de timeline"""

    def __init__(self, settings: "SdkSettings" = None):
        from ..infra.settings import settings as default_settings
        from ..plugins.builtin.effects.audio import AudioSynthesizer
        from ..plugins.builtin.effects.audio_ducking import AudioDuckingSynthesizer
        from ..plugins.builtin.effects.chroma_key import ChromaKeySynthesizer
        from ..plugins.builtin.effects.filters import FilterSynthesizer
        from ..plugins.builtin.effects.overlay import OverlaySynthesizer
        from ..plugins.builtin.effects.pan_zoom import PanZoomSynthesizer
        from ..plugins.builtin.effects.subtitle import CaptionSynthesizer
        from ..plugins.builtin.effects.text_overlay import TextSynthesizer
        from ..plugins.builtin.transitions.registry import TransitionSynthesizer
        from ..domain.models.layers import LAYER_TYPES

        self.logger = get_logger("GraphBuilder")
        self.settings = settings or default_settings
        overlay = OverlaySynthesizer()
        self._synthesizers = {
            "video": overlay,
            "image": overlay,
            "watermark": overlay,
            "audio": AudioSynthesizer(),
            "text": TextSynthesizer(),
            "caption": CaptionSynthesizer(),
            "filter": FilterSynthesizer(),
            "pan_zoom": PanZoomSynthesizer(),
            "chroma_key": ChromaKeySynthesizer(),
            "audio_ducking": AudioDuckingSynthesizer(),
            "transition": TransitionSynthesizer(),
        }
        missing = set(LAYER_TYPES) - set(self._synthesizers)
        if missing:
            raise MediaSdkError(f"Layers sem sintetizador: {sorted(missing)}")

    def resolve_canvas(self, timeline: "Timeline") -> Tuple[int, int, bool]:
        """Canvas alvo e se a base deve ser normalizada (scale+crop)"""
        options = timeline.options
        width, height = self.settings.canvas_width, self.settings.canvas_height
        normalize = False
        preset = get_platform_preset(options.platform)
        if options.platform and preset is None:
            self.logger.warning("Plataforma desconhecida '%s'; preset ignorado", options.platform)
        if preset is not None:
            width, height = preset.size
            normalize = True
        elif options.aspect_ratio:
            width, height = canvas_for_aspect_ratio(options.aspect_ratio)
            normalize = True
        if options.crop is not None:
            width, height = options.crop.width, options.crop.height
        if options.scale is not None:
            width, height = options.scale
        return width, height, normalize

    def build(self, timeline: "Timeline") -> FilterGraph:
        """Constrói o filtergraph para a timeline"""
        self.logger.info(
            "Construindo filtergraph para timeline com %d layers", len(timeline.layers)
        )

        graph = FilterGraph()
        width, height, normalize = self.resolve_canvas(timeline)
        options = timeline.options
        state = CompileState(
            graph,
            self.settings,
            width,
            height,
            options.frame_rate or self.settings.default_frame_rate,
            timeline.get_duration(self.settings),
            normalize=normalize,
            crop=options.crop,
            scale=options.scale,
        )

        layers = _flatten(timeline.layers)
        base_index = next((i for i, l in enumerate(layers) if _is_base_candidate(l)), None)
        order = list(range(len(layers)))
        if base_index is not None:
            order.remove(base_index)
            order.insert(0, base_index)

        audio_filters: List[FilterLayer] = []
        for index in order:
            layer = layers[index]
            if isinstance(layer, FilterLayer) and layer.target == "audio":
                audio_filters.append(layer)
                continue
            self._synthesizers[layer.kind].synthesize(layer, state)

        if state.video is None and not state.audio:
            state.ensure_video()

        self._mix_audio(state, audio_filters)

        graph.video_out = state.video
        dangling = graph.dangling_labels()
        if dangling:
            raise MediaSdkError(f"Labels sem consumidor no filtergraph: {dangling}")

        self.logger.debug("Filtergraph construído: %s", graph.to_string())
        return graph

    def _mix_audio(self, state: CompileState, audio_filters: List[FilterLayer]) -> None:
        """Combina os pads de áudio pendentes e aplica filtros de áudio globais"""
        graph = state.graph
        pads = state.audio
        if not pads:
            if audio_filters:
                self.logger.warning(
                    "%d filtro(s) de áudio ignorado(s): timeline sem áudio", len(audio_filters)
                )
            return

        if len(pads) == 1:
            out = pads[0]
        else:
            out = graph.add_node(
                pads, [make_filter("amix", inputs=len(pads), duration="longest")], prefix="a"
            )

        if audio_filters:
            synth = self._synthesizers["filter"]
            chain: List[Filter] = []
            for layer in audio_filters:
                chain.extend(synth.filters_for(layer, state))
            out = graph.add_node([out], chain, prefix="a")

        graph.audio_out = out
