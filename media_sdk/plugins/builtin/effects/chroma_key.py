# -*- coding: utf-8 -*-
"""
Composição chroma key (green screen)

O foreground recebe ``chromakey`` e é sobreposto a um fundo que pode ser
imagem, vídeo (opcionalmente em loop) ou cor sólida. Sem fundo, o
foreground recortado vai direto sobre o pad de vídeo corrente.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

from ....domain.errors import TimelineValidationError
from ....domain.models.layers import ChromaKeyLayer, FULL, coerce_position
from ....infra.logging import get_logger
from ....rendering.expressions import (
    OVERLAY,
    enable_gate,
    format_number,
    normalize_color,
    resolve_end,
    resolve_position,
)
from ....rendering.graph_builder import (
    CompileState,
    Expr,
    Filter,
    InputSpec,
    input_directives,
    make_filter,
)
from .audio import adelay_filter
from .overlay import scale_filter

IMAGE_EXTENSIONS = {".png", ".jpg", ".jpeg", ".bmp", ".tiff", ".webp"}

KEY_COLORS = {"green": "#00FF00", "blue": "#0000FF"}

# template -> parâmetros padrão do green screen
MEME_TEMPLATES: Dict[str, Dict[str, Any]] = {
    "reaction": {"similarity": 0.4, "blend": 0.1, "background_scale": "fill", "position": "bottom-right", "scale": 0.5},
    "weather": {"similarity": 0.4, "blend": 0.1, "background_scale": "fit", "position": "bottom-left"},
    "gaming": {"similarity": 0.45, "blend": 0.1, "background_scale": "fill", "position": "bottom-right", "scale": 0.35},
    "educational": {"similarity": 0.35, "blend": 0.1, "background_scale": "fit", "position": "bottom-right"},
    "news": {"similarity": 0.3, "blend": 0.05, "background_scale": "fit", "position": "bottom-left"},
    "comedy": {"similarity": 0.5, "blend": 0.1, "background_scale": "fill", "position": "center"},
}


def detect_background_type(background: str) -> str:
    """Imagem por extensão, cor por '#'/'0x'/nome sem extensão, senão vídeo"""
    suffix = Path(background).suffix.lower()
    if suffix in IMAGE_EXTENSIONS:
        return "image"
    if background.startswith(("#", "0x", "rgb")) or not suffix:
        return "color"
    return "video"


def background_scale_filters(mode: str, width: int, height: int) -> List[Filter]:
    """Ajuste do fundo ao canvas: fit (pad), fill/crop (corta) ou stretch"""
    if mode == "fit":
        return [
            make_filter("scale", width, height, force_original_aspect_ratio="decrease"),
            make_filter("pad", width, height, "(ow-iw)/2", "(oh-ih)/2"),
        ]
    if mode == "stretch":
        return [make_filter("scale", width, height)]
    return [
        make_filter("scale", width, height, force_original_aspect_ratio="increase"),
        make_filter("crop", width, height),
    ]


def chromakey_filter(layer: ChromaKeyLayer) -> Filter:
    color = normalize_color(KEY_COLORS.get(layer.color.lower(), layer.color))
    return make_filter(
        "chromakey",
        color=color,
        similarity=layer.similarity,
        blend=layer.blend,
        yuv=1 if layer.yuv else None,
    )


class ChromaKeySynthesizer:
    """Gera os nós de chroma key, fundo e composição"""

    def __init__(self):
        self.logger = get_logger("ChromaKeySynthesizer")

    def synthesize(self, layer: ChromaKeyLayer, state: CompileState) -> None:
        graph = state.graph
        fg_index = graph.add_input(
            InputSpec(layer.source, input_directives(duration=layer.duration))
        )
        fg_filters = []
        if layer.scale:
            fg_filters.append(scale_filter(layer.scale))
        fg_filters.append(chromakey_filter(layer))
        end = resolve_end(layer.start_time, layer.duration)

        if layer.background is None:
            if layer.start_time:
                fg_filters.insert(0, make_filter("setpts", f"PTS+{format_number(layer.start_time)}/TB"))
            base = state.ensure_video()
            fg = graph.add_node([f"{fg_index}:v"], fg_filters, prefix="fg")
            x, y = resolve_position(layer.position or "center", OVERLAY, 0)
            gate = enable_gate(layer.start_time, end)
            state.video = graph.add_node(
                [base, fg],
                [make_filter("overlay", x=x, y=y, eof_action="pass", enable=Expr(gate) if gate else None)],
            )
            self._mix_audio(layer, state, fg_index, None, layer.start_time)
            return

        fg = graph.add_node([f"{fg_index}:v"], fg_filters, prefix="fg")
        bg, bg_index = self._background(layer, state)
        x, y = resolve_position(layer.position, OVERLAY, 20 if layer.position else 0)
        composite = graph.add_node([bg, fg], [make_filter("overlay", x=x, y=y, shortest=1)])

        delay = 0.0
        if state.video is None:
            state.set_base(composite, from_input=False)
        else:
            if layer.start_time:
                composite = graph.add_node(
                    [composite], [make_filter("setpts", f"PTS+{format_number(layer.start_time)}/TB")]
                )
            gate = enable_gate(layer.start_time, end)
            state.video = graph.add_node(
                [state.video, composite],
                [make_filter("overlay", x=0, y=0, eof_action="pass", enable=Expr(gate) if gate else None)],
            )
            delay = layer.start_time
        self._mix_audio(layer, state, fg_index, bg_index, delay)

    def _background(self, layer: ChromaKeyLayer, state: CompileState):
        graph = state.graph
        fit = background_scale_filters(layer.background_scale, state.width, state.height)

        if layer.background_type == "color":
            source = make_filter(
                "color", c=normalize_color(layer.background), s=state.size, r=state.frame_rate
            )
            frame = [make_filter("trim", end_frame=1), make_filter("loop", loop=-1, size=1)]
            return graph.add_node([], [source] + frame, prefix="bg"), None

        if layer.background_type == "image":
            index = graph.add_input(InputSpec(layer.background, ("-loop", "1"), kind="image"))
            return graph.add_node([f"{index}:v"], fit, prefix="bg"), None

        options = input_directives(duration=layer.duration, loop=layer.background_loop)
        index = graph.add_input(InputSpec(layer.background, options))
        return graph.add_node([f"{index}:v"], fit, prefix="bg"), index

    def _mix_audio(
        self, layer: ChromaKeyLayer, state: CompileState, fg_index: int, bg_index: Optional[int], delay: float
    ) -> None:
        filters = [adelay_filter(delay)] if delay else []
        use_fg = layer.audio_mix in ("greenscreen", "both")
        use_bg = layer.audio_mix in ("background", "both")
        if use_bg and bg_index is None:
            self.logger.warning(
                "audio_mix=%s sem fundo em vídeo; áudio do fundo ignorado", layer.audio_mix
            )
            use_bg = False

        if use_bg and layer.background_loop and layer.duration == FULL:
            # fundo em loop sem -t: o áudio termina junto com o foreground
            weights = None if use_fg else Expr("0 1")
            mixed = state.graph.add_node(
                [f"{fg_index}:a", f"{bg_index}:a"],
                [make_filter("amix", inputs=2, duration="first", weights=weights)],
                prefix="a",
            )
            state.add_audio(mixed, filters)
            return

        if use_fg:
            state.add_audio(f"{fg_index}:a", filters)
        if use_bg:
            state.add_audio(f"{bg_index}:a")


@dataclass(frozen=True)
class GreenScreen:
    """Capacidade de green screen aplicável via ``Timeline.apply``"""

    foreground: str
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
    duration: Any = FULL
    position: Any = None
    scale: Optional[float] = None

    def to_layer(self) -> ChromaKeyLayer:
        background_type = self.background_type
        if self.background is not None and background_type is None:
            background_type = detect_background_type(self.background)
        return ChromaKeyLayer(
            source=self.foreground,
            background=self.background,
            background_type=background_type,
            color=self.color,
            similarity=self.similarity,
            blend=self.blend,
            yuv=self.yuv,
            background_scale=self.background_scale,
            background_loop=self.background_loop,
            audio_mix=self.audio_mix,
            start_time=self.start_time,
            duration=self.duration,
            position=coerce_position(self.position),
            scale=self.scale,
        )

    def apply_to(self, timeline):
        return timeline.add_layer(self.to_layer())


def meme_green_screen(
    foreground: str,
    background: str,
    template: str,
    intensity: str = "medium",
    quality: str = "standard",
    **overrides: Any,
) -> GreenScreen:
    """Green screen com parâmetros de um template de meme"""
    if template not in MEME_TEMPLATES:
        raise TimelineValidationError(
            f"template inválido: {template!r} (opções: {', '.join(MEME_TEMPLATES)})"
        )
    if intensity not in ("low", "medium", "high"):
        raise TimelineValidationError(f"intensity inválida: {intensity!r}")
    if quality not in ("standard", "professional"):
        raise TimelineValidationError(f"quality inválida: {quality!r}")

    params = dict(MEME_TEMPLATES[template])
    if intensity == "high":
        params["similarity"] = round(min(params["similarity"] + 0.1, 1.0), 2)
    elif intensity == "low":
        params["similarity"] = round(max(params["similarity"] - 0.1, 0.05), 2)
    if quality == "professional":
        params["similarity"] = 0.3
        params["blend"] = 0.05
    params.update(overrides)
    return GreenScreen(foreground=foreground, background=background, **params)
