# -*- coding: utf-8 -*-
"""
Pan/zoom e Ken Burns com o filtro zoompan

O zoom é função do progresso normalizado p (0 a 1) passado pela curva de
easing; o pan interpola o ponto focal entre (start_x, start_y) e
(end_x, end_y). Com fonte própria, o progresso é ``on/(d-1)`` com
``d = round(duração * fps)``, chegando a 1 no último frame; sem fonte, o zoompan roda sobre o vídeo
corrente com ``d=1`` e o progresso é contado a partir do start_time.
"""

import dataclasses
import hashlib
import random
from dataclasses import dataclass
from typing import Optional, Tuple

from ....domain.errors import TimelineValidationError
from ....domain.models.layers import PanZoomLayer
from ....infra.logging import get_logger
from ....rendering.expressions import enable_gate, format_number
from ....rendering.graph_builder import CompileState, Expr, InputSpec, make_filter

EASING_CURVES = {
    "linear": "{p}",
    "ease-in": "pow({p},2)",
    "ease-out": "1-pow(1-{p},2)",
    "ease-in-out": "if(lt({p},0.5),2*pow({p},2),1-2*pow(1-{p},2))",
}

# ponto focal inicial e final (frações de pan) por direção
DIRECTION_VECTORS = {
    "center-out": ((0.5, 0.5), (0.5, 0.5)),
    "top-bottom": ((0.5, 0.0), (0.5, 1.0)),
    "left-right": ((0.0, 0.5), (1.0, 0.5)),
    "diagonal": ((0.0, 0.0), (1.0, 1.0)),
}

PAN_VECTORS = {
    "left": ((1.0, 0.5), (0.0, 0.5)),
    "right": ((0.0, 0.5), (1.0, 0.5)),
    "up": ((0.5, 1.0), (0.5, 0.0)),
    "down": ((0.5, 0.0), (0.5, 1.0)),
}


def frame_count(duration: float, frame_rate: float) -> int:
    """Número de frames do movimento (round, 0.5s a 25fps -> 12)"""
    return int(round(duration * frame_rate))


def resolve_direction(layer: PanZoomLayer) -> str:
    """Resolve 'random' de forma determinística a partir do próprio layer"""
    if layer.direction != "random":
        return layer.direction
    seed = layer.seed
    if seed is None:
        digest = hashlib.sha256(repr(dataclasses.replace(layer, seed=None)).encode("utf-8"))
        seed = int(digest.hexdigest()[:16], 16)
    return random.Random(seed).choice(sorted(DIRECTION_VECTORS))


def focal_points(layer: PanZoomLayer) -> Tuple[Tuple[float, float], Tuple[float, float]]:
    if layer.direction is None:
        return (layer.start_x, layer.start_y), (layer.end_x, layer.end_y)
    return DIRECTION_VECTORS[resolve_direction(layer)]


def _lerp(start: float, end: float, curve: str) -> str:
    """start + (end-start)*curve, simplificado quando constante"""
    if start == end:
        return format_number(start)
    delta = end - start
    sign = "+" if delta > 0 else "-"
    return f"{format_number(start)}{sign}{format_number(abs(delta))}*({curve})"


def zoompan_expressions(layer: PanZoomLayer, progress: str) -> Tuple[str, str, str]:
    """Expressões z, x e y do zoompan"""
    curve = EASING_CURVES[layer.easing].format(p=progress)
    (sx, sy), (ex, ey) = focal_points(layer)
    z = _lerp(layer.start_zoom, layer.end_zoom, curve)
    x = f"(iw-iw/zoom)*{_wrap(_lerp(sx, ex, curve))}"
    y = f"(ih-ih/zoom)*{_wrap(_lerp(sy, ey, curve))}"
    return z, x, y


def _wrap(expr: str) -> str:
    return expr if _is_plain_number(expr) else f"({expr})"


def _is_plain_number(expr: str) -> bool:
    try:
        float(expr)
    except ValueError:
        return False
    return True


class PanZoomSynthesizer:
    """Gera o nó zoompan e o compõe sobre a base"""

    def __init__(self):
        self.logger = get_logger("PanZoomSynthesizer")

    def synthesize(self, layer: PanZoomLayer, state: CompileState) -> None:
        fps = state.frame_rate
        frames = max(frame_count(layer.duration, fps), 1)
        span = max(frames - 1, 1)
        self.logger.debug("zoompan com %d frames (%s)", frames, layer.direction or layer.easing)
        end = layer.start_time + layer.duration

        if layer.source is None:
            start_frame = frame_count(layer.start_time, fps)
            progress = f"clip((on-{start_frame})/{span},0,1)"
            z, x, y = zoompan_expressions(layer, progress)
            state.apply_video(
                [make_filter("zoompan", z=Expr(z), x=Expr(x), y=Expr(y), d=1, s=state.size, fps=fps)]
            )
            return

        z, x, y = zoompan_expressions(layer, f"on/{span}")
        index = state.graph.add_input(InputSpec(layer.source, kind="image"))
        filters = state.cover_filters()
        filters.append(
            make_filter("zoompan", z=Expr(z), x=Expr(x), y=Expr(y), d=frames, s=state.size, fps=fps)
        )

        if state.video is None:
            pad = state.graph.add_node([f"{index}:v"], filters)
            state.set_base(pad, from_input=False)
            return

        if layer.start_time:
            filters.append(make_filter("setpts", f"PTS+{format_number(layer.start_time)}/TB"))
        pad = state.graph.add_node([f"{index}:v"], filters)
        gate = enable_gate(layer.start_time, end)
        state.video = state.graph.add_node(
            [state.video, pad],
            [make_filter("overlay", x=0, y=0, eof_action="pass", enable=Expr(gate) if gate else None)],
        )


@dataclass(frozen=True)
class PanZoom:
    """Movimento de câmera explícito (pontos focais e zoom)"""

    source: Optional[str] = None
    duration: float = 5.0
    start_time: float = 0.0
    start_zoom: float = 1.0
    end_zoom: float = 1.3
    start_x: float = 0.5
    start_y: float = 0.5
    end_x: float = 0.5
    end_y: float = 0.5
    easing: str = "linear"

    def to_layer(self) -> PanZoomLayer:
        return PanZoomLayer(**dataclasses.asdict(self))

    def apply_to(self, timeline):
        return timeline.add_layer(self.to_layer())


@dataclass(frozen=True)
class KenBurns:
    """Ken Burns: zoom lento com direção de pan nomeada"""

    source: Optional[str] = None
    duration: float = 5.0
    start_time: float = 0.0
    start_zoom: float = 1.0
    end_zoom: float = 1.3
    direction: str = "random"
    easing: str = "linear"
    seed: Optional[int] = None

    def to_layer(self) -> PanZoomLayer:
        return PanZoomLayer(**dataclasses.asdict(self))

    def apply_to(self, timeline):
        return timeline.add_layer(self.to_layer())


def zoom_in(source: Optional[str] = None, duration: float = 5.0, zoom: float = 1.5, **kwargs) -> PanZoom:
    kwargs.setdefault("easing", "ease-in-out")
    return PanZoom(source=source, duration=duration, start_zoom=1.0, end_zoom=zoom, **kwargs)


def zoom_out(source: Optional[str] = None, duration: float = 5.0, zoom: float = 1.5, **kwargs) -> PanZoom:
    kwargs.setdefault("easing", "ease-in-out")
    return PanZoom(source=source, duration=duration, start_zoom=zoom, end_zoom=1.0, **kwargs)


def pan(source: Optional[str] = None, direction: str = "right", duration: float = 5.0, zoom: float = 1.2, **kwargs) -> PanZoom:
    """Pan lateral/vertical com zoom fixo; com zoom 1 não há margem para mover"""
    if direction not in PAN_VECTORS:
        raise TimelineValidationError(
            f"direção de pan inválida: {direction!r} (opções: {', '.join(PAN_VECTORS)})"
        )
    (sx, sy), (ex, ey) = PAN_VECTORS[direction]
    return PanZoom(
        source=source,
        duration=duration,
        start_zoom=zoom,
        end_zoom=zoom,
        start_x=sx,
        start_y=sy,
        end_x=ex,
        end_y=ey,
        **kwargs,
    )
