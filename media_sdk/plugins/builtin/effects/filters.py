# -*- coding: utf-8 -*-
"""
Biblioteca de filtros nomeados usados por ``Timeline.add_filter``

Nomes não registrados são emitidos como filtro FFmpeg cru (nome=k=v:...).
"""

from typing import List

from ....domain.errors import TimelineValidationError
from ....domain.models.effects import Effect, FilterContext, FilterSnippet
from ....domain.models.layers import FilterLayer
from ....infra.plugins import effect, plugin_registry
from ....rendering.expressions import enable_gate, format_number, resolve_end
from ....rendering.graph_builder import CompileState, Expr, Filter, make_filter

GRAYSCALE_MATRIX = dict(rr=0.3, rg=0.4, rb=0.3, gr=0.3, gg=0.4, gb=0.3, br=0.3, bg=0.4, bb=0.3)
SEPIA_MATRIX = dict(
    rr=0.393, rg=0.769, rb=0.189, gr=0.349, gg=0.686, gb=0.168, br=0.272, bg=0.534, bb=0.131
)

# filtros FFmpeg sem suporte a enable=
_RAW_WITHOUT_TIMELINE = frozenset(
    ["setpts", "asetpts", "fade", "afade", "loudnorm", "atempo", "trim", "atrim", "fps", "scale"]
)


def _single(*filters: Filter) -> FilterSnippet:
    return FilterSnippet(tuple(filters))


@effect(name="blur", params={"radius": "float>0"}, target="video", description="Desfoque (boxblur)")
class BlurEffect(Effect):
    def build_filter(self, ctx: FilterContext) -> FilterSnippet:
        return _single(make_filter("boxblur", ctx.params.get("radius", 5)))


@effect(name="brightness", params={"value": "-1..1"}, target="video", description="Brilho (eq)")
class BrightnessEffect(Effect):
    def build_filter(self, ctx: FilterContext) -> FilterSnippet:
        return _single(make_filter("eq", brightness=ctx.params.get("value", 0.1)))


@effect(name="contrast", params={"value": "-1000..1000"}, target="video", description="Contraste (eq)")
class ContrastEffect(Effect):
    def build_filter(self, ctx: FilterContext) -> FilterSnippet:
        return _single(make_filter("eq", contrast=ctx.params.get("value", 1.2)))


@effect(name="saturation", params={"value": "0..3"}, target="video", description="Saturação (eq)")
class SaturationEffect(Effect):
    def build_filter(self, ctx: FilterContext) -> FilterSnippet:
        return _single(make_filter("eq", saturation=ctx.params.get("value", 1.5)))


@effect(name="gamma", params={"value": "0.1..10"}, target="video", description="Gamma (eq)")
class GammaEffect(Effect):
    def build_filter(self, ctx: FilterContext) -> FilterSnippet:
        return _single(make_filter("eq", gamma=ctx.params.get("value", 1.2)))


@effect(name="hue", params={"degrees": "float"}, target="video", description="Rotação de matiz")
class HueEffect(Effect):
    def build_filter(self, ctx: FilterContext) -> FilterSnippet:
        return _single(make_filter("hue", h=ctx.params.get("degrees", 0)))


@effect(name="grayscale", params={}, target="video", description="Preto e branco")
class GrayscaleEffect(Effect):
    def build_filter(self, ctx: FilterContext) -> FilterSnippet:
        return _single(make_filter("colorchannelmixer", **GRAYSCALE_MATRIX))


@effect(name="sepia", params={}, target="video", description="Tom sépia")
class SepiaEffect(Effect):
    def build_filter(self, ctx: FilterContext) -> FilterSnippet:
        return _single(make_filter("colorchannelmixer", **SEPIA_MATRIX))


@effect(name="invert", params={}, target="video", description="Inverte as cores")
class InvertEffect(Effect):
    def build_filter(self, ctx: FilterContext) -> FilterSnippet:
        return _single(make_filter("negate"))


@effect(name="vignette", params={"angle": "expr"}, target="video", description="Vinheta")
class VignetteEffect(Effect):
    def build_filter(self, ctx: FilterContext) -> FilterSnippet:
        return _single(make_filter("vignette", angle=ctx.params.get("angle")))


@effect(name="rotate", params={"degrees": "float"}, target="video", description="Rotação")
class RotateEffect(Effect):
    def build_filter(self, ctx: FilterContext) -> FilterSnippet:
        degrees = format_number(ctx.params.get("degrees", 90))
        return _single(make_filter("rotate", f"{degrees}*PI/180"))


@effect(name="hflip", params={}, target="video", description="Espelha na horizontal")
class HorizontalFlipEffect(Effect):
    def build_filter(self, ctx: FilterContext) -> FilterSnippet:
        return _single(make_filter("hflip"))


@effect(name="vflip", params={}, target="video", description="Espelha na vertical")
class VerticalFlipEffect(Effect):
    def build_filter(self, ctx: FilterContext) -> FilterSnippet:
        return _single(make_filter("vflip"))


@effect(
    name="speed",
    params={"factor": "float>0"},
    target="video",
    description="Acelera ou desacelera o vídeo",
    timeline_support=False,
)
class SpeedEffect(Effect):
    def build_filter(self, ctx: FilterContext) -> FilterSnippet:
        factor = ctx.params.get("factor", 2)
        return _single(make_filter("setpts", f"{format_number(1 / factor)}*PTS"))


@effect(
    name="fade_in",
    params={"duration": "float>0"},
    target="video",
    description="Fade in a partir do início",
    timeline_support=False,
)
class FadeInEffect(Effect):
    def build_filter(self, ctx: FilterContext) -> FilterSnippet:
        return _single(make_filter("fade", t="in", st=0, d=ctx.params.get("duration", 1)))


@effect(
    name="fade_out",
    params={"duration": "float>0", "start": "float>=0"},
    target="video",
    description="Fade out terminando no fim da timeline",
    timeline_support=False,
)
class FadeOutEffect(Effect):
    def build_filter(self, ctx: FilterContext) -> FilterSnippet:
        duration = ctx.params.get("duration", 1)
        start = ctx.params.get("start", max(ctx.timeline_duration - duration, 0))
        return _single(make_filter("fade", t="out", st=start, d=duration))


@effect(name="denoise", params={}, target="video", description="Redução de ruído (hqdn3d)")
class DenoiseEffect(Effect):
    def build_filter(self, ctx: FilterContext) -> FilterSnippet:
        return _single(make_filter("hqdn3d"))


@effect(name="sharpen", params={"amount": "float"}, target="video", description="Nitidez (unsharp)")
class SharpenEffect(Effect):
    def build_filter(self, ctx: FilterContext) -> FilterSnippet:
        return _single(make_filter("unsharp", 5, 5, ctx.params.get("amount", 1.0)))


@effect(name="vintage", params={}, target="video", description="Visual envelhecido")
class VintageEffect(Effect):
    def build_filter(self, ctx: FilterContext) -> FilterSnippet:
        return _single(
            make_filter("curves", preset="vintage"),
            make_filter("eq", saturation=0.8),
            make_filter("vignette"),
        )


@effect(name="cinematic", params={}, target="video", description="Contraste alto e cores frias")
class CinematicEffect(Effect):
    def build_filter(self, ctx: FilterContext) -> FilterSnippet:
        return _single(
            make_filter("eq", contrast=1.1, saturation=0.85),
            make_filter("colorbalance", bs=0.1, rs=-0.05),
            make_filter("vignette"),
        )


@effect(name="noir", params={}, target="video", description="Preto e branco contrastado")
class NoirEffect(Effect):
    def build_filter(self, ctx: FilterContext) -> FilterSnippet:
        return _single(
            make_filter("colorchannelmixer", **GRAYSCALE_MATRIX),
            make_filter("eq", contrast=1.3, brightness=-0.05),
        )


@effect(
    name="normalize",
    params={},
    target="audio",
    description="Normalização de loudness",
    timeline_support=False,
)
class LoudnessEffect(Effect):
    def build_filter(self, ctx: FilterContext) -> FilterSnippet:
        return _single(make_filter("loudnorm"))


def check_filter_window(layer: FilterLayer) -> None:
    """Recusa janela de tempo em filtros que o FFmpeg não permite ligar e desligar"""
    if resolve_end(layer.start_time, layer.duration) is None:
        return
    if layer.name in _RAW_WITHOUT_TIMELINE or not plugin_registry.supports_timeline(layer.name):
        raise TimelineValidationError(
            f"filtro {layer.name!r} não aceita start_time/duration; aplique-o à timeline inteira"
        )


class FilterSynthesizer:
    """Encadeia filtros nomeados ou crus no pad corrente, na ordem das chamadas"""

    def filters_for(self, layer: FilterLayer, state: CompileState) -> List[Filter]:
        effect_class = plugin_registry.get_effect(layer.name)
        if effect_class is not None:
            ctx = FilterContext(
                state.width,
                state.height,
                state.frame_rate,
                timeline_duration=state.duration,
                **layer.params,
            )
            filters = list(effect_class().build_filter(ctx).filters)
        else:
            filters = [make_filter(layer.name, **layer.params)]

        check_filter_window(layer)
        gate = enable_gate(layer.start_time, resolve_end(layer.start_time, layer.duration))
        if gate:
            filters = [Filter(f.name, f.args + (("enable", Expr(gate)),)) for f in filters]
        return filters

    def synthesize(self, layer: FilterLayer, state: CompileState) -> None:
        state.apply_video(self.filters_for(layer, state))
