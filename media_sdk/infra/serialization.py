# -*- coding: utf-8 -*-
"""
Serialização da timeline para dados simples (dict/list/str/número)

Cada layer vira ``{"kind": <tipo>, ...campos}``; timelines aninhadas em
``VideoLayer.source`` são serializadas recursivamente como ``{"timeline": ...}``.
"""

import dataclasses
from typing import Any, Callable, Dict, Mapping

from ..domain.errors import SerializationError, TimelineValidationError
from ..domain.models.layers import (
    LAYER_TYPES,
    CaptionUnit,
    DuckingRegion,
    Echo,
    Layer,
    Position,
    TextStyle,
)
from ..domain.models.timeline import CropOptions, Timeline, TimelineOptions

FORMAT_VERSION = 1


def _encode(value: Any) -> Any:
    if isinstance(value, Timeline):
        return {"timeline": timeline_to_dict(value)}
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {f.name: _encode(getattr(value, f.name)) for f in dataclasses.fields(value)}
    if isinstance(value, (tuple, list)):
        return [_encode(v) for v in value]
    if isinstance(value, Mapping):
        return {str(k): _encode(v) for k, v in value.items()}
    return value


def layer_to_dict(layer: Layer) -> Dict[str, Any]:
    data = {"kind": layer.kind}
    data.update(_encode(layer))
    return data


def timeline_to_dict(timeline: Timeline) -> Dict[str, Any]:
    return {
        "version": FORMAT_VERSION,
        "layers": [layer_to_dict(layer) for layer in timeline.layers],
        "options": _encode(timeline.options),
    }


def _position(value: Any) -> Any:
    if isinstance(value, Mapping):
        return Position(**value)
    return value


def _style(value: Any) -> Any:
    if isinstance(value, Mapping):
        return TextStyle(**value)
    return value


def _unit(value: Mapping[str, Any]) -> CaptionUnit:
    data = dict(value)
    data["position"] = _position(data.get("position"))
    if "style" in data:
        data["style"] = _style(data["style"])
    return CaptionUnit(**data)


def _source(value: Any) -> Any:
    if isinstance(value, Mapping) and "timeline" in value:
        return timeline_from_dict(value["timeline"])
    return value


# campo -> decodificador de valores aninhados
_FIELD_DECODERS: Dict[str, Callable[[Any], Any]] = {
    "position": _position,
    "style": _style,
    "units": lambda items: tuple(_unit(u) for u in items),
    "regions": lambda items: tuple(DuckingRegion(**r) for r in items),
    "echo": lambda value: Echo(**value) if isinstance(value, Mapping) else value,
    "frequency_range": lambda value: tuple(value) if value is not None else None,
    "source": _source,
    "params": lambda value: dict(value or {}),
}


def layer_from_dict(data: Mapping[str, Any]) -> Layer:
    if not isinstance(data, Mapping):
        raise SerializationError(f"layer deve ser um objeto, recebido {type(data).__name__}")
    kind = data.get("kind")
    layer_class = LAYER_TYPES.get(kind)
    if layer_class is None:
        raise SerializationError(f"tipo de layer desconhecido: {kind!r}")

    known = {f.name for f in dataclasses.fields(layer_class)}
    fields = {}
    for key, value in data.items():
        if key == "kind":
            continue
        if key not in known:
            raise SerializationError(f"campo desconhecido em layer {kind}: {key!r}")
        decoder = _FIELD_DECODERS.get(key)
        fields[key] = decoder(value) if decoder is not None else value
    try:
        return layer_class(**fields)
    except TypeError as e:
        raise SerializationError(f"layer {kind} malformado: {e}") from e
    except TimelineValidationError as e:
        raise SerializationError(f"layer {kind} inválido: {e}") from e


def options_from_dict(data: Mapping[str, Any]) -> TimelineOptions:
    values = dict(data or {})
    if values.get("crop") is not None:
        values["crop"] = CropOptions(**values["crop"])
    if values.get("scale") is not None:
        values["scale"] = tuple(values["scale"])
    try:
        return TimelineOptions(**values)
    except TypeError as e:
        raise SerializationError(f"opções malformadas: {e}") from e


def timeline_from_dict(data: Mapping[str, Any]) -> Timeline:
    if not isinstance(data, Mapping) or "layers" not in data:
        raise SerializationError("documento de timeline deve conter 'layers'")
    version = data.get("version", FORMAT_VERSION)
    if version != FORMAT_VERSION:
        raise SerializationError(f"versão de formato não suportada: {version!r}")
    layers = tuple(layer_from_dict(item) for item in data["layers"])
    return Timeline(layers=layers, options=options_from_dict(data.get("options")))
