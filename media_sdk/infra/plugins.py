# -*- coding: utf-8 -*-
"""
Plugin system for named effects and validation strategies
"""

from typing import Callable, Dict, List, Type

from ..domain.errors import UnknownStrategyError
from ..domain.models.effects import Effect, EffectDescriptor


class PluginRegistry:
    """Registry para plugins de efeitos e estratégias de validação"""

    def __init__(self):
        self._effects: Dict[str, Type[Effect]] = {}
        self._descriptors: Dict[str, EffectDescriptor] = {}
        self._strategies: Dict[str, Callable] = {}
        self._strategy_descriptions: Dict[str, str] = {}

    def register_effect(self, descriptor: EffectDescriptor, effect_class: Type[Effect]):
        """Registra um novo efeito"""
        self._effects[descriptor.name] = effect_class
        self._descriptors[descriptor.name] = descriptor

    def get_effect(self, name: str) -> Type[Effect] | None:
        """Obtém uma classe de efeito pelo nome"""
        return self._effects.get(name)

    def get_descriptor(self, name: str) -> EffectDescriptor | None:
        """Obtém o descritor de um efeito"""
        return self._descriptors.get(name)

    def supports_timeline(self, name: str) -> bool:
        """Filtros crus (sem descritor) são emitidos como recebidos"""
        descriptor = self._descriptors.get(name)
        return descriptor is None or descriptor.timeline_support

    def list_effects(self) -> List[EffectDescriptor]:
        """Lista todos os efeitos registrados"""
        return list(self._descriptors.values())

    def register_strategy(self, name: str, func: Callable, description: str = ""):
        """Registra uma estratégia de validação"""
        self._strategies[name] = func
        self._strategy_descriptions[name] = description

    def get_strategy(self, name: str) -> Callable:
        try:
            return self._strategies[name]
        except KeyError:
            raise UnknownStrategyError(name)

    def list_strategies(self) -> Dict[str, str]:
        return dict(self._strategy_descriptions)


# Instância global do registry
plugin_registry = PluginRegistry()


def effect(
    name: str,
    params: Dict[str, str],
    target: str,
    description: str = "",
    timeline_support: bool = True,
):
    """Decorator para registrar efeitos"""

    def decorator(effect_class: Type[Effect]):
        descriptor = EffectDescriptor(
            name=name,
            params=params,
            target=target,
            description=description,
            timeline_support=timeline_support,
        )
        plugin_registry.register_effect(descriptor, effect_class)
        return effect_class

    return decorator


def validation_strategy(name: str, description: str = ""):
    """Decorator para registrar estratégias de validação (func(timeline, **params))"""

    def decorator(func: Callable):
        plugin_registry.register_strategy(name, func, description)
        return func

    return decorator
