# -*- coding: utf-8 -*-
"""
Hierarquia de erros do SDK
"""


class MediaSdkError(Exception):
    """Erro base do SDK"""


class TimelineValidationError(MediaSdkError, ValueError):
    """Argumento estruturalmente inválido passado a um builder ou layer"""


class SerializationError(MediaSdkError, ValueError):
    """Documento JSON de timeline malformado"""


class UnknownStrategyError(MediaSdkError, KeyError):
    """Estratégia de validação não registrada"""
