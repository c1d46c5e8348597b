# -*- coding: utf-8 -*-
"""
i18nmark Provider System

Translation providers and the registry that builds them from config.
"""

from plugins.base import TranslationProvider, TranslationResult, UsageLimit
from plugins.registry import ProviderRegistry, get_registry

__all__ = [
    'TranslationProvider',
    'TranslationResult',
    'UsageLimit',
    'ProviderRegistry',
    'get_registry',
]
