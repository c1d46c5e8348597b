# -*- coding: utf-8 -*-
"""
i18nmark Models Package

Typed, validated run options.
"""

from models.config_model import (
    I18nConfig, ImportBinding, MarkOptions, ExtractOptions,
    ServiceConfig, TranslationOptions, resolve_config,
)

__all__ = [
    'I18nConfig', 'ImportBinding', 'MarkOptions', 'ExtractOptions',
    'ServiceConfig', 'TranslationOptions', 'resolve_config',
]
