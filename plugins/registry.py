"""
Provider Registry

Maps service names to provider classes and builds provider instances from
their ServiceConfig.
"""

from typing import Callable, Dict, List, Optional

from i18nmark_exceptions import ProviderNotFoundError
from i18nmark_logger import get_logger
from models.config_model import ServiceConfig
from plugins.base import TranslationProvider

logger = get_logger("plugins.registry")

ProviderFactory = Callable[[ServiceConfig], TranslationProvider]


class ProviderRegistry:
    """Closed set of provider variants, open to registration by callers and tests."""

    def __init__(self):
        self._factories: Dict[str, ProviderFactory] = {}

    def register(self, name: str, factory: ProviderFactory, replace: bool = False):
        if name in self._factories and not replace:
            logger.warning(f"Provider name collision: {name}. Ignoring duplicate.")
            return
        logger.debug(f"Registering provider: {name}")
        self._factories[name] = factory

    def unregister(self, name: str):
        self._factories.pop(name, None)

    def is_supported(self, name: str) -> bool:
        return name in self._factories

    def names(self) -> List[str]:
        return sorted(self._factories)

    def create(self, service_config: ServiceConfig) -> TranslationProvider:
        """
        Build a provider.

        Raises:
            ProviderNotFoundError: If no provider is registered under the name
        """
        factory = self._factories.get(service_config.name)
        if factory is None:
            raise ProviderNotFoundError(service_config.name)
        provider = factory(service_config)
        if not provider.is_configured():
            logger.warning(f"Provider '{service_config.name}' is missing credentials")
        return provider


_default_registry: Optional[ProviderRegistry] = None


def get_registry() -> ProviderRegistry:
    """Registry pre-populated with the built-in providers."""
    global _default_registry
    if _default_registry is None:
        from plugins.built_in import register_built_in_providers
        _default_registry = ProviderRegistry()
        register_built_in_providers(_default_registry)
    return _default_registry
