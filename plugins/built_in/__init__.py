"""Built-in translation providers."""

from i18nmark_enums import ServiceName


def register_built_in_providers(registry):
    from plugins.built_in.baidu import BaiduTranslator
    from plugins.built_in.tencent import TencentTranslator
    from plugins.built_in.google_translator import GoogleTranslatePlugin
    from plugins.built_in.gemini import GeminiTranslator
    from plugins.built_in.dummy_engine import DummyEngine

    registry.register(ServiceName.BAIDU.value, BaiduTranslator)
    registry.register(ServiceName.TENCENT.value, TencentTranslator)
    registry.register(ServiceName.GOOGLE.value, GoogleTranslatePlugin)
    registry.register(ServiceName.GEMINI.value, GeminiTranslator)
    registry.register(ServiceName.MOCK.value, DummyEngine)
