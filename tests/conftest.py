# -*- coding: utf-8 -*-
"""
i18nmark Test Fixtures

Shared fixtures for all tests.
"""

import pytest
import sys
from pathlib import Path

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))


# =============================================================================
# SOURCE FIXTURES
# =============================================================================

@pytest.fixture
def sample_js() -> str:
    """Script with one plain string and one interpolated template."""
    return (
        "const greeting = '你好世界';\n"
        "const welcome = `你好，${name}`;\n"
        "console.log('hello');\n"
    )


@pytest.fixture
def sample_vue() -> str:
    """Component with template text, a static attribute and a script region."""
    return (
        "<template>\n"
        "  <div title=\"标题\">\n"
        "    你好\n"
        "  </div>\n"
        "</template>\n"
        "<script>\n"
        "export default {\n"
        "  data() { return { msg: '消息' } }\n"
        "}\n"
        "</script>\n"
    )


# =============================================================================
# OPTION FIXTURES
# =============================================================================

@pytest.fixture
def mark_options():
    """Marking options without import injection."""
    from models.config_model import MarkOptions
    return MarkOptions(tag_name="i18n")


@pytest.fixture
def extract_options():
    from models.config_model import ExtractOptions
    return ExtractOptions(tag_name="i18n")


@pytest.fixture
def i18n_config(tmp_path):
    """Resolved config rooted at tmp_path with zh/en and the mock provider."""
    from models.config_model import resolve_config
    from i18nmark_enums import Command
    raw = {
        "i18n_tag": "i18n",
        "locale_dir": "locales",
        "langs": ["zh", "en"],
        "source_lang": "zh",
        "file_mapping": "fileMapping",
        "placeholder": ["{", "}"],
        "translation": {
            "services": [{"name": "mock"}],
            "default_service": "mock",
            "batch_size": 2,
            "retry_delay": 0,
            "batch_delay": 0,
        },
    }
    return resolve_config(raw, Command.ALL, root_dir=tmp_path)


# =============================================================================
# ASYNC HELPERS
# =============================================================================

async def no_sleep(_delay):
    """Drop-in for asyncio.sleep in orchestrator tests."""
    return None


@pytest.fixture
def fake_sleep():
    return no_sleep
