# SPDX-License-Identifier: Apache-2.0
"""Translation backend modules.

This module provides translation backends for LibreTranslate, DeepL, and OpenAI.

LibreTranslate and DeepL use aiohttp and are always available.
OpenAI requires the optional ``openai`` dependency and an API key.

Usage:
    # LibreTranslate (self-hosted or public instance)
    from subtitle_translator.translators import LibreTranslateTranslator
    translator = LibreTranslateTranslator(api_url="http://127.0.0.1:5000")
    result = await translator.translate("Hello", "en", "de")

    # DeepL (free keys end with ":fx")
    from subtitle_translator.translators import DeepLTranslator
    translator = DeepLTranslator(api_key="your-api-key:fx")

    # OpenAI (requires openai package and API key)
    from subtitle_translator.translators import get_openai_translator
    OpenAITranslator = get_openai_translator()
    translator = OpenAITranslator(api_key="your-api-key")

    # Whole fallback chain from environment variables
    from subtitle_translator.translators import ServiceConfig, create_translators
    translators = create_translators(ServiceConfig.from_env())
"""

from subtitle_translator.translators.base import (
    ArrayLengthMismatchError,
    AuthenticationError,
    ConfigurationError,
    NetworkError,
    ParseError,
    QuotaExceededError,
    RateLimitError,
    ServerError,
    TranslationError,
    TranslatorBackend,
    TranslatorError,
    UnsupportedLanguageError,
)
from subtitle_translator.translators.deepl import DeepLTranslator
from subtitle_translator.translators.factory import (
    ServiceConfig,
    create_translator,
    create_translators,
)
from subtitle_translator.translators.libretranslate import LibreTranslateTranslator

__all__ = [
    # Protocol and exceptions
    "TranslatorBackend",
    "TranslatorError",
    "TranslationError",
    "ConfigurationError",
    "UnsupportedLanguageError",
    "AuthenticationError",
    "RateLimitError",
    "ServerError",
    "NetworkError",
    "QuotaExceededError",
    "ParseError",
    "ArrayLengthMismatchError",
    # Always available
    "LibreTranslateTranslator",
    "DeepLTranslator",
    # Configuration
    "ServiceConfig",
    "create_translator",
    "create_translators",
    # Lazy import functions
    "get_openai_translator",
]


def get_openai_translator() -> type:
    """Get OpenAITranslator class with lazy import.

    This function imports OpenAITranslator only when called,
    avoiding import errors when openai package is not installed.

    Returns:
        OpenAITranslator class.

    Raises:
        ImportError: If openai package is not installed.
    """
    from subtitle_translator.translators.openai import OpenAITranslator

    return OpenAITranslator
