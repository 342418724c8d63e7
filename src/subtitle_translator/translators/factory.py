# SPDX-License-Identifier: Apache-2.0
"""Backend configuration and construction.

Credentials may be partially populated: a service without its URL or API key
is simply left out of the fallback chain.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import ClassVar, Mapping, Optional

from subtitle_translator.core.models import TranslationService
from subtitle_translator.translators.base import ConfigurationError, TranslatorBackend

logger = logging.getLogger(__name__)


@dataclass
class ServiceConfig:
    """Per-backend credentials and the user's preferred backend.

    Attributes:
        default_service: Backend tried first.
        libretranslate_url: LibreTranslate instance URL.
        libretranslate_api_key: Optional LibreTranslate API key.
        deepl_api_key: DeepL API key.
        deepl_api_url: Override for the DeepL endpoint.
        openai_api_key: OpenAI API key.
        openai_model: OpenAI model name (None = backend default).
    """

    default_service: TranslationService = TranslationService.LIBRETRANSLATE
    libretranslate_url: Optional[str] = None
    libretranslate_api_key: Optional[str] = None
    deepl_api_key: Optional[str] = None
    deepl_api_url: Optional[str] = None
    openai_api_key: Optional[str] = None
    openai_model: Optional[str] = None

    # Environment variable names read by from_env()
    ENV_VARS: ClassVar[dict[str, str]] = {
        "default_service": "TRANSLATION_SERVICE",
        "libretranslate_url": "LIBRETRANSLATE_URL",
        "libretranslate_api_key": "LIBRETRANSLATE_API_KEY",
        "deepl_api_key": "DEEPL_API_KEY",
        "deepl_api_url": "DEEPL_API_URL",
        "openai_api_key": "OPENAI_API_KEY",
        "openai_model": "OPENAI_MODEL",
    }

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> ServiceConfig:
        """Build a configuration from environment variables.

        Args:
            environ: Mapping to read instead of os.environ.

        Returns:
            ServiceConfig with blank values treated as unset.

        Raises:
            ConfigurationError: If TRANSLATION_SERVICE names an unknown backend.
        """
        env: Mapping[str, str] = os.environ if environ is None else environ
        values = {
            field_name: (env.get(var) or "").strip() or None
            for field_name, var in cls.ENV_VARS.items()
        }

        service_name = values.pop("default_service")
        default_service = TranslationService.LIBRETRANSLATE
        if service_name is not None:
            service = TranslationService.from_string(service_name)
            if service is None:
                raise ConfigurationError(f"Unknown translation service: {service_name}")
            default_service = service

        return cls(default_service=default_service, **values)

    def is_configured(self, service: TranslationService) -> bool:
        """Check whether a backend has the credentials it needs."""
        if service is TranslationService.LIBRETRANSLATE:
            return bool(self.libretranslate_url)
        if service is TranslationService.DEEPL:
            return bool(self.deepl_api_key)
        if service is TranslationService.OPENAI:
            return bool(self.openai_api_key)
        return False

    def fallback_order(self) -> list[TranslationService]:
        """Configured backends, default first, then the rest in declaration order."""
        ordered = [self.default_service]
        ordered.extend(s for s in TranslationService if s is not self.default_service)

        if not self.is_configured(self.default_service):
            logger.warning(
                "Default translation service %s is not configured; skipping it",
                self.default_service.display_name,
            )
        return [s for s in ordered if self.is_configured(s)]


def create_translator(service: TranslationService, config: ServiceConfig) -> TranslatorBackend:
    """Create the backend for a service.

    Args:
        service: Backend to create.
        config: Credentials.

    Returns:
        Translator instance.

    Raises:
        ConfigurationError: If the service lacks credentials.
        ImportError: If the OpenAI backend's dependencies are missing.
    """
    if service is TranslationService.DEEPL and config.deepl_api_key:
        from subtitle_translator.translators.deepl import DeepLTranslator

        return DeepLTranslator(api_key=config.deepl_api_key, api_url=config.deepl_api_url)

    if service is TranslationService.OPENAI and config.openai_api_key:
        from subtitle_translator.translators import get_openai_translator

        OpenAITranslator = get_openai_translator()
        translator: TranslatorBackend = OpenAITranslator(
            api_key=config.openai_api_key, model=config.openai_model
        )
        return translator

    if service is TranslationService.LIBRETRANSLATE and config.libretranslate_url:
        from subtitle_translator.translators.libretranslate import LibreTranslateTranslator

        return LibreTranslateTranslator(
            api_url=config.libretranslate_url, api_key=config.libretranslate_api_key
        )

    raise ConfigurationError(f"{service.display_name} is not configured")


def create_translators(config: ServiceConfig) -> list[TranslatorBackend]:
    """Create the fallback chain for a configuration.

    Returns:
        Translators in fallback order; empty if nothing is configured.
    """
    return [create_translator(service, config) for service in config.fallback_order()]
