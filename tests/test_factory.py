# SPDX-License-Identifier: Apache-2.0
"""Tests for backend configuration and construction."""

from __future__ import annotations

import logging

import pytest

from subtitle_translator.core.models import TranslationService
from subtitle_translator.translators import (
    ConfigurationError,
    DeepLTranslator,
    LibreTranslateTranslator,
    ServiceConfig,
    create_translator,
    create_translators,
)

FULL_ENV = {
    "TRANSLATION_SERVICE": "deepl",
    "LIBRETRANSLATE_URL": "http://libre.test",
    "DEEPL_API_KEY": "key:fx",
    "OPENAI_API_KEY": "sk-test",
    "OPENAI_MODEL": "gpt-4o",
}


class TestServiceConfigFromEnv:
    """Tests for ServiceConfig.from_env."""

    def test_reads_all_variables(self) -> None:
        config = ServiceConfig.from_env(FULL_ENV)
        assert config.default_service is TranslationService.DEEPL
        assert config.libretranslate_url == "http://libre.test"
        assert config.deepl_api_key == "key:fx"
        assert config.openai_model == "gpt-4o"
        assert config.libretranslate_api_key is None

    def test_defaults_to_libretranslate(self) -> None:
        assert ServiceConfig.from_env({}).default_service is TranslationService.LIBRETRANSLATE

    def test_blank_values_are_unset(self) -> None:
        config = ServiceConfig.from_env({"DEEPL_API_KEY": "   ", "TRANSLATION_SERVICE": ""})
        assert config.deepl_api_key is None
        assert config.default_service is TranslationService.LIBRETRANSLATE

    def test_service_name_is_case_insensitive(self) -> None:
        config = ServiceConfig.from_env({"TRANSLATION_SERVICE": "OpenAI"})
        assert config.default_service is TranslationService.OPENAI

    def test_unknown_service(self) -> None:
        with pytest.raises(ConfigurationError) as exc_info:
            ServiceConfig.from_env({"TRANSLATION_SERVICE": "babelfish"})
        assert "babelfish" in str(exc_info.value)

    def test_reads_process_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DEEPL_API_KEY", "from-env")
        assert ServiceConfig.from_env().deepl_api_key == "from-env"


class TestFallbackOrder:
    """Tests for ServiceConfig.fallback_order."""

    def test_default_first_then_declaration_order(self) -> None:
        config = ServiceConfig.from_env(FULL_ENV)
        assert config.fallback_order() == [
            TranslationService.DEEPL,
            TranslationService.LIBRETRANSLATE,
            TranslationService.OPENAI,
        ]

    def test_skips_unconfigured_services(self) -> None:
        config = ServiceConfig(
            default_service=TranslationService.LIBRETRANSLATE,
            libretranslate_url="http://libre.test",
            openai_api_key="sk-test",
        )
        assert config.fallback_order() == [
            TranslationService.LIBRETRANSLATE,
            TranslationService.OPENAI,
        ]

    def test_unconfigured_default_is_skipped_with_warning(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        config = ServiceConfig(default_service=TranslationService.OPENAI, deepl_api_key="key")
        with caplog.at_level(logging.WARNING):
            order = config.fallback_order()
        assert order == [TranslationService.DEEPL]
        assert "not configured" in caplog.text

    def test_nothing_configured(self) -> None:
        assert ServiceConfig().fallback_order() == []


class TestCreateTranslators:
    """Tests for backend construction."""

    def test_create_libretranslate(self) -> None:
        config = ServiceConfig(libretranslate_url="http://libre.test", libretranslate_api_key="k")
        translator = create_translator(TranslationService.LIBRETRANSLATE, config)
        assert isinstance(translator, LibreTranslateTranslator)

    def test_create_deepl_with_url_override(self) -> None:
        config = ServiceConfig(deepl_api_key="key", deepl_api_url="https://proxy.test/v2")
        translator = create_translator(TranslationService.DEEPL, config)
        assert isinstance(translator, DeepLTranslator)
        assert translator._api_url == "https://proxy.test/v2"

    def test_create_openai_passes_model(self) -> None:
        config = ServiceConfig(openai_api_key="sk-test", openai_model="gpt-4o")
        translator = create_translator(TranslationService.OPENAI, config)
        assert translator.name == "openai"
        assert translator._model == "gpt-4o"

    def test_unconfigured_service_raises(self) -> None:
        with pytest.raises(ConfigurationError):
            create_translator(TranslationService.DEEPL, ServiceConfig())

    def test_chain_follows_fallback_order(self) -> None:
        translators = create_translators(ServiceConfig.from_env(FULL_ENV))
        assert [t.name for t in translators] == ["deepl", "libretranslate", "openai"]

    def test_empty_chain(self) -> None:
        assert create_translators(ServiceConfig()) == []
