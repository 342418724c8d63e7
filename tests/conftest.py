# SPDX-License-Identifier: Apache-2.0
"""Shared test doubles for backends and aiohttp sessions."""

from __future__ import annotations

import json
from typing import Any, Callable, Optional, Sequence, Union
from unittest.mock import AsyncMock, MagicMock

import pytest

Outcome = Union[str, Exception]

LANGUAGES = [
    {"code": "en", "name": "English"},
    {"code": "de", "name": "German"},
    {"code": "fr", "name": "French"},
]


class FakeTranslator:
    """Scripted backend.

    Each call consumes the next scripted outcome: strings are returned,
    exceptions are raised. Once the script is exhausted, ``responder`` is used.
    """

    def __init__(
        self,
        name: str,
        outcomes: Sequence[Outcome] = (),
        responder: Optional[Callable[[str], str]] = None,
    ) -> None:
        self._name = name
        self._outcomes = list(outcomes)
        self._responder = responder or (lambda text: f"<{name}>{text}")
        self.calls: list[tuple[str, Optional[str], str]] = []
        self.closed = False

    @property
    def name(self) -> str:
        return self._name

    async def translate(self, text: str, source_lang: Optional[str], target_lang: str) -> str:
        self.calls.append((text, source_lang, target_lang))
        if self._outcomes:
            outcome = self._outcomes.pop(0)
            if isinstance(outcome, Exception):
                raise outcome
            return outcome
        return self._responder(text)

    async def translate_batch(
        self, texts: list[str], source_lang: Optional[str], target_lang: str
    ) -> list[str]:
        return [await self.translate(t, source_lang, target_lang) for t in texts]

    async def close(self) -> None:
        self.closed = True


def make_response(
    status: int = 200,
    body: Any = None,
    headers: Optional[dict[str, str]] = None,
) -> MagicMock:
    """Mock aiohttp response; dict/list bodies are JSON encoded."""
    response = MagicMock()
    response.status = status
    response.headers = headers or {}
    text = body if isinstance(body, str) else json.dumps(body)
    response.text = AsyncMock(return_value=text)
    return response


def _context(response: MagicMock) -> MagicMock:
    context = MagicMock()
    context.__aenter__ = AsyncMock(return_value=response)
    context.__aexit__ = AsyncMock(return_value=None)
    return context


def make_session(
    post: Sequence[Union[MagicMock, Exception]] = (),
    get: Sequence[Union[MagicMock, Exception]] = (),
) -> MagicMock:
    """Mock aiohttp session returning the given responses in order."""
    session = MagicMock()
    session.post = MagicMock(
        side_effect=[r if isinstance(r, Exception) else _context(r) for r in post]
    )
    session.get = MagicMock(
        side_effect=[r if isinstance(r, Exception) else _context(r) for r in get]
    )
    session.close = AsyncMock()
    return session


@pytest.fixture
def fake_translator() -> type[FakeTranslator]:
    return FakeTranslator


@pytest.fixture
def response_factory() -> Callable[..., MagicMock]:
    return make_response


@pytest.fixture
def session_factory() -> Callable[..., MagicMock]:
    return make_session


@pytest.fixture
def languages_response() -> MagicMock:
    return make_response(200, LANGUAGES)
