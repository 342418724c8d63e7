# SPDX-License-Identifier: Apache-2.0
"""Pipeline error definitions."""

from __future__ import annotations

from typing import Optional, Sequence


class PipelineError(Exception):
    """Base exception for pipeline errors."""

    def __init__(
        self,
        message: str,
        stage: str,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.stage = stage
        self.cause = cause

    def __str__(self) -> str:
        text = f"[{self.stage}] {self.message}"
        if self.cause is not None:
            text += f" (caused by {type(self.cause).__name__}: {self.cause})"
        return text


class TranslationFailedError(PipelineError):
    """Every configured backend failed for a segment.

    Attributes:
        attempted_services: Backends tried, in order.
        segment_index: Subtitle index of the failing segment, if known.
        last_error: The final backend error (same as ``cause``).
    """

    def __init__(
        self,
        message: str,
        attempted_services: Sequence[str] = (),
        cause: Exception | None = None,
        segment_index: Optional[int] = None,
    ) -> None:
        super().__init__(message, stage="translate", cause=cause)
        self.attempted_services = tuple(attempted_services)
        self.segment_index = segment_index

    @property
    def last_error(self) -> Exception | None:
        return self.cause


class ResultNotAvailableError(PipelineError, RuntimeError):
    """A result or statistics were requested before any successful run."""

    def __init__(self, message: str) -> None:
        super().__init__(message, stage="result")
