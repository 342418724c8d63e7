# SPDX-License-Identifier: Apache-2.0
"""Progress reporting for the translation pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable


@dataclass(frozen=True)
class TranslationProgress:
    """One progress update.

    Attributes:
        percentage: Fraction of segments processed, 0.0 to 1.0.
        message: User-facing status message.
    """

    percentage: float
    message: str = ""


@runtime_checkable
class ProgressCallback(Protocol):
    """Progress callback protocol."""

    def __call__(
        self,
        stage: str,
        current: int,
        total: int,
        message: str = "",
    ) -> None: ...
