# SPDX-License-Identifier: Apache-2.0
"""Translation pipeline package."""

from .errors import PipelineError, ResultNotAvailableError, TranslationFailedError
from .fallback import FallbackOutcome, FallbackTranslator, RetryPolicy
from .progress import ProgressCallback, TranslationProgress
from .translation_pipeline import PipelineConfig, TranslationPipeline

__all__ = [
    "FallbackOutcome",
    "FallbackTranslator",
    "PipelineConfig",
    "PipelineError",
    "ProgressCallback",
    "ResultNotAvailableError",
    "RetryPolicy",
    "TranslationFailedError",
    "TranslationPipeline",
    "TranslationProgress",
]
