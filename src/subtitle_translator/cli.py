# SPDX-License-Identifier: Apache-2.0
"""
Subtitle Translator - CLI Tool

Translates subtitle files (JSON form of timed entries) while preserving
markup, line breaks and glossary terms.

Usage:
    translate-subtitles <input.json> -t <lang> [options]

Examples:
    translate-subtitles talk.json -t de                  # Default backend
    translate-subtitles talk.json -t de --backend deepl
    translate-subtitles talk.json -t fr -g glossary.json -o talk.fr.json
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import NoReturn, Optional

from dotenv import load_dotenv

from subtitle_translator.core.models import Glossary, Subtitles, TranslationService
from subtitle_translator.pipeline.errors import PipelineError
from subtitle_translator.pipeline.translation_pipeline import (
    PipelineConfig,
    TranslationPipeline,
)
from subtitle_translator.translators.base import ConfigurationError
from subtitle_translator.translators.factory import ServiceConfig

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """Parse command line arguments.

    Returns:
        Parsed argument Namespace.
    """
    parser = argparse.ArgumentParser(
        prog="translate-subtitles",
        description="Subtitle Translation Tool - Translates timed subtitles with markup preservation",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s talk.json -t de                      # Backend from TRANSLATION_SERVICE
  %(prog)s talk.json -t de --backend deepl      # DeepL first, others as fallback
  %(prog)s talk.json -s en -t fr -o out.json    # English to French
  %(prog)s talk.json -t de -g glossary.json     # Protect glossary terms

Environment Variables (also read from .env):
  TRANSLATION_SERVICE     Default backend (libretranslate, deepl, openai)
  LIBRETRANSLATE_URL      LibreTranslate instance URL
  LIBRETRANSLATE_API_KEY  LibreTranslate API key (optional)
  DEEPL_API_KEY           DeepL API key
  OPENAI_API_KEY          OpenAI API key
  OPENAI_MODEL            OpenAI model
""",
    )

    parser.add_argument(
        "input",
        type=Path,
        help="Path to subtitles JSON file",
    )
    parser.add_argument(
        "-o",
        "--output",
        type=Path,
        help="Output file path (default: <input>.<target>.json)",
    )
    parser.add_argument(
        "-b",
        "--backend",
        choices=[s.value for s in TranslationService],
        help="Backend to try first (default: TRANSLATION_SERVICE or libretranslate)",
    )
    parser.add_argument(
        "-s",
        "--source",
        help="Source language code (default: language declared in the input file)",
    )
    parser.add_argument(
        "-t",
        "--target",
        required=True,
        help="Target language code",
    )
    parser.add_argument(
        "-g",
        "--glossary",
        type=Path,
        help="Glossary JSON file",
    )

    retry_group = parser.add_argument_group("Retry options")
    retry_group.add_argument(
        "--rate-limit-retries",
        type=int,
        default=1,
        help="Retries on the same backend after a rate limit (default: 1)",
    )
    retry_group.add_argument(
        "--transient-retries",
        type=int,
        default=0,
        help="Retries on the same backend after server/network errors (default: 0)",
    )

    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose output",
    )

    return parser.parse_args(argv)


def build_service_config(args: argparse.Namespace) -> ServiceConfig:
    """Read backend credentials from the environment and apply --backend."""
    config = ServiceConfig.from_env()
    if args.backend:
        # argparse choices limit --backend to the enum values.
        config.default_service = TranslationService(args.backend)
    return config


def load_subtitles(path: Path, source: Optional[str]) -> Subtitles:
    subtitles = Subtitles.from_dict(json.loads(path.read_text(encoding="utf-8")))
    if source:
        subtitles.language = source
    return subtitles


def load_glossary(path: Path) -> Glossary:
    return Glossary.from_dict(json.loads(path.read_text(encoding="utf-8")))


def default_output_path(input_path: Path, target: str) -> Path:
    return input_path.with_name(f"{input_path.stem}.{target}.json")


async def run(args: argparse.Namespace) -> int:
    """Execute the translation.

    Args:
        args: Command line arguments.

    Returns:
        Exit code (0: success, 1: failure).
    """
    input_path: Path = args.input

    if not input_path.exists():
        print(f"Error: File not found: {input_path}", file=sys.stderr)
        return 1

    try:
        subtitles = load_subtitles(input_path, args.source)
        glossary = load_glossary(args.glossary) if args.glossary else None
    except (OSError, ValueError, KeyError) as e:
        print(f"Error: Could not read input: {e}", file=sys.stderr)
        return 1

    try:
        service_config = build_service_config(args)
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    services = service_config.fallback_order()
    if not services:
        print(
            "Error: No translation service is configured.\n"
            "  Set LIBRETRANSLATE_URL, DEEPL_API_KEY or OPENAI_API_KEY.",
            file=sys.stderr,
        )
        return 1

    output_path: Path = args.output or default_output_path(input_path, args.target)
    config = PipelineConfig(
        max_rate_limit_retries=args.rate_limit_retries,
        transient_retries=args.transient_retries,
    )

    print(f"Input: {input_path}")
    print(f"Output: {output_path}")
    print(f"Backends: {' -> '.join(s.display_name for s in services)}")
    print(f"Translation: {(subtitles.language or 'auto').upper()} -> {args.target.upper()}")
    if glossary:
        print(f"Glossary: {glossary.name}")
    print()

    async with TranslationPipeline.from_service_config(service_config, config) as pipeline:
        pipeline.set_glossary(glossary)
        try:
            async for progress in pipeline.translate(subtitles, args.target):
                print(f"[{progress.percentage * 100:5.1f}%] {progress.message}")
        except PipelineError as e:
            print(f"Error: Translation failed: {e}", file=sys.stderr)
            if args.verbose:
                import traceback

                traceback.print_exc()
            return 1

        result = pipeline.get_translation_result()
        stats = pipeline.get_last_stats()

    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(
        json.dumps(result.to_dict(), ensure_ascii=False, indent=2), encoding="utf-8"
    )

    print()
    print(f"Complete: {output_path}")
    print(f"  Segments: {stats.total_segments}")
    print(f"  Cached: {stats.cached_segments}")
    print(f"  API calls: {stats.api_calls}")
    print(f"  Duration: {stats.duration_ms} ms")
    if stats.fallbacks_used:
        print(f"  Fallbacks: {', '.join(stats.fallbacks_used)}")

    return 0


def main() -> NoReturn:
    """Main entry point."""
    load_dotenv()
    args = parse_args()

    # Configure logging
    log_level = logging.DEBUG if args.verbose else logging.WARNING
    logging.basicConfig(level=log_level, format="%(levelname)s: %(message)s")

    exit_code = asyncio.run(run(args))
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
