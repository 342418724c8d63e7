# SPDX-License-Identifier: Apache-2.0
"""Subtitle translation engine with placeholder protection, caching and backend fallback."""

__version__ = "0.1.0"
