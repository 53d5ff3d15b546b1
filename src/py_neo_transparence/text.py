# Copyright (c) 2025-2026 Gowtham Adamane Rao. All Rights Reserved.
#
# Licensed under the Prosperity Public License 3.0.0 (the "License").
# You may not use this file except in compliance with the License.
# You may obtain a copy of the License in the LICENSE file at the root
# of this repository, or at: https://prosperitylicense.com/versions/3.0.0
#
# Commercial use beyond a 30-day trial requires a separate license.
"""
Locale-aware upper-casing of source text.

Every value stored in the graph, and every string compared against a merge
key, goes through this module so that "é" and "É" never end up as two
different keys.
"""
from typing import Any, Dict

# Languages whose dotted/dotless i do not follow the default Unicode mapping.
TURKIC_LANGUAGES = {"tr", "az"}


def _language(locale: str) -> str:
    return locale.replace("-", "_").split("_")[0].lower()


def upper(text: str, locale: str = "fr") -> str:
    """Upper-cases ``text`` following the case rules of ``locale``."""
    if _language(locale) in TURKIC_LANGUAGES:
        text = text.replace("i", "İ").replace("ı", "I")
    return text.upper()


def normalize(record: Dict[str, Any], locale: str = "fr") -> Dict[str, Any]:
    """
    Returns a copy of ``record`` with every string value upper-cased.
    Non-string values are passed through untouched.
    """
    return {
        key: upper(value, locale) if isinstance(value, str) else value
        for key, value in record.items()
    }
