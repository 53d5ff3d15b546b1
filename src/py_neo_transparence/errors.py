# Copyright (c) 2025-2026 Gowtham Adamane Rao. All Rights Reserved.
#
# Licensed under the Prosperity Public License 3.0.0 (the "License").
# You may not use this file except in compliance with the License.
# You may obtain a copy of the License in the LICENSE file at the root
# of this repository, or at: https://prosperitylicense.com/versions/3.0.0
#
# Commercial use beyond a 30-day trial requires a separate license.
"""
Exceptions raised by the import pipeline.

Store failures are not wrapped: they surface as the driver's own
``neo4j.exceptions`` types, and missing source files as ``OSError``.
"""
from typing import Any, Dict, Optional


class TransparenceImportError(Exception):
    """Base exception for all import errors."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        if self.context:
            return f"{self.message} | context={self.context}"
        return self.message


class MalformedRowError(TransparenceImportError):
    """A source row cannot be mapped onto its column projection."""

    pass


class UnknownEntityError(TransparenceImportError):
    """No import definition exists for the requested entity."""

    pass
