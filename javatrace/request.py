"""
javatrace.request
=================

Request validation and the response envelope for a transport layer
(HTTP handler, RPC, message queue) that hosts the analyzer.

:func:`handle_analyze_request` takes the decoded request body, validates
it, runs the analysis and returns ``(status, body)``:

* ``200`` ``{success: true, data: {...analysis, metadata}}``
* ``400`` validation failures, ``{success: false, error, details?, timestamp}``
* ``500`` analysis failures, ``{success: false, error, timestamp}``
"""

from __future__ import annotations

import logging
import time
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional, Tuple

from .analyzer import run_analysis
from .config import AnalysisConfig
from .errors import RequestError

__all__ = ["SUPPORTED_LANGUAGES", "validate_request", "handle_analyze_request"]

logger = logging.getLogger(__name__)

SUPPORTED_LANGUAGES = ("java",)


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def validate_request(payload: Any) -> Tuple[str, str]:
    """Return ``(language, code)`` from a request body.

    The language is lower-cased and stripped.

    Raises
    ------
    RequestError
        On missing fields, non-string fields, an unsupported language or
        blank code.
    """
    if not isinstance(payload, Mapping):
        raise RequestError("Invalid request body: expected an object")
    language = payload.get("language")
    code = payload.get("code")
    if not language or not code:
        raise RequestError("Missing required fields: language and code are required")
    if not isinstance(language, str) or not isinstance(code, str):
        raise RequestError("Invalid input types: language and code must be strings")

    language = language.lower().strip()
    if language not in SUPPORTED_LANGUAGES:
        raise RequestError("Unsupported language", "Only Java is supported currently")
    if not code.strip():
        raise RequestError("Empty code", "Please provide some code to analyze")
    return language, code


def handle_analyze_request(
    payload: Any, config: Optional[AnalysisConfig] = None
) -> Tuple[int, Dict[str, Any]]:
    """Validate *payload*, analyze its code and build the response."""
    started = time.monotonic()
    try:
        language, code = validate_request(payload)
    except RequestError as exc:
        logger.info("Rejected analysis request: %s", exc.message)
        body: Dict[str, Any] = {"success": False, "error": exc.message}
        if exc.details:
            body["details"] = exc.details
        body["timestamp"] = _timestamp()
        return exc.status, body

    result = run_analysis(code, config)
    if not result.get("success"):
        return 500, {
            "success": False,
            "error": result.get("error") or "Analysis returned no results",
            "timestamp": _timestamp(),
        }

    data = dict(result)
    data["metadata"] = {
        "language": language,
        "analysisTime": round((time.monotonic() - started) * 1000),
        "timestamp": _timestamp(),
    }
    return 200, {"success": True, "data": data}
