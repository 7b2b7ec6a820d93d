"""Uniform success/failure envelopes returned by every tool operation."""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional


class ErrorCode(str, Enum):
    INVALID_INPUT = "INVALID_INPUT"
    UPSTREAM_ERROR = "UPSTREAM_ERROR"
    RATE_LIMITED = "RATE_LIMITED"
    TIMEOUT = "TIMEOUT"
    PARSE_ERROR = "PARSE_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class ToolError(Exception):
    """Failure that maps directly onto an error envelope."""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_response(self) -> Dict[str, Any]:
        return error_response(self.code, self.message, self.details)


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def success_response(
    data: Any,
    source: Optional[str] = None,
    warnings: Optional[List[str]] = None,
) -> Dict[str, Any]:
    """Wrap a result in a success envelope.

    Args:
        data: Tool result payload
        source: Optional description of where the data came from
        warnings: Non-fatal conditions worth reporting to the caller

    Returns:
        ``{"ok": True, "data": ..., "meta": {...}}``
    """
    meta: Dict[str, Any] = {"retrieved_at": _timestamp(), "warnings": list(warnings or [])}
    if source:
        meta["source"] = source
    return {"ok": True, "data": data, "meta": meta}


def error_response(
    code: ErrorCode,
    message: str,
    details: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    return {
        "ok": False,
        "error": {
            "code": ErrorCode(code).value,
            "message": message,
            "details": details or {},
        },
        "meta": {"retrieved_at": _timestamp()},
    }
