"""
Response formatter: wraps results in the ``{code, message, data}`` envelope
and makes document values JSON-safe.
"""

import math
from typing import Any, Dict

from pydantic import BaseModel

SUCCESS_CODE = 0
SUCCESS_MESSAGE = "ok"


def _sanitise_value(obj: Any) -> Any:
    """Recursively convert non-JSON-safe types to safe representations."""
    if isinstance(obj, BaseModel):
        return _sanitise_value(obj.model_dump(by_alias=True))
    if isinstance(obj, dict):
        return {str(k): _sanitise_value(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_sanitise_value(item) for item in obj]
    if isinstance(obj, bytes):
        # Binary fields (e.g. vector embeddings): try UTF-8, else a placeholder
        try:
            return obj.decode("utf-8")
        except (UnicodeDecodeError, ValueError):
            return f"[binary {len(obj)} bytes]"
    if isinstance(obj, float) and not math.isfinite(obj):
        return None
    if isinstance(obj, (int, float, str, bool, type(None))):
        return obj
    # datetime, ObjectId, Decimal128, etc.
    return str(obj)


def success_response(data: Any, message: str = SUCCESS_MESSAGE) -> Dict[str, Any]:
    return {"code": SUCCESS_CODE, "message": message, "data": _sanitise_value(data)}


def error_response(code: int, message: str) -> Dict[str, Any]:
    return {"code": code, "message": message, "data": None}
