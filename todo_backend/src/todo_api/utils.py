from __future__ import annotations

from typing import Any, Dict, Mapping, Optional, Sequence

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse


# PUBLIC_INTERFACE
def error_envelope(kind: str, message: str, detail: Optional[Sequence[Any]] = None) -> Dict[str, Any]:
    """
    Build the standard error body shared by every failing response.

    Args:
        kind: Error discriminator, e.g. 'ValidationError' or 'NotFound'.
        message: Human readable description of the failure.
        detail: Optional list of field-level errors (validation failures only).

    Returns:
        Dict with keys: object, error, message and, when given, detail.
    """
    body: Dict[str, Any] = {"object": "error", "error": kind, "message": message}
    if detail is not None:
        body["detail"] = jsonable_encoder(list(detail))
    return body


# PUBLIC_INTERFACE
def error_response(
    status_code: int,
    kind: str,
    message: str,
    detail: Optional[Sequence[Any]] = None,
    headers: Optional[Mapping[str, str]] = None,
) -> JSONResponse:
    """Return a JSONResponse carrying an error envelope."""
    return JSONResponse(
        status_code=status_code,
        content=error_envelope(kind, message, detail),
        headers=dict(headers) if headers else None,
    )
