# =============================================================================
# app/responses.py - Success Envelope
# =============================================================================
# Successful responses share one shape:
#   {"success": true, "data": ..., "message": "..."}
# Errors use the envelope built by app/exceptions.py.
# =============================================================================

from typing import Any

from fastapi.encoders import jsonable_encoder
from pydantic import BaseModel


def success(data: Any = None, message: str | None = None) -> dict[str, Any]:
    """Wrap a payload in the success envelope."""
    if isinstance(data, BaseModel):
        data = data.model_dump(mode="json")
    body: dict[str, Any] = {"success": True, "data": jsonable_encoder(data)}
    if message:
        body["message"] = message
    return body
