from typing import Any, Optional

from fastapi.encoders import jsonable_encoder


def ok(data: Any = None, message: Optional[str] = None) -> dict:
    body: dict[str, Any] = {"success": True}
    if data is not None:
        body["data"] = jsonable_encoder(data)
    if message:
        body["message"] = message
    return body


def fail(error: str, code: str, details: Optional[dict] = None) -> dict:
    body: dict[str, Any] = {"success": False, "error": error, "code": code}
    if details:
        body["details"] = jsonable_encoder(details)
    return body
