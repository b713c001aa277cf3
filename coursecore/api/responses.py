from typing import Any

from fastapi import status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from coursecore.domain.envelope import Envelope

# Error kind -> HTTP status
STATUS_BY_KIND: dict[str, int] = {
    "validation": status.HTTP_400_BAD_REQUEST,
    "missing-prerequisite": status.HTTP_400_BAD_REQUEST,
    "authorization": status.HTTP_403_FORBIDDEN,
    "forbidden": status.HTTP_403_FORBIDDEN,
    "not-found": status.HTTP_404_NOT_FOUND,
    "conflict": status.HTTP_409_CONFLICT,
    "capacity": status.HTTP_409_CONFLICT,
    "state": status.HTTP_409_CONFLICT,
    "service-unavailable": status.HTTP_503_SERVICE_UNAVAILABLE,
}


def respond(envelope: Envelope[Any], success_status: int = status.HTTP_200_OK) -> JSONResponse:
    """Render an envelope, choosing the HTTP status from the error kind."""
    if envelope.success:
        code = success_status
    else:
        assert envelope.error is not None
        code = STATUS_BY_KIND.get(envelope.error.kind, status.HTTP_400_BAD_REQUEST)
    return JSONResponse(status_code=code, content=jsonable_encoder(envelope.to_dict()))


def error_body(kind: str, message: str) -> dict[str, Any]:
    return {"success": False, "error": {"kind": kind, "message": message}}
