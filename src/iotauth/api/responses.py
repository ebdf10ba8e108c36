"""Success envelope helper.

Routes return ``respond(...)`` instead of a bare model so that optional keys
(``data``, ``result``) are omitted when empty rather than rendered as null.
"""

from typing import Any

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse


def respond(
    message: str,
    data: Any = None,
    *,
    status_code: int = 200,
    result: str | None = None,
) -> JSONResponse:
    body: dict[str, Any] = {"status": True, "message": message}
    if data is not None:
        body["data"] = jsonable_encoder(data)
    if result is not None:
        body["result"] = result
    return JSONResponse(status_code=status_code, content=body)
