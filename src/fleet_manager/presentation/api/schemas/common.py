"""Response envelope shared by every endpoint."""

from typing import Any, List, Optional

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    """Base for JSON bodies: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ApiResponse(ApiModel):
    """Envelope: ``{success, message?, data?, error?, errors?}``."""
    success: bool
    message: Optional[str] = None
    data: Optional[Any] = None
    error: Optional[str] = None
    errors: Optional[List[str]] = None


def envelope_response(
    success: bool = True,
    status_code: int = 200,
    message: Optional[str] = None,
    data: Optional[Any] = None,
    error: Optional[str] = None,
    errors: Optional[List[str]] = None,
    headers: Optional[dict] = None
) -> JSONResponse:
    """Render the envelope, leaving out absent top-level keys."""
    if isinstance(data, BaseModel):
        data = data.model_dump(by_alias=True, mode="json")
    body = ApiResponse(success=success, message=message, data=data, error=error, errors=errors)
    content = {
        key: value for key, value in body.model_dump(by_alias=True).items()
        if value is not None
    }
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(content),
        headers=headers
    )
