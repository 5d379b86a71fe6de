"""
Pydantic models for API error payloads.
"""
from typing import Any, Optional

from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """
    Body of every non-2xx response.

    `details` is only populated outside production.
    """
    success: bool = False
    error: str = Field(..., description="Short error title")
    message: Optional[str] = Field(None, description="What the caller should do next")
    details: Optional[Any] = None


def error_response(
    status_code: int,
    error: str,
    message: Optional[str] = None,
    details: Optional[Any] = None,
) -> JSONResponse:
    body = ErrorResponse(error=error, message=message, details=details)
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(mode="json", exclude_none=True),
    )
