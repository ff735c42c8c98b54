"""
Error envelope returned by every failing endpoint:

    {"error": {"code": "...", "message": "...", "details": ...}}
"""

from typing import Any

from pydantic import BaseModel


class ErrorBody(BaseModel):
    code: str
    message: str
    details: Any = None


class ErrorResponse(BaseModel):
    error: ErrorBody
