"""Shared Pydantic schemas."""
from typing import Any, Optional
from pydantic import BaseModel


class DeleteResponse(BaseModel):
    message: str = "PDF deleted successfully"
    deleted: bool = True
    id: str = ""


class ErrorResponse(BaseModel):
    error: str
    details: Optional[Any] = None


class HealthResponse(BaseModel):
    status: str = "ok"
    message: str = "Server is running"
    database: str
