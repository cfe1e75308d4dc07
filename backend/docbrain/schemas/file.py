"""PDF record response schemas.

The upload acknowledgement is camelCase. Listed records keep the row's
snake_case column names, which is what the frontend reads.
"""
from datetime import datetime
from pydantic import BaseModel
from docbrain.schemas.base import CamelModel


class UploadResponse(CamelModel):
    id: str
    original_name: str
    file_size: int
    upload_date: datetime


class FileRecordResponse(BaseModel):
    id: str
    original_name: str
    file_size: int
    upload_date: datetime
    mime_type: str
