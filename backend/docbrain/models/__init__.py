"""Import all models so SQLAlchemy metadata knows about them."""
from docbrain.models.base import Base
from docbrain.models.file_record import FileRecord

__all__ = ["Base", "FileRecord"]
