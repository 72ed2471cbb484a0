from typing import Optional
from pydantic import BaseModel, Field


class OperationResult(BaseModel):
    success: bool
    message: str = ""
    path: Optional[str] = Field(
        default=None, description="Path of the affected entry, relative to the base directory"
    )

    @classmethod
    def ok(cls, path: Optional[str] = None, message: str = "") -> "OperationResult":
        return cls(success=True, path=path, message=message)

    @classmethod
    def fail(cls, message: str) -> "OperationResult":
        return cls(success=False, message=message)


class DirEntry(BaseModel):
    name: str
    path: str  # relative to the base directory, POSIX separators
    is_dir: bool
    size: Optional[int] = None
    size_text: str = "-"
    preview: Optional[str] = None
    contained: bool = True  # False for symlinks pointing outside the base


class SearchHit(BaseModel):
    name: str
    path: str
    folder: str


class Crumb(BaseModel):
    name: str
    path: str
