"""User-visible, dismissible notices produced by staff actions."""
from typing import Optional

from pydantic import BaseModel


class Notice(BaseModel):
    level: str  # info / warning / error
    code: str
    message: str
    field: Optional[str] = None

    @classmethod
    def info(cls, code: str, message: str) -> "Notice":
        return cls(level="info", code=code, message=message)

    @classmethod
    def warning(cls, code: str, message: str) -> "Notice":
        return cls(level="warning", code=code, message=message)

    @classmethod
    def error(cls, code: str, message: str, field: Optional[str] = None) -> "Notice":
        return cls(level="error", code=code, message=message, field=field)
