"""Uniform response envelope returned by route handlers."""

from typing import Any, Optional

from pydantic import BaseModel


class Envelope(BaseModel):
    """Either ``data`` (success) or ``error_code``/``message`` (failure)."""

    data: Any = None
    error_code: Optional[str] = None
    message: Optional[str] = None
    status_code: int = 200

    @property
    def ok(self) -> bool:
        return self.error_code is None

    @classmethod
    def success(cls, data: Any) -> "Envelope":
        return cls(data=data)

    @classmethod
    def failure(cls, error_code: str, message: str, status_code: int) -> "Envelope":
        return cls(error_code=error_code, message=message, status_code=status_code)
