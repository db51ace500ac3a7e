from pydantic import BaseModel
from typing import Optional, Any


class ErrorResponse(BaseModel):
    """
    Standard error response structure.
    """
    error: str
    code: str
    details: Optional[Any] = None


class ActionResult(BaseModel):
    """
    Outcome of a command that has no resource to return.
    """
    success: bool = True
    message: Optional[str] = None
