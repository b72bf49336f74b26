"""Advisory issue model shared by density checks and scene validation."""
from typing import Optional, Literal
from pydantic import BaseModel

Severity = Literal["low", "medium", "high"]


class Issue(BaseModel):
    """A finding raised by a checker. Never blocks execution."""
    severity: Severity
    message: str
    suggestion: Optional[str] = None

    # Density mismatch details (curve comparison only)
    position: Optional[float] = None
    target: Optional[str] = None
    actual: Optional[str] = None
