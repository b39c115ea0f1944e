"""
API request and response models for Todoboard REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in core/models.py, which
own the internal domain representation. Route handlers map between the two.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict

from core.models import Todo

# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class TodoCreate(BaseModel):
    """Request body for POST /api/todos. Text is stored as given."""

    text: str


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class TodoResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    text: str
    completed: bool

    @classmethod
    def from_todo(cls, todo: Todo) -> "TodoResponse":
        return cls(id=todo.id, text=todo.text, completed=todo.completed)


class MeResponse(BaseModel):
    """Response for GET /api/auth/me."""

    model_config = ConfigDict(frozen=True)

    id: str
    email: str


class ErrorDetail(BaseModel):
    """Machine-readable error payload."""

    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    detail: Optional[str] = None


class ErrorResponse(BaseModel):
    """Top-level error envelope returned on 4xx/5xx responses."""

    model_config = ConfigDict(frozen=True)

    error: ErrorDetail


class HealthResponse(BaseModel):
    """Response for GET /api/health."""

    model_config = ConfigDict(frozen=True)

    status: str = "ok"
    version: str
