"""Task Schemas - Pydantic models for task CRUD.

Invariants:
    - description: 1-1000 chars, stripped, non-empty
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator


class TaskCreate(BaseModel):
    """Task creation - validates description length and whitespace."""
    description: str = Field(min_length=1, max_length=1000)

    @field_validator("description")
    @classmethod
    def strip_description(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("description cannot be empty or whitespace")
        return v


class TaskUpdate(BaseModel):
    """Partial task update - omitted fields stay unchanged."""
    description: str | None = Field(None, min_length=1, max_length=1000)

    @field_validator("description")
    @classmethod
    def strip_description(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("description cannot be empty or whitespace")
        return v


class TaskResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    description: str
