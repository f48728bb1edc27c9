"""Auth Schemas: magic-link restore request and simple acknowledgements."""

from pydantic import BaseModel, Field, field_validator


class RestoreRequest(BaseModel):
    """Ask for a magic link to an already-purchased report."""
    email: str = Field(max_length=320)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        v = v.strip().lower()
        if not v or "@" not in v:
            raise ValueError("Invalid email")
        return v


class SuccessResponse(BaseModel):
    success: bool = True
