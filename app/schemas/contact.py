from datetime import datetime

from pydantic import EmailStr, ConfigDict, field_validator
from sqlmodel import SQLModel, Field


class ContactCreate(SQLModel):
    """
    Storefront contact form submission.

    Validation rules:
      - email must be a valid EmailStr
      - name, subject and message cannot be empty or whitespace
    """

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    name: str = Field(max_length=255)
    email: EmailStr
    subject: str = Field(max_length=255)
    message: str = Field(max_length=5000)

    @field_validator("name", "subject", "message")
    @classmethod
    def not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("field cannot be empty")
        return v


class ContactRead(SQLModel):
    id: int
    name: str
    email: str
    subject: str
    message: str
    created_at: datetime
