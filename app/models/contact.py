from datetime import datetime, timezone

from sqlmodel import SQLModel, Field


class ContactMessage(SQLModel, table=True):
    """
    Message left through the storefront contact form.
    """

    __tablename__ = "contact_us"

    id: int | None = Field(default=None, primary_key=True)
    name: str = Field(max_length=255)
    email: str = Field(max_length=255)
    subject: str = Field(max_length=255)
    message: str
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Submission timestamp (UTC)",
    )
