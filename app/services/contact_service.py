import logging
import smtplib

from fastapi import HTTPException, status
from sqlmodel import Session

from app.core import email_client
from app.core.config import get_settings
from app.models.contact import ContactMessage
from app.repositories.contact_repo import ContactRepository
from app.schemas.contact import ContactCreate

settings = get_settings()
logger = logging.getLogger(__name__)


class ContactService:
    """
    Contact form inbox: storefront visitors write, admins read and delete.
    """

    def __init__(self, repo: ContactRepository):
        self.repo = repo

    def list_messages(self, session: Session) -> list[ContactMessage]:
        return self.repo.list_messages(session)

    def submit(self, session: Session, payload: ContactCreate) -> ContactMessage:
        message = ContactMessage(
            name=payload.name,
            email=payload.email,
            subject=payload.subject,
            message=payload.message,
        )
        return self.repo.create(session, message)

    def delete_message(self, session: Session, message_id: int) -> None:
        message = self.repo.get_by_id(session, message_id)
        if not message:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Contact not found",
            )
        self.repo.delete(session, message)

    def notify_owner(self, name: str, email: str, subject: str, body: str) -> None:
        """
        Forward a new submission to CONTACT_NOTIFY_EMAIL.

        Runs as a background task after the response: failures are logged,
        never raised.
        """
        if not (settings.CONTACT_NOTIFY_EMAIL and email_client.is_configured()):
            return
        try:
            email_client.send_email(
                to_email=settings.CONTACT_NOTIFY_EMAIL,
                subject=f"[Contact] {subject}",
                text_body=f"From: {name} <{email}>\n\n{body}",
                reply_to=email,
            )
        except (smtplib.SMTPException, OSError):
            logger.exception("Failed to send contact notification for %s", email)
