from sqlmodel import Session, select

from app.models.contact import ContactMessage


class ContactRepository:
    """
    Data access layer for contact form submissions.
    """

    def list_messages(self, session: Session) -> list[ContactMessage]:
        stmt = select(ContactMessage).order_by(ContactMessage.created_at, ContactMessage.id)
        return list(session.exec(stmt).all())

    def get_by_id(self, session: Session, message_id: int) -> ContactMessage | None:
        return session.get(ContactMessage, message_id)

    def create(self, session: Session, message: ContactMessage) -> ContactMessage:
        session.add(message)
        session.commit()
        session.refresh(message)
        return message

    def delete(self, session: Session, message: ContactMessage) -> None:
        session.delete(message)
        session.commit()
