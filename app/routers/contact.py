from fastapi import APIRouter, BackgroundTasks, Depends, status
from sqlmodel import Session

from app.core.auth import require_admin
from app.database import get_session
from app.repositories.contact_repo import ContactRepository
from app.schemas.contact import ContactCreate, ContactRead
from app.services.contact_service import ContactService

router = APIRouter(prefix="/contact", tags=["Contact"])

repo = ContactRepository()
service = ContactService(repo)


# -------- Public endpoint --------


@router.post(
    "",
    response_model=ContactRead,
    status_code=status.HTTP_201_CREATED,
)
def submit_message(
    payload: ContactCreate,
    background_tasks: BackgroundTasks,
    session: Session = Depends(get_session),
):
    """
    Storefront contact form. The owner is emailed after the response
    when SMTP and CONTACT_NOTIFY_EMAIL are configured.
    """
    message = service.submit(session, payload)
    background_tasks.add_task(
        service.notify_owner,
        message.name,
        message.email,
        message.subject,
        message.message,
    )
    return message


# -------- Admin endpoints --------


@router.get(
    "",
    response_model=list[ContactRead],
    dependencies=[Depends(require_admin)],
)
def list_messages(session: Session = Depends(get_session)):
    return service.list_messages(session)


@router.delete(
    "/{message_id}",
    dependencies=[Depends(require_admin)],
)
def delete_message(
    message_id: int,
    session: Session = Depends(get_session),
) -> dict[str, str]:
    service.delete_message(session, message_id)
    return {"message": "Contact deleted successfully"}
