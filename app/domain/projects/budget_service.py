"""Project budget consumption."""

import logging

from sqlalchemy import update
from sqlalchemy.orm import Session

from app.domain.accounting.exceptions import NotFoundError
from app.domain.events import InvoiceCreatedForProject
from app.models.project import Project

logger = logging.getLogger(__name__)


def apply_invoice_to_project_spend(db: Session, event: InvoiceCreatedForProject) -> None:
    """
    Add a payable invoice's total to its project's ``spent``.

    Does not commit; the invoice service commits both writes together.
    """
    result = db.execute(
        update(Project)
        .where(Project.id == event.project_id)
        .values(spent=Project.spent + event.total_amount)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        raise NotFoundError(f"Project {event.project_id} not found")

    logger.info(
        f"Project {event.project_id} spent += {event.total_amount} "
        f"from invoice {event.invoice_number}"
    )
