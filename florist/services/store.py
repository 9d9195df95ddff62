"""Entity store: lookup, filtered listing, write and delete over the ORM session.

Rows are keyed by a single canonical primary key (a UUID string). Writes are
flushed, never committed here; the calling workflow owns the transaction and
commits through :func:`transaction`.
"""

import logging
from contextlib import contextmanager
from typing import TypeVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from florist.database import Base
from florist.services.errors import ConcurrencyError, DuplicateRecord, StorageError, ValidationError

logger = logging.getLogger(__name__)

# Rollbacks caused by these are expected outcomes, not faults
EXPECTED_FAILURES = (ValidationError, ConcurrencyError, DuplicateRecord)

ModelT = TypeVar("ModelT", bound=Base)


def clean_key(idempotency_key: str | None) -> str | None:
    """Blank or whitespace-only keys count as no key."""
    return (idempotency_key or "").strip() or None


@contextmanager
def storage_errors(action: str):
    try:
        yield
    except StaleDataError as e:
        raise ConcurrencyError(f"Concurrent update detected while trying to {action}") from e
    except IntegrityError as e:
        logger.warning("Unique constraint hit while trying to %s: %s", action, e.orig)
        raise DuplicateRecord(f"Failed to {action}: record already exists") from e
    except SQLAlchemyError as e:
        logger.error("Storage failure while trying to %s: %s", action, e)
        raise StorageError(f"Failed to {action}") from e


class Transaction:
    """Tracks the step a workflow is on so a rollback can say where it failed."""

    def __init__(self, workflow: str, idempotency_key: str | None = None):
        self.workflow = workflow
        self.idempotency_key = idempotency_key
        self.step = "start"


@contextmanager
def transaction(db: Session, workflow: str, idempotency_key: str | None = None):
    """Run a multi-step workflow as one unit: commit at the end, roll back everything on error."""
    tx = Transaction(workflow, idempotency_key)
    try:
        yield tx
        tx.step = "commit"
        with storage_errors(f"commit {workflow}"):
            db.commit()
    except Exception as e:
        db.rollback()
        log = logger.warning if isinstance(e, EXPECTED_FAILURES) else logger.error
        log(
            "Workflow %s rolled back at step '%s' (idempotency_key=%s): %s",
            workflow, tx.step, idempotency_key, e,
        )
        raise


def get(db: Session, model: type[ModelT], record_id: str) -> ModelT | None:
    if not record_id:
        return None
    with storage_errors(f"load {model.__tablename__}"):
        return db.get(model, record_id)


def find_one(db: Session, model: type[ModelT], **filters) -> ModelT | None:
    with storage_errors(f"query {model.__tablename__}"):
        return db.query(model).filter_by(**filters).first()


def list_records(db: Session, model: type[ModelT], order_by=None, **filters) -> list[ModelT]:
    q = db.query(model)
    if filters:
        q = q.filter_by(**filters)
    if order_by is not None:
        q = q.order_by(*order_by) if isinstance(order_by, (list, tuple)) else q.order_by(order_by)
    with storage_errors(f"list {model.__tablename__}"):
        return q.all()


def count(db: Session, model: type[ModelT], **filters) -> int:
    with storage_errors(f"count {model.__tablename__}"):
        return db.query(model).filter_by(**filters).count()


def put(db: Session, record: ModelT) -> ModelT:
    db.add(record)
    with storage_errors(f"write {record.__tablename__}"):
        db.flush()
    return record


def delete(db: Session, model: type[ModelT], record_id: str) -> bool:
    record = get(db, model, record_id)
    if record is None:
        return False
    db.delete(record)
    with storage_errors(f"delete {model.__tablename__}"):
        db.flush()
    return True
