"""Family-relation gate for parent-facing reads."""

import functools
import logging

from sqlalchemy.orm import Session

from admitplan import crud
from admitplan.errors import Forbidden

logger = logging.getLogger(__name__)


def require_family(db: Session, parent_id: int, child_id: int) -> None:
    """Raise Forbidden unless parent and child share a family"""
    if not crud.share_family(db, parent_id, child_id):
        logger.warning("User %s denied access to student %s", parent_id, child_id)
        raise Forbidden("family_forbidden")


def family_guarded(read):
    """
    Turn a student-scoped read ``read(db, student_id, ...)`` into a
    parent-scoped one ``guarded(db, parent_id, child_id, ...)``.

    The family check runs before the wrapped read touches any data.
    """

    @functools.wraps(read)
    def guarded(db: Session, parent_id: int, child_id: int, *args, **kwargs):
        require_family(db, parent_id, child_id)
        return read(db, child_id, *args, **kwargs)

    return guarded
