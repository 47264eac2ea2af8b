"""
Party Directory

Resolves people from the user registry by their external identifier (CPF).
"""

import logging
from typing import Optional

from models import db, User, DepartmentUser
from utils import normalize_cpf

logger = logging.getLogger(__name__)


class PartyDirectory:
    """
    Read-only lookups against the user registry.

    A missing user is an expected result: resolve() returns None
    rather than raising.
    """

    @classmethod
    def resolve(cls, external_id: Optional[str]) -> Optional[User]:
        """Find the user holding this CPF, or None."""
        cpf = normalize_cpf(external_id)
        if not cpf:
            return None

        user = User.query.filter_by(cpf=cpf).first()
        if user is None:
            logger.debug(f"No user found for CPF {cpf}")
        return user

    @classmethod
    def eligible_candidates(cls, document):
        """Query of users belonging to the document's department."""
        department_user_ids = db.select(DepartmentUser.user_id).where(
            DepartmentUser.department_id == document.department_id
        )
        return User.query.filter(User.id.in_(department_user_ids))
