"""
Signature Tracker

Per-signer completion flags and the aggregate "has anyone signed" check
that drives document locking.
"""

import logging
from typing import List

from models import db, DocumentSigner
from services import audit_service
from .types import MembershipOutcome

logger = logging.getLogger(__name__)


class SignatureTracker:
    """Stateless service over a document's signers."""

    @classmethod
    def has_any_signed(cls, document) -> bool:
        """True if at least one signer of the document has signed."""
        if document.id is None:
            return any(signer.signed for signer in document.document_signers)

        signed = DocumentSigner.query.filter_by(document_id=document.id, signed=True)
        return db.session.query(signed.exists()).scalar()

    @classmethod
    def mark_signed(cls, document, user_id: int) -> MembershipOutcome:
        """
        Record the signature of `user_id` on the document.

        Signing twice is a no-op that still reports SUCCESS; the original
        signed_at is kept. Returns NOT_FOUND if the user is not a signer.
        """
        signer = DocumentSigner.query.filter_by(document_id=document.id, user_id=user_id).first()
        if signer is None:
            logger.warning(f"User {user_id} is not a signer of document {document.id}")
            return MembershipOutcome.NOT_FOUND

        if signer.signed:
            logger.debug(f"User {user_id} already signed document {document.id}")
            return MembershipOutcome.SUCCESS

        signer.sign()
        db.session.flush()
        audit_service.log_document_signed(document, signer)

        logger.info(f"User {user_id} signed document {document.id}")
        return MembershipOutcome.SUCCESS

    @classmethod
    def reset_all(cls, document) -> List[int]:
        """
        Clear every signer's completion flag.

        Returns:
            IDs of the signers whose flag was set before the reset
        """
        if document.id is None:
            signers = document.document_signers
        else:
            signers = DocumentSigner.query.filter_by(document_id=document.id).all()

        cleared = []
        for signer in signers:
            if signer.signed:
                cleared.append(signer.id)
            signer.signed = False
            signer.signed_at = None

        db.session.flush()
        logger.debug(f"Reset {len(cleared)} signature(s) on document {document.id}")
        return cleared
