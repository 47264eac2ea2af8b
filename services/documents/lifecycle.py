"""
Document Lifecycle

Editability state machine for signed documents.

    OPEN ──(any signer signs)──> LOCKED ──reopen_to_edit()──> REOPENED
                                   ^                             │
                                   └──────(any signer signs)─────┘

Locking is implicit: it follows from the signature flags tracked by
SignatureTracker. Leaving LOCKED requires an explicit, justified reopen
that clears every signature.
"""

import logging
from datetime import datetime

from services import audit_service
from .exceptions import DocumentLockedError, ValidationError
from .signature_tracker import SignatureTracker
from .types import DocumentState

logger = logging.getLogger(__name__)


class DocumentLifecycle:
    """Stateless lifecycle operations over a Document."""

    @classmethod
    def state(cls, document) -> DocumentState:
        if SignatureTracker.has_any_signed(document):
            return DocumentState.LOCKED
        if document.reopened:
            return DocumentState.REOPENED
        return DocumentState.OPEN

    @classmethod
    def is_editable(cls, document) -> bool:
        """True while no signer has signed (OPEN or REOPENED)."""
        return not SignatureTracker.has_any_signed(document)

    @classmethod
    def ensure_editable(cls, document) -> None:
        """
        Guard for callers about to mutate a document or its recipients.

        Raises:
            DocumentLockedError: if someone already signed the document
        """
        if not cls.is_editable(document):
            logger.warning(f"Rejected change to locked document {document.id}")
            raise DocumentLockedError(
                f"Document {document.id} has signatures and cannot be changed",
                document_id=document.id
            )

    @classmethod
    def reopen_to_edit(cls, document, actor_id, justification) -> DocumentState:
        """
        Reopen a document for editing.

        Records who reopened it, when and why, then clears every signer's
        signature. A document nobody signed may also be reopened; only the
        audit trail changes.

        Raises:
            ValidationError: if the justification is blank (nothing changes)
        """
        justification = (justification or '').strip()
        if not justification:
            logger.warning(f"Reopen of document {document.id} rejected: no justification")
            raise ValidationError("Justification is required to reopen a document",
                                  field='justification', code='blank')

        document.reopened = True
        document.justification = justification
        document.last_reopened_by_user_id = actor_id
        document.last_reopened_at = datetime.utcnow()

        cleared = SignatureTracker.reset_all(document)
        audit_service.log_document_reopened(document, cleared, actor_id=actor_id)

        logger.info(f"Document {document.id} reopened by user {actor_id}; "
                    f"{len(cleared)} signature(s) cleared")
        return cls.state(document)
