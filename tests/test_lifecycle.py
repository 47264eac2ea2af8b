"""
Signature tracking and the reopen-to-edit lifecycle.

Run with: python -m pytest tests/test_lifecycle.py -v
"""

from datetime import datetime

import pytest

from models import db, AuditEvent, DocumentSigner
from services.documents import (
    DocumentLifecycle,
    DocumentLockedError,
    DocumentState,
    MembershipOutcome,
    SignatureTracker,
    ValidationError
)


class TestSignatureTracker:
    """Per-signer flags and the aggregate check."""

    @pytest.fixture(autouse=True)
    def setup(self, factory):
        self.factory = factory
        self.document = factory.document()
        self.signer = factory.signer(self.document)

    def test_someone_signed(self):
        assert not SignatureTracker.has_any_signed(self.document)
        assert not self.document.someone_signed()

        self.signer.sign()
        db.session.commit()

        assert SignatureTracker.has_any_signed(self.document)
        assert self.document.someone_signed()

    def test_mark_signed(self):
        outcome = SignatureTracker.mark_signed(self.document, self.signer.user_id)
        db.session.commit()

        assert outcome is MembershipOutcome.SUCCESS
        assert self.signer.signed is True
        assert self.signer.signed_at is not None
        assert AuditEvent.query.filter_by(event_type=AuditEvent.DOCUMENT_SIGNED).count() == 1

    def test_mark_signed_is_idempotent(self):
        SignatureTracker.mark_signed(self.document, self.signer.user_id)
        db.session.commit()
        signed_at = self.signer.signed_at

        outcome = SignatureTracker.mark_signed(self.document, self.signer.user_id)

        assert outcome is MembershipOutcome.SUCCESS
        assert self.signer.signed_at == signed_at
        assert AuditEvent.query.filter_by(event_type=AuditEvent.DOCUMENT_SIGNED).count() == 1

    def test_mark_signed_by_non_signer(self):
        outsider = self.factory.user()

        outcome = SignatureTracker.mark_signed(self.document, outsider.id)

        assert outcome is MembershipOutcome.NOT_FOUND
        assert not SignatureTracker.has_any_signed(self.document)

    def test_signature_on_other_document_does_not_count(self):
        other = self.factory.document()
        self.factory.signer(other, signed=True)

        assert not SignatureTracker.has_any_signed(self.document)

    def test_reset_all(self):
        second = self.factory.signer(self.document, signed=True)
        self.signer.sign()
        db.session.commit()

        cleared = SignatureTracker.reset_all(self.document)
        db.session.commit()

        assert sorted(cleared) == sorted([self.signer.id, second.id])
        assert DocumentSigner.query.filter_by(document_id=self.document.id, signed=True).count() == 0
        assert self.signer.signed_at is None


class TestDocumentState:
    """State derived from signatures and the reopen flag."""

    @pytest.fixture(autouse=True)
    def setup(self, factory):
        self.factory = factory
        self.document = factory.document()

    def test_new_document_is_open(self):
        assert DocumentLifecycle.state(self.document) is DocumentState.OPEN
        assert DocumentLifecycle.is_editable(self.document)
        assert self.document.is_editable()

    def test_signature_locks_document(self):
        signer = self.factory.signer(self.document)
        SignatureTracker.mark_signed(self.document, signer.user_id)

        assert DocumentLifecycle.state(self.document) is DocumentState.LOCKED
        assert not DocumentLifecycle.is_editable(self.document)

    def test_ensure_editable(self):
        DocumentLifecycle.ensure_editable(self.document)

        self.factory.signer(self.document, signed=True)

        with pytest.raises(DocumentLockedError) as excinfo:
            DocumentLifecycle.ensure_editable(self.document)
        assert excinfo.value.document_id == self.document.id

    def test_signing_a_reopened_document_locks_it_again(self):
        signer = self.factory.signer(self.document, signed=True)
        DocumentLifecycle.reopen_to_edit(self.document, actor_id=signer.user_id, justification='typo')
        assert DocumentLifecycle.state(self.document) is DocumentState.REOPENED

        SignatureTracker.mark_signed(self.document, signer.user_id)

        assert DocumentLifecycle.state(self.document) is DocumentState.LOCKED


class TestReopenToEdit:
    """Explicit, justified reopen of a locked document."""

    @pytest.fixture(autouse=True)
    def setup(self, factory):
        self.document = factory.document()
        self.s1 = factory.signer(self.document, signed=True)
        self.s2 = factory.signer(self.document, signed=False)
        self.user = factory.user()

    def test_reopen(self):
        justification = 'Reopen to edit because there is an error!'
        before = datetime.utcnow()

        assert self.document.someone_signed()
        state = self.document.reopen_to_edit(actor_id=self.user.id, justification=justification)
        db.session.commit()

        assert state is DocumentState.REOPENED
        assert not self.document.someone_signed()
        assert self.document.is_editable()
        assert self.document.reopened is True
        assert self.document.last_reopened_by_user_id == self.user.id
        assert self.document.justification == justification
        assert before <= self.document.last_reopened_at <= datetime.utcnow()

    def test_reopen_clears_every_signature(self):
        DocumentLifecycle.reopen_to_edit(self.document, actor_id=self.user.id, justification='fix typo')
        db.session.commit()

        assert self.s1.signed is False
        assert self.s2.signed is False
        assert self.document.justification == 'fix typo'

    def test_reopen_is_audited(self):
        DocumentLifecycle.reopen_to_edit(self.document, actor_id=self.user.id, justification='fix typo')
        db.session.commit()

        event = AuditEvent.query.filter_by(event_type=AuditEvent.DOCUMENT_REOPENED).one()
        assert event.actor_id == self.user.id
        assert event.event_data['justification'] == 'fix typo'
        assert event.event_data['cleared_signer_ids'] == [self.s1.id]

    @pytest.mark.parametrize('justification', ['', '   ', None])
    def test_reopen_requires_justification(self, justification):
        with pytest.raises(ValidationError) as excinfo:
            DocumentLifecycle.reopen_to_edit(self.document, actor_id=self.user.id,
                                             justification=justification)

        assert excinfo.value.field == 'justification'
        assert excinfo.value.code == 'blank'
        assert DocumentLifecycle.state(self.document) is DocumentState.LOCKED
        assert self.s1.signed is True
        assert self.s2.signed is False
        assert self.document.reopened is False
        assert AuditEvent.query.count() == 0

    def test_reopen_unsigned_document(self, factory):
        document = factory.document()

        state = DocumentLifecycle.reopen_to_edit(document, actor_id=self.user.id, justification='abc')

        assert state is DocumentState.REOPENED
        assert document.justification == 'abc'
