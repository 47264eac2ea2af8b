"""
Membership Manager

Add/remove/search for the parties attached to a document.

Signers and recipients share the same algorithm; what differs is where
they are stored. Each role gets a PartyStore, and a MembershipManager is
built from a PartyRole plus its store:

    manager = MembershipManager(PartyRole.RECIPIENT, RecipientStore())
    outcome = manager.add(document, '12345678900')

Documents expose ready-made managers as `document.signers` and
`document.recipients`.
"""

import logging
from typing import List, Optional

from sqlalchemy import func

from models import db, User, DocumentSigner, DocumentRecipient
from services import audit_service
from utils import normalize_cpf
from .party_directory import PartyDirectory
from .types import LookupResult, MembershipOutcome, PartyRole

logger = logging.getLogger(__name__)


# =============================================================================
# STORAGE ACCESSORS
# =============================================================================

class PartyStore:
    """
    Storage accessor for one party role.

    Subclasses set `model` and `collection_name` and implement find/create.
    All writes are flushed into the current session; the caller commits.
    """

    model = None
    collection_name = None

    def collection(self, document):
        return getattr(document, self.collection_name)

    def find(self, document, cpf: str):
        raise NotImplementedError

    def create(self, document, user, **attributes):
        raise NotImplementedError

    def delete(self, document, party) -> None:
        collection = self.collection(document)
        if party in collection:
            # delete-orphan cascade removes the row on flush
            collection.remove(party)
        else:
            db.session.delete(party)
        db.session.flush()

    def member_user_ids(self, document):
        return db.select(self.model.user_id).where(self.model.document_id == document.id)

    def all(self, document) -> list:
        return (self.model.query
                .filter_by(document_id=document.id)
                .order_by(self.model.id)
                .all())


class SignerStore(PartyStore):
    model = DocumentSigner
    collection_name = 'document_signers'

    def find(self, document, cpf: str) -> Optional[DocumentSigner]:
        return (DocumentSigner.query
                .join(User, DocumentSigner.user_id == User.id)
                .filter(DocumentSigner.document_id == document.id, User.cpf == cpf)
                .first())

    def create(self, document, user, document_role=None, **attributes) -> DocumentSigner:
        signer = DocumentSigner(user=user, document_role=document_role, signed=False)
        self.collection(document).append(signer)
        db.session.add(signer)
        db.session.flush()
        return signer


class RecipientStore(PartyStore):
    model = DocumentRecipient
    collection_name = 'document_recipients'

    def find(self, document, cpf: str) -> Optional[DocumentRecipient]:
        # Match the identity's current CPF; the copied column may be stale
        return (DocumentRecipient.query
                .join(User, DocumentRecipient.user_id == User.id)
                .filter(DocumentRecipient.document_id == document.id, User.cpf == cpf)
                .first())

    def create(self, document, user, **attributes) -> DocumentRecipient:
        recipient = DocumentRecipient(user=user, cpf=user.cpf)
        self.collection(document).append(recipient)
        db.session.add(recipient)
        db.session.flush()
        return recipient


# =============================================================================
# MANAGER
# =============================================================================

class MembershipManager:
    """
    Role-parameterized party management for a document.

    Operations return MembershipOutcome codes instead of raising; a missing
    identity or party is an ordinary result the caller branches on.
    """

    def __init__(self, role: PartyRole, store: PartyStore, directory=PartyDirectory):
        self.role = role
        self.store = store
        self.directory = directory

    def __repr__(self):
        return f'<MembershipManager {self.role.value}>'

    def all(self, document) -> list:
        """Parties of this role attached to the document, oldest first."""
        return self.store.all(document)

    def find(self, document, external_id: str):
        cpf = normalize_cpf(external_id)
        if not cpf:
            return None
        return self.store.find(document, cpf)

    def lookup(self, document, external_id: str) -> LookupResult:
        """Report what add() would do, without changing anything."""
        party = self.find(document, external_id)
        if party is not None:
            return LookupResult(MembershipOutcome.ALREADY_EXISTS, party=party)

        user = self.directory.resolve(external_id)
        if user is None:
            return LookupResult(MembershipOutcome.IDENTITY_NOT_FOUND)

        return LookupResult(MembershipOutcome.SUCCESS, identity=user)

    def add(self, document, external_id: str, actor_id=None, **attributes) -> MembershipOutcome:
        """
        Attach the person identified by `external_id` to the document.

        Returns:
            ALREADY_EXISTS if they are already attached in this role,
            IDENTITY_NOT_FOUND if the directory has no match,
            SUCCESS once the party is created
        """
        if self.find(document, external_id) is not None:
            logger.info(f"{self.role.value} {external_id} already on document {document.id}")
            return MembershipOutcome.ALREADY_EXISTS

        user = self.directory.resolve(external_id)
        if user is None:
            logger.warning(f"Cannot add {self.role.value} to document {document.id}: "
                           f"no user for {external_id!r}")
            return MembershipOutcome.IDENTITY_NOT_FOUND

        self.store.create(document, user, **attributes)
        audit_service.log_party_added(document, self.role.value, user, actor_id=actor_id)

        logger.info(f"Added {self.role.value} user={user.id} to document {document.id}")
        return MembershipOutcome.SUCCESS

    def remove(self, document, external_id: str, actor_id=None) -> MembershipOutcome:
        """
        Detach the party identified by `external_id`.

        Signed signers may be removed; their signature goes with them.
        """
        party = self.find(document, external_id)
        if party is None:
            logger.warning(f"Cannot remove {self.role.value} {external_id!r}: "
                           f"not on document {document.id}")
            return MembershipOutcome.NOT_FOUND

        user = party.user
        was_signed = bool(getattr(party, 'signed', False))

        self.store.delete(document, party)
        audit_service.log_party_removed(document, self.role.value, user,
                                        actor_id=actor_id, was_signed=was_signed)

        logger.info(f"Removed {self.role.value} user={user.id} from document {document.id}")
        return MembershipOutcome.SUCCESS

    def search(self, document, query: str = '', limit: Optional[int] = None) -> List[User]:
        """
        Eligible candidates for this role, for the add-party lookahead.

        Candidates are the department's users not already attached in this
        role, filtered by a case-insensitive substring of their name and
        ordered by (name, id).
        """
        candidates = self.directory.eligible_candidates(document).filter(
            ~User.id.in_(self.store.member_user_ids(document))
        )

        query = (query or '').strip()
        if query:
            candidates = candidates.filter(
                func.lower(User.name).contains(query.lower(), autoescape=True)
            )

        candidates = candidates.order_by(User.name, User.id)
        if limit:
            candidates = candidates.limit(limit)

        return candidates.all()
