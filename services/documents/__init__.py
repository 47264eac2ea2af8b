"""
Document Signature System

Lifecycle and party management for documents that need signatures.
Signers must sign; recipients are granted access. Once anyone signs, the
document is locked until it is reopened with a justification.

Usage:
    from services.documents import DocumentLifecycle, MembershipOutcome

    outcome = document.recipients.add(document, cpf)
    if outcome is MembershipOutcome.IDENTITY_NOT_FOUND:
        ...

    DocumentLifecycle.ensure_editable(document)
    DocumentLifecycle.reopen_to_edit(document, actor_id=user.id, justification='fix typo')
"""

from .types import (
    PartyRole,
    DocumentState,
    MembershipOutcome,
    VariablesResult,
    LookupResult
)

from .exceptions import (
    DocumentError,
    ValidationError,
    VariablesParseError,
    DocumentLockedError
)

from .variables import VariablesValidator
from .party_directory import PartyDirectory
from .membership import MembershipManager, PartyStore, SignerStore, RecipientStore
from .signature_tracker import SignatureTracker
from .lifecycle import DocumentLifecycle
from utils import normalize_cpf

__all__ = [
    # Types
    'PartyRole',
    'DocumentState',
    'MembershipOutcome',
    'VariablesResult',
    'LookupResult',

    # Exceptions
    'DocumentError',
    'ValidationError',
    'VariablesParseError',
    'DocumentLockedError',

    # Services
    'VariablesValidator',
    'PartyDirectory',
    'normalize_cpf',
    'MembershipManager',
    'PartyStore',
    'SignerStore',
    'RecipientStore',
    'SignatureTracker',
    'DocumentLifecycle',
]
