"""
Document System Type Definitions

Enums and small result objects shared by the lifecycle and
party-management services.
"""

from dataclasses import dataclass
from typing import Any, List, Optional
from enum import Enum


class PartyRole(Enum):
    """Role a party plays on a document."""
    SIGNER = "signer"
    RECIPIENT = "recipient"


class DocumentState(Enum):
    """Editability state derived from the signature flags."""
    OPEN = "open"
    LOCKED = "locked"
    REOPENED = "reopened"


class MembershipOutcome(Enum):
    """
    Result codes returned by party and signature operations.

    The presentation layer maps these to user-facing messages.
    """
    SUCCESS = "success"
    ALREADY_EXISTS = "already_exists"
    IDENTITY_NOT_FOUND = "identity_not_found"
    NOT_FOUND = "not_found"

    @property
    def ok(self) -> bool:
        return self is MembershipOutcome.SUCCESS


@dataclass(frozen=True)
class VariablesResult:
    """
    Outcome of validating a variables value.

    Attributes:
        value: Normalized list of {name, identifier} dicts (None when invalid)
        error: Error code ('not_an_array' or 'invalid'), None when valid
    """
    value: Optional[List[dict]] = None
    error: Optional[str] = None

    @property
    def is_valid(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class LookupResult:
    """
    Non-mutating answer to "what would adding this identifier do?".

    Attributes:
        outcome: ALREADY_EXISTS, IDENTITY_NOT_FOUND or SUCCESS
        identity: The resolved user when the outcome is SUCCESS
        party: The existing party when the outcome is ALREADY_EXISTS
    """
    outcome: MembershipOutcome
    identity: Any = None
    party: Any = None
