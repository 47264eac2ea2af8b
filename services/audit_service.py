"""
Audit Service - who changed a document's parties, and when.

Every party add/remove, signature and reopen-to-edit request writes one
AuditEvent row into the caller's session. Nothing here commits: the event
lands together with the change it describes, or not at all.
"""

from flask import has_request_context, request
from flask_login import current_user
from models import AuditEvent

USER_AGENT_MAX_LENGTH = 500


def request_origin():
    """
    Client address and browser for the request being served.

    Returns (None, None) when called from a CLI command or a test without a
    request, e.g. while seeding documents.
    """
    if not has_request_context():
        return None, None

    # First hop of X-Forwarded-For is the client
    forwarded_for = request.headers.get('X-Forwarded-For', '')
    ip_address = forwarded_for.split(',')[0].strip() or request.remote_addr
    user_agent = request.headers.get('User-Agent', '')[:USER_AGENT_MAX_LENGTH]
    return ip_address, user_agent


def acting_user_id():
    """ID of the logged-in user making the change, if any."""
    if has_request_context() and current_user.is_authenticated:
        return current_user.id
    return None


def log_event(event_type, document_id=None, description=None, event_data=None,
              source='app', actor_id=None):
    """
    Record one document event.

    actor_id falls back to the logged-in user; pass it explicitly from
    services called outside a request. `source` tells interactive changes
    ('app') apart from scripted ones ('system').
    """
    ip_address, user_agent = request_origin()

    if actor_id is None:
        actor_id = acting_user_id()

    return AuditEvent.log(
        event_type=event_type,
        document_id=document_id,
        actor_id=actor_id,
        description=description,
        event_data=event_data or {},
        source=source,
        ip_address=ip_address,
        user_agent=user_agent
    )


# =============================================================================
# PARTY EVENTS
# =============================================================================

_ADDED = {
    'signer': AuditEvent.SIGNER_ADDED,
    'recipient': AuditEvent.RECIPIENT_ADDED,
}
_REMOVED = {
    'signer': AuditEvent.SIGNER_REMOVED,
    'recipient': AuditEvent.RECIPIENT_REMOVED,
}


def log_party_added(document, role, user, actor_id=None):
    """Log when a signer or recipient is added to a document."""
    return log_event(
        event_type=_ADDED[role],
        document_id=document.id,
        description=f"Added {role}: {user.name}",
        event_data={
            'role': role,
            'user_id': user.id,
            'name': user.name,
            'cpf': user.cpf
        },
        actor_id=actor_id
    )


def log_party_removed(document, role, user, actor_id=None, was_signed=False):
    """Log when a signer or recipient is removed from a document."""
    return log_event(
        event_type=_REMOVED[role],
        document_id=document.id,
        description=f"Removed {role}: {user.name}",
        event_data={
            'role': role,
            'user_id': user.id,
            'name': user.name,
            'cpf': user.cpf,
            'was_signed': was_signed
        },
        actor_id=actor_id
    )


# =============================================================================
# SIGNATURE EVENTS
# =============================================================================

def log_document_signed(document, signer, actor_id=None):
    """Log when a signer completes their signature."""
    return log_event(
        event_type=AuditEvent.DOCUMENT_SIGNED,
        document_id=document.id,
        description=f"Signed by {signer.user.name}",
        event_data={
            'signer_id': signer.id,
            'user_id': signer.user_id,
            'signed_at': signer.signed_at.isoformat() if signer.signed_at else None
        },
        actor_id=actor_id if actor_id is not None else signer.user_id
    )


def log_document_reopened(document, cleared_signer_ids, actor_id=None):
    """Log when a signed document is reopened for editing."""
    return log_event(
        event_type=AuditEvent.DOCUMENT_REOPENED,
        document_id=document.id,
        description="Document reopened to edit",
        event_data={
            'justification': document.justification,
            'cleared_signer_ids': cleared_signer_ids,
            'reopened_at': document.last_reopened_at.isoformat() if document.last_reopened_at else None
        },
        actor_id=actor_id
    )
