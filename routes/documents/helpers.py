# routes/documents/helpers.py
"""
Shared helper functions for document routes.
"""

from flask import jsonify, request
from services.documents import MembershipOutcome

OUTCOME_STATUS = {
    MembershipOutcome.SUCCESS: 200,
    MembershipOutcome.ALREADY_EXISTS: 409,
    MembershipOutcome.IDENTITY_NOT_FOUND: 404,
    MembershipOutcome.NOT_FOUND: 404,
}

OUTCOME_MESSAGES = {
    MembershipOutcome.ALREADY_EXISTS: '{resource} is already on this document.',
    MembershipOutcome.IDENTITY_NOT_FOUND: 'No user found with this CPF.',
    MembershipOutcome.NOT_FOUND: '{resource} not found on this document.',
}


def outcome_response(outcome, resource, **payload):
    """Map a MembershipOutcome to a JSON response."""
    body = {'success': outcome.ok, 'code': outcome.value}
    if not outcome.ok:
        body['error'] = OUTCOME_MESSAGES[outcome].format(resource=resource)
    body.update(payload)
    return jsonify(body), OUTCOME_STATUS[outcome]


def user_to_dict(user):
    return {
        'id': user.id,
        'name': user.name,
        'cpf': user.cpf,
        'email': user.email
    }


def signer_to_dict(signer):
    return {
        'id': signer.id,
        'user': user_to_dict(signer.user),
        'document_role': signer.document_role.name if signer.document_role else None,
        'signed': signer.signed,
        'signed_at': signer.signed_at.isoformat() if signer.signed_at else None
    }


def recipient_to_dict(recipient):
    return {
        'id': recipient.id,
        'user': user_to_dict(recipient.user),
        'cpf': recipient.cpf
    }


def request_value(name, default=None):
    """Read a parameter from form data or a JSON object body."""
    if name in request.form:
        return request.form.get(name)
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return default
    return data.get(name, default)
