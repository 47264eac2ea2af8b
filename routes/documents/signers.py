# routes/documents/signers.py
"""
Document signer management routes.

Signer changes are allowed on signed documents: late signers can be
added, and removing a signer drops their signature with them.
"""

from flask import current_app, jsonify, request
from flask_login import login_required, current_user
from sqlalchemy.exc import IntegrityError
from models import db, DocumentRole
from services.documents import MembershipOutcome
from . import documents_bp
from .decorators import document_required
from .helpers import outcome_response, signer_to_dict, request_value, user_to_dict


# =============================================================================
# SIGNERS MANAGEMENT
# =============================================================================

@documents_bp.route('/<int:id>/signers')
@login_required
@document_required
def list_signers(document):
    """List the signers of a document with their signature status."""
    signers = document.signers.all(document)
    return jsonify({
        'success': True,
        'signers': [signer_to_dict(s) for s in signers]
    })


@documents_bp.route('/<int:id>/signers/lookup')
@login_required
@document_required
def lookup_signer(document):
    """Check a CPF before adding it as a signer."""
    result = document.signers.lookup(document, request.args.get('cpf', ''))

    payload = {}
    if result.identity is not None:
        payload['user'] = user_to_dict(result.identity)
    if result.party is not None:
        payload['signer'] = signer_to_dict(result.party)
    return outcome_response(result.outcome, 'Signer', **payload)


@documents_bp.route('/<int:id>/signers/search')
@login_required
@document_required
def search_signers(document):
    """Search department users who are not signers yet."""
    users = document.signers.search(
        document,
        request.args.get('q', ''),
        limit=current_app.config.get('PARTY_SEARCH_LIMIT')
    )
    return jsonify({'success': True, 'users': [user_to_dict(u) for u in users]})


@documents_bp.route('/<int:id>/signers', methods=['POST'])
@login_required
@document_required
def add_signer(document):
    """Add a signer to a document by CPF, optionally with a document role."""
    document_role = None
    document_role_id = request_value('document_role_id')
    if document_role_id:
        document_role = db.session.get(DocumentRole, int(document_role_id))
        if document_role is None:
            return jsonify({'success': False, 'error': 'Document role not found'}), 400

    try:
        outcome = document.signers.add(
            document,
            request_value('cpf'),
            actor_id=current_user.id,
            document_role=document_role
        )
        if outcome.ok:
            db.session.commit()
        return outcome_response(outcome, 'Signer')

    except IntegrityError:
        db.session.rollback()
        return outcome_response(MembershipOutcome.ALREADY_EXISTS, 'Signer')
    except Exception as e:
        db.session.rollback()
        return jsonify({'success': False, 'error': str(e)}), 500


@documents_bp.route('/<int:id>/signers/<cpf>', methods=['DELETE'])
@login_required
@document_required
def remove_signer(document, cpf):
    """Remove a signer from a document."""
    try:
        outcome = document.signers.remove(document, cpf, actor_id=current_user.id)
        if outcome.ok:
            db.session.commit()
        return outcome_response(outcome, 'Signer')

    except Exception as e:
        db.session.rollback()
        return jsonify({'success': False, 'error': str(e)}), 500
