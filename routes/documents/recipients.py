# routes/documents/recipients.py
"""
Document recipient management routes.
"""

from flask import current_app, jsonify, request
from flask_login import login_required, current_user
from sqlalchemy.exc import IntegrityError
from models import db
from services.documents import DocumentLifecycle, MembershipOutcome
from . import documents_bp
from .decorators import document_required, unlocked_document_required
from .helpers import outcome_response, recipient_to_dict, request_value, user_to_dict


# =============================================================================
# RECIPIENTS MANAGEMENT
# =============================================================================

@documents_bp.route('/<int:id>/recipients')
@login_required
@document_required
def list_recipients(document):
    """List the recipients of a document."""
    recipients = document.recipients.all(document)
    return jsonify({
        'success': True,
        'recipients': [recipient_to_dict(r) for r in recipients],
        'document_has_signature': not DocumentLifecycle.is_editable(document)
    })


@documents_bp.route('/<int:id>/recipients/lookup')
@login_required
@document_required
@unlocked_document_required
def lookup_recipient(document):
    """Check a CPF before adding it as a recipient."""
    result = document.recipients.lookup(document, request.args.get('cpf', ''))

    payload = {}
    if result.identity is not None:
        payload['user'] = user_to_dict(result.identity)
    if result.party is not None:
        payload['recipient'] = recipient_to_dict(result.party)
    return outcome_response(result.outcome, 'Recipient', **payload)


@documents_bp.route('/<int:id>/recipients/search')
@login_required
@document_required
@unlocked_document_required
def search_recipients(document):
    """Search department users who are not recipients yet."""
    users = document.recipients.search(
        document,
        request.args.get('q', ''),
        limit=current_app.config.get('PARTY_SEARCH_LIMIT')
    )
    return jsonify({'success': True, 'users': [user_to_dict(u) for u in users]})


@documents_bp.route('/<int:id>/recipients', methods=['POST'])
@login_required
@document_required
@unlocked_document_required
def add_recipient(document):
    """Add a recipient to a document by CPF."""
    try:
        outcome = document.recipients.add(document, request_value('cpf'), actor_id=current_user.id)
        if outcome.ok:
            db.session.commit()
        return outcome_response(outcome, 'Recipient')

    except IntegrityError:
        # Concurrent add of the same CPF won the race
        db.session.rollback()
        return outcome_response(MembershipOutcome.ALREADY_EXISTS, 'Recipient')
    except Exception as e:
        db.session.rollback()
        return jsonify({'success': False, 'error': str(e)}), 500


@documents_bp.route('/<int:id>/recipients/<cpf>', methods=['DELETE'])
@login_required
@document_required
@unlocked_document_required
def remove_recipient(document, cpf):
    """Remove a recipient from a document."""
    try:
        outcome = document.recipients.remove(document, cpf, actor_id=current_user.id)
        if outcome.ok:
            db.session.commit()
        return outcome_response(outcome, 'Recipient')

    except Exception as e:
        db.session.rollback()
        return jsonify({'success': False, 'error': str(e)}), 500
