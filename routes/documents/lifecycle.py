# routes/documents/lifecycle.py
"""
Document signing and reopen-to-edit routes.
"""

from flask import jsonify
from flask_login import login_required, current_user
from models import db
from services.documents import DocumentLifecycle, SignatureTracker, ValidationError
from . import documents_bp
from .decorators import document_required
from .helpers import outcome_response, request_value


@documents_bp.route('/<int:id>/status')
@login_required
@document_required
def document_status(document):
    """Report the lifecycle state of a document."""
    return jsonify({
        'success': True,
        'state': DocumentLifecycle.state(document).value,
        'editable': DocumentLifecycle.is_editable(document),
        'reopened': document.reopened,
        'justification': document.justification,
        'last_reopened_at': document.last_reopened_at.isoformat() if document.last_reopened_at else None
    })


@documents_bp.route('/<int:id>/sign', methods=['POST'])
@login_required
@document_required
def sign_document(document):
    """Sign the document as the current user."""
    try:
        outcome = SignatureTracker.mark_signed(document, current_user.id)
        if outcome.ok:
            db.session.commit()
        return outcome_response(outcome, 'Signer')

    except Exception as e:
        db.session.rollback()
        return jsonify({'success': False, 'error': str(e)}), 500


@documents_bp.route('/<int:id>/reopen', methods=['PATCH'])
@login_required
@document_required
def reopen_document(document):
    """Reopen a signed document for editing. Requires a justification."""
    try:
        state = DocumentLifecycle.reopen_to_edit(
            document,
            actor_id=current_user.id,
            justification=request_value('justification')
        )
        db.session.commit()
        return jsonify({'success': True, 'state': state.value})

    except ValidationError as e:
        db.session.rollback()
        return jsonify({'success': False, 'error': str(e), 'errors': e.to_dict()}), 400
    except Exception as e:
        db.session.rollback()
        return jsonify({'success': False, 'error': str(e)}), 500
