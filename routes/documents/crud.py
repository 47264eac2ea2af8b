# routes/documents/crud.py
"""
Document CRUD routes (create, update, delete).
"""

from flask import jsonify
from flask_login import login_required, current_user
from models import db, Department, Document
from services.documents import VariablesParseError
from . import documents_bp
from .decorators import document_required, unlocked_document_required
from .helpers import request_value

EDITABLE_FIELDS = ('title', 'content', 'category')


def _document_to_dict(document):
    return {
        'id': document.id,
        'title': document.title,
        'content': document.content,
        'category': document.category,
        'variables': document.variables,
        'department_id': document.department_id,
        'reopened': document.reopened
    }


def _apply_changes(document):
    """Copy submitted fields onto the document and validate it."""
    for field in EDITABLE_FIELDS:
        value = request_value(field)
        if value is not None:
            setattr(document, field, value)

    variables = request_value('variables')
    if variables is not None:
        document.assign_variables(variables)

    return document.validate()


# =============================================================================
# DOCUMENT CREATE / UPDATE / DELETE
# =============================================================================

@documents_bp.route('/', methods=['POST'])
@login_required
def create_document():
    """Create a document in one of the user's departments."""
    try:
        department_id = int(request_value('department_id') or 0)
    except (TypeError, ValueError):
        department_id = None

    department = db.session.get(Department, department_id) if department_id else None
    if department is None:
        return jsonify({'success': False, 'error': 'Department not found'}), 400

    document = Document(department=department, creator_user_id=current_user.id)

    try:
        errors = _apply_changes(document)
    except VariablesParseError as e:
        return jsonify({'success': False, 'code': 'malformed_variables', 'error': str(e)}), 400

    if errors:
        return jsonify({'success': False, 'errors': errors}), 422

    try:
        db.session.add(document)
        db.session.commit()
        return jsonify({'success': True, 'document': _document_to_dict(document)}), 201
    except Exception as e:
        db.session.rollback()
        return jsonify({'success': False, 'error': str(e)}), 500


@documents_bp.route('/<int:id>', methods=['PATCH'])
@login_required
@document_required
@unlocked_document_required
def update_document(document):
    """Edit a document that nobody has signed."""
    try:
        errors = _apply_changes(document)
    except VariablesParseError as e:
        db.session.rollback()
        return jsonify({'success': False, 'code': 'malformed_variables', 'error': str(e)}), 400

    if errors:
        db.session.rollback()
        return jsonify({'success': False, 'errors': errors}), 422

    try:
        db.session.commit()
        return jsonify({'success': True, 'document': _document_to_dict(document)})
    except Exception as e:
        db.session.rollback()
        return jsonify({'success': False, 'error': str(e)}), 500


@documents_bp.route('/<int:id>', methods=['DELETE'])
@login_required
@document_required
@unlocked_document_required
def delete_document(document):
    """Delete an unsigned document along with its signers and recipients."""
    try:
        db.session.delete(document)
        db.session.commit()
        return jsonify({'success': True})
    except Exception as e:
        db.session.rollback()
        return jsonify({'success': False, 'error': str(e)}), 500
