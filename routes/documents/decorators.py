# routes/documents/decorators.py
"""
Shared decorators for document routes.
"""

from functools import wraps
from flask import jsonify
from models import Document
from services.documents import DocumentLifecycle, DocumentLockedError


def document_required(f):
    """Decorator to load the document named by the `id` URL variable."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        document = Document.query.get_or_404(kwargs.pop('id'))
        return f(document, *args, **kwargs)
    return decorated_function


def unlocked_document_required(f):
    """Decorator to reject changes to a document someone already signed."""
    @wraps(f)
    def decorated_function(document, *args, **kwargs):
        try:
            DocumentLifecycle.ensure_editable(document)
        except DocumentLockedError:
            return jsonify({
                'success': False,
                'code': 'document_locked',
                'error': 'This document has signatures. Reopen it to make changes.'
            }), 409
        return f(document, *args, **kwargs)
    return decorated_function
