# routes/documents/__init__.py
"""
Document Routes Package
JSON endpoints over the document lifecycle and party services.

This package splits the document routes into logical modules:
- crud.py: Document create, update, delete
- recipients.py: Recipient management (list, lookup, search, add, remove)
- signers.py: Signer management (list, lookup, search, add, remove)
- lifecycle.py: Status, signing and reopen-to-edit
"""

from flask import Blueprint

# Create the blueprint - all sub-modules will register routes on this
documents_bp = Blueprint('documents', __name__, url_prefix='/documents')

# Import all route modules AFTER blueprint creation
# Each module imports documents_bp and registers routes on it
from . import crud
from . import recipients
from . import signers
from . import lifecycle
