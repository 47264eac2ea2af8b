"""
Shared fixtures: an application bound to an in-memory database and a
small factory for users, departments, documents and parties.
"""

import itertools
import sys
from pathlib import Path

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from flask_login import FlaskLoginClient

from app import create_app
from models import (
    db, User, Department, DepartmentUser, Document, DocumentRole,
    DocumentSigner, DocumentRecipient
)


class Factory:
    """Creates and commits model instances with unique defaults."""

    def __init__(self):
        self._sequence = itertools.count(1)

    def user(self, name=None, cpf=None, department=None, role='collaborator'):
        n = next(self._sequence)
        user = User(
            name=name or f'User {n}',
            cpf=cpf or f'{n:011d}',
            email=f'user{n}@example.com',
            register_number=f'R{n:05d}'
        )
        db.session.add(user)
        if department is not None:
            db.session.add(DepartmentUser(department=department, user=user, role=role))
        db.session.commit()
        return user

    def department(self, name=None):
        department = Department(name=name or f'Department {next(self._sequence)}')
        db.session.add(department)
        db.session.commit()
        return department

    def document_role(self, name=None):
        document_role = DocumentRole(name=name or f'Role {next(self._sequence)}')
        db.session.add(document_role)
        db.session.commit()
        return document_role

    def document(self, department=None, creator=None, title=None, category='declaration'):
        department = department or self.department()
        creator = creator or self.user(department=department)
        document = Document(
            title=title or f'Document {next(self._sequence)}',
            content='Content of the document',
            category=category,
            department=department,
            creator_user=creator
        )
        db.session.add(document)
        db.session.commit()
        return document

    def signer(self, document, user=None, signed=False, document_role=None):
        user = user or self.user(department=document.department)
        signer = DocumentSigner(document=document, user=user, signed=signed,
                                document_role=document_role)
        db.session.add(signer)
        db.session.commit()
        return signer

    def recipient(self, document, user=None):
        user = user or self.user(department=document.department)
        recipient = DocumentRecipient(document=document, user=user, cpf=user.cpf)
        db.session.add(recipient)
        db.session.commit()
        return recipient


@pytest.fixture
def app():
    """Application with fresh tables for each test."""
    app = create_app('config.TestConfig')
    app.test_client_class = FlaskLoginClient

    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def factory(app):
    return Factory()
