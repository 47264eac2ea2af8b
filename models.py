# models.py
from flask_sqlalchemy import SQLAlchemy
from flask_login import UserMixin
from datetime import datetime
from sqlalchemy import func
from sqlalchemy.orm import validates
from utils import normalize_cpf

db = SQLAlchemy()


class User(UserMixin, db.Model):
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    cpf = db.Column(db.String(14), unique=True, nullable=False, index=True)
    email = db.Column(db.String(120), unique=True, nullable=False)
    register_number = db.Column(db.String(20))
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    # Labels used when building the default template variables
    HUMAN_ATTRIBUTE_NAMES = {
        'name': 'Name',
        'cpf': 'CPF',
        'email': 'Email',
        'register_number': 'Register number',
    }

    @classmethod
    def human_attribute_name(cls, attribute):
        return cls.HUMAN_ATTRIBUTE_NAMES.get(attribute, attribute.replace('_', ' ').capitalize())

    @validates('cpf')
    def validate_cpf(self, key, cpf):
        """Store CPFs without punctuation so lookups compare like with like."""
        return normalize_cpf(cpf)

    def __repr__(self):
        return f'<User {self.name}>'


class Department(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), unique=True, nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    members = db.relationship('DepartmentUser', backref='department', lazy=True,
                              cascade='all, delete-orphan')


class DepartmentUser(db.Model):
    __tablename__ = 'department_user'
    __table_args__ = (db.UniqueConstraint('department_id', 'user_id'),)

    ROLES = ('responsible', 'collaborator')

    id = db.Column(db.Integer, primary_key=True)
    department_id = db.Column(db.Integer, db.ForeignKey('department.id', ondelete='CASCADE'), nullable=False)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id', ondelete='CASCADE'), nullable=False)
    role = db.Column(db.String(20), nullable=False, default='collaborator')

    user = db.relationship('User', backref=db.backref('department_users', lazy=True))


class DocumentRole(db.Model):
    """Label a signer signs as (e.g. 'Coordinator', 'Director')."""
    __tablename__ = 'document_role'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(80), unique=True, nullable=False)


class Document(db.Model):
    CATEGORIES = {
        'declaration': 'Declaration',
        'certification': 'Certification',
    }
    DEFAULT_VARIABLES = ('name', 'cpf', 'email', 'register_number')

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(255), nullable=False)
    content = db.Column(db.Text, nullable=False)
    category = db.Column(db.String(20), nullable=False)
    variables = db.Column(db.JSON, nullable=False, default=list)
    department_id = db.Column(db.Integer, db.ForeignKey('department.id'), nullable=False)
    creator_user_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False)

    # Reopen audit trail
    reopened = db.Column(db.Boolean, nullable=False, default=False)
    justification = db.Column(db.Text)
    last_reopened_by_user_id = db.Column(db.Integer, db.ForeignKey('user.id', ondelete='SET NULL'))
    last_reopened_at = db.Column(db.DateTime)

    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow,
                           onupdate=datetime.utcnow)

    department = db.relationship('Department', backref=db.backref('documents', lazy=True))
    creator_user = db.relationship('User', foreign_keys=[creator_user_id])
    last_reopened_by = db.relationship('User', foreign_keys=[last_reopened_by_user_id])

    document_signers = db.relationship('DocumentSigner', backref='document', lazy=True,
                                       cascade='all, delete-orphan',
                                       order_by='DocumentSigner.id')
    document_recipients = db.relationship('DocumentRecipient', backref='document', lazy=True,
                                          cascade='all, delete-orphan',
                                          order_by='DocumentRecipient.id')

    def __init__(self, **kwargs):
        kwargs.setdefault('variables', [])
        kwargs.setdefault('reopened', False)
        super().__init__(**kwargs)

    def __repr__(self):
        return f'<Document {self.title[:30] if self.title else self.id}>'

    # -------------------------------------------------------------------------
    # Party collections
    # -------------------------------------------------------------------------

    @property
    def signers(self):
        """Membership manager for the signers of this document."""
        from services.documents.membership import MembershipManager, SignerStore
        from services.documents.types import PartyRole
        return MembershipManager(PartyRole.SIGNER, SignerStore())

    @property
    def recipients(self):
        """Membership manager for the recipients of this document."""
        from services.documents.membership import MembershipManager, RecipientStore
        from services.documents.types import PartyRole
        return MembershipManager(PartyRole.RECIPIENT, RecipientStore())

    def someone_signed(self):
        from services.documents.signature_tracker import SignatureTracker
        return SignatureTracker.has_any_signed(self)

    def is_editable(self):
        from services.documents.lifecycle import DocumentLifecycle
        return DocumentLifecycle.is_editable(self)

    def reopen_to_edit(self, actor_id, justification):
        from services.documents.lifecycle import DocumentLifecycle
        return DocumentLifecycle.reopen_to_edit(self, actor_id, justification)

    # -------------------------------------------------------------------------
    # Variables and validation
    # -------------------------------------------------------------------------

    def assign_variables(self, raw):
        """
        Decode and store a candidate variables value.

        Raises VariablesParseError for a malformed JSON string; shape problems
        are reported later by validate().
        """
        from services.documents.variables import VariablesValidator
        self.variables = VariablesValidator.parse(raw)

    def default_variables(self):
        return [
            {'name': User.human_attribute_name(attribute), 'identifier': attribute}
            for attribute in self.DEFAULT_VARIABLES
        ]

    def validate(self):
        """
        Collect field-level errors as {field: [code, ...]}.

        When the variables are valid they are replaced by their normalized form.
        """
        from services.documents.variables import VariablesValidator

        errors = {}
        if not (self.title or '').strip():
            errors.setdefault('title', []).append('blank')
        if not (self.content or '').strip():
            errors.setdefault('content', []).append('blank')
        if self.category not in self.CATEGORIES:
            errors.setdefault('category', []).append('inclusion')

        result = VariablesValidator.validate(self.variables)
        if result.is_valid:
            self.variables = result.value
        else:
            errors.setdefault('variables', []).append(result.error)

        return errors

    def is_valid(self):
        return not self.validate()

    @classmethod
    def human_categories(cls):
        """Map display label -> stored category value."""
        return {label: value for value, label in cls.CATEGORIES.items()}

    @classmethod
    def search(cls, term=''):
        """Case-insensitive title search; an empty term matches every document."""
        query = cls.query
        if term:
            query = query.filter(func.lower(cls.title).contains(term.lower(), autoescape=True))
        return query.order_by(cls.title, cls.id)


class DocumentSigner(db.Model):
    __tablename__ = 'document_signer'
    __table_args__ = (db.UniqueConstraint('document_id', 'user_id', name='uq_document_signer_user'),)

    id = db.Column(db.Integer, primary_key=True)
    document_id = db.Column(db.Integer, db.ForeignKey('document.id', ondelete='CASCADE'), nullable=False)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False)
    document_role_id = db.Column(db.Integer, db.ForeignKey('document_role.id'))
    signed = db.Column(db.Boolean, nullable=False, default=False)
    signed_at = db.Column(db.DateTime)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    user = db.relationship('User', backref=db.backref('document_signers', lazy=True))
    document_role = db.relationship('DocumentRole')

    def __init__(self, **kwargs):
        kwargs.setdefault('signed', False)
        super().__init__(**kwargs)

    @property
    def cpf(self):
        return self.user.cpf if self.user else None

    def sign(self):
        if not self.signed:
            self.signed = True
            self.signed_at = datetime.utcnow()

    def __repr__(self):
        return f'<DocumentSigner document={self.document_id} user={self.user_id} signed={self.signed}>'


class DocumentRecipient(db.Model):
    __tablename__ = 'document_recipient'
    __table_args__ = (db.UniqueConstraint('document_id', 'user_id', name='uq_document_recipient_user'),)

    id = db.Column(db.Integer, primary_key=True)
    document_id = db.Column(db.Integer, db.ForeignKey('document.id', ondelete='CASCADE'), nullable=False)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False)
    cpf = db.Column(db.String(14), nullable=False, index=True)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    user = db.relationship('User', backref=db.backref('document_recipients', lazy=True))

    @validates('cpf')
    def validate_cpf(self, key, cpf):
        """Store CPFs without punctuation so lookups compare like with like."""
        return normalize_cpf(cpf)

    def __repr__(self):
        return f'<DocumentRecipient document={self.document_id} cpf={self.cpf}>'


class AuditEvent(db.Model):
    """Append-only trail of party and signature changes on documents."""
    __tablename__ = 'audit_events'

    SIGNER_ADDED = 'signer_added'
    SIGNER_REMOVED = 'signer_removed'
    RECIPIENT_ADDED = 'recipient_added'
    RECIPIENT_REMOVED = 'recipient_removed'
    DOCUMENT_SIGNED = 'document_signed'
    DOCUMENT_REOPENED = 'document_reopened'

    id = db.Column(db.Integer, primary_key=True)
    event_type = db.Column(db.String(50), nullable=False, index=True)
    document_id = db.Column(db.Integer, db.ForeignKey('document.id', ondelete='SET NULL'), index=True)
    actor_id = db.Column(db.Integer, db.ForeignKey('user.id', ondelete='SET NULL'))
    description = db.Column(db.Text)
    event_data = db.Column(db.JSON, nullable=False, default=dict)
    source = db.Column(db.String(20), nullable=False, default='app')
    ip_address = db.Column(db.String(45))
    user_agent = db.Column(db.String(500))
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    actor = db.relationship('User')

    @classmethod
    def log(cls, event_type, document_id=None, actor_id=None, description=None,
            event_data=None, source='app', ip_address=None, user_agent=None):
        """Create an event in the current session; the caller commits."""
        event = cls(
            event_type=event_type,
            document_id=document_id,
            actor_id=actor_id,
            description=description,
            event_data=event_data or {},
            source=source,
            ip_address=ip_address,
            user_agent=user_agent
        )
        db.session.add(event)
        return event

    def __repr__(self):
        return f'<AuditEvent {self.event_type} document={self.document_id}>'
