"""
Document System Exceptions

Custom exceptions for document validation and lifecycle errors.

Party-management results (not found, already exists, identity not found)
are MembershipOutcome values, not exceptions.
"""


class DocumentError(Exception):
    """Base exception for all document system errors."""
    pass


class ValidationError(DocumentError):
    """
    Raised when a candidate change fails field-level validation.

    The change is rejected and the document is left untouched.
    """
    def __init__(self, message: str, field: str = None, code: str = None):
        self.field = field
        self.code = code
        super().__init__(message)

    def to_dict(self):
        return {self.field: [self.code]}


class VariablesParseError(DocumentError):
    """
    Raised when a textual variables value is not valid JSON.

    This is a hard failure and never turns into a ValidationError:
    well-formed JSON with the wrong shape is a validation problem,
    malformed JSON is not.
    """
    def __init__(self, message: str, raw: str = None):
        self.raw = raw
        super().__init__(message)


class DocumentLockedError(DocumentError):
    """Raised when a mutation is attempted on a document someone already signed."""
    def __init__(self, message: str, document_id: int = None):
        self.document_id = document_id
        super().__init__(message)
