"""
Utility functions for the document signature application.
"""

import re
from typing import Optional

_CPF_PUNCTUATION = re.compile(r'[\s./-]')


def normalize_cpf(cpf: Optional[str]) -> Optional[str]:
    """
    Strip formatting from a CPF.

    Args:
        cpf: CPF as typed by a user (e.g. "123.456.789-00")

    Returns:
        The bare identifier, or None if nothing is left
    """
    if cpf is None:
        return None
    normalized = _CPF_PUNCTUATION.sub('', str(cpf))
    return normalized or None
