"""
Variables Validator

Validates the template placeholders attached to a document.

A document's variables are an ordered list of {name, identifier}
records. Input arrives either as already-decoded data or as a JSON
string (from a form field), so handling is split in two steps:

    value = VariablesValidator.parse(raw)      # may raise VariablesParseError
    result = VariablesValidator.validate(value)
    if result.is_valid:
        document.variables = result.value
"""

import json
import logging
from collections.abc import Mapping
from typing import Any

from jsonschema import Draft7Validator

from .exceptions import VariablesParseError
from .types import VariablesResult

logger = logging.getLogger(__name__)

NOT_AN_ARRAY = 'not_an_array'
INVALID = 'invalid'

VARIABLES_SCHEMA = {
    '$schema': 'http://json-schema.org/draft-07/schema#',
    'type': 'array',
    'items': {
        'type': 'object',
        'properties': {
            'name': {'type': 'string'},
            'identifier': {'type': 'string'},
        },
        'required': ['name', 'identifier'],
        'additionalProperties': False,
    },
}


class VariablesValidator:
    """
    Stateless parser/validator for document variables.

    Usage:
        VariablesValidator.parse('[{"name": "Name", "identifier": "name"}]')
        VariablesValidator.validate([{'name': 'Name', 'identifier': 'name'}])
    """

    _validator = Draft7Validator(VARIABLES_SCHEMA)

    @classmethod
    def parse(cls, raw: Any) -> Any:
        """
        Decode a raw variables value.

        Strings are decoded as JSON and a malformed string raises
        VariablesParseError. None becomes an empty list and tuples become
        lists. Anything else is returned unchanged for validate() to judge.
        """
        if raw is None:
            return []

        if isinstance(raw, str):
            try:
                return json.loads(raw)
            except json.JSONDecodeError as e:
                logger.warning(f"Rejected malformed variables JSON: {e}")
                raise VariablesParseError(f"Malformed variables JSON: {e}", raw=raw) from e

        if isinstance(raw, tuple):
            return list(raw)

        return raw

    @classmethod
    def validate(cls, value: Any) -> VariablesResult:
        """
        Check the shape of a decoded variables value.

        Returns a VariablesResult holding either the normalized list or
        the error code: 'not_an_array' when the value is not a list,
        'invalid' when any record is not exactly {name, identifier}.
        """
        if value is None:
            value = []

        candidate = cls._prepare(value)
        errors = list(cls._validator.iter_errors(candidate))

        if not errors:
            normalized = [
                {'name': record['name'], 'identifier': record['identifier']}
                for record in candidate
            ]
            return VariablesResult(value=normalized)

        if any(error.validator == 'type' and not error.absolute_path for error in errors):
            logger.debug(f"Variables rejected: expected a list, got {type(value).__name__}")
            return VariablesResult(error=NOT_AN_ARRAY)

        logger.debug(f"Variables rejected: {errors[0].message}")
        return VariablesResult(error=INVALID)

    @staticmethod
    def _prepare(value: Any) -> Any:
        # jsonschema only treats list/dict as array/object
        if isinstance(value, tuple):
            value = list(value)
        if isinstance(value, list):
            return [
                dict(item) if isinstance(item, Mapping) and not isinstance(item, dict) else item
                for item in value
            ]
        return value
