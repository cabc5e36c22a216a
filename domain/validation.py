"""Turn raw form data into typed requests, or field-level violations."""

from collections.abc import Mapping
from typing import Any, TypeVar

import pydantic
from pydantic_core import ErrorDetails

from domain.errors import ValidationError, Violation
from domain.models import Request


R = TypeVar("R", bound=Request)


RULES = {
    "missing": "required",
    "string_type": "required",
    "string_too_short": "min_length",
    "too_short": "min_length",
    "string_too_long": "max_length",
    "too_long": "max_length",
    "string_pattern_mismatch": "format",
    "enum": "choice",
}


def _field_aliases(request_type: type[Request]) -> dict[str, str]:
    return {
        name: field.alias or name
        for name, field in request_type.model_fields.items()
    }


def _violation(request_type: type[Request], error: ErrorDetails) -> Violation:
    aliases = _field_aliases(request_type)
    name = str(error["loc"][0]) if error["loc"] else ""
    field = aliases.get(name, name)
    rule = RULES.get(error["type"], error["type"])
    message = request_type.messages.get(field, {}).get(rule, error["msg"])
    return Violation(field=field, rule=rule, message=message)


def validate(request_type: type[R], raw: Mapping[str, Any]) -> R:
    """Validate `raw` against `request_type`.

    Raises `ValidationError` listing one violation per failing field rule.
    Messages come from `request_type.messages`, falling back to pydantic's.
    """
    try:
        return request_type.model_validate(dict(raw))
    except pydantic.ValidationError as e:
        violations = [_violation(request_type, err) for err in e.errors()]
        raise ValidationError(violations) from e
