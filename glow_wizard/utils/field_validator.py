"""
Declarative field validation.

A record is checked against an ordered list of FieldRule objects. Every
rule produces independent checks (type, range, allowed values, minimum
length) and all violations are reported, not just the first one.
"""
from collections.abc import Mapping
from typing import Any, Callable, List, Optional, Tuple
import math

from pydantic import BaseModel, ConfigDict


class FieldRule(BaseModel):
    """Constraint record for one required field"""
    model_config = ConfigDict(frozen=True)

    key: str
    type: str  # "string", "number" or "array"
    min: Optional[float] = None
    max: Optional[float] = None
    allowed: Optional[Tuple[str, ...]] = None
    min_length: Optional[int] = None


class FieldValidationResult(BaseModel):
    valid: bool
    errors: List[str] = []

    def __bool__(self) -> bool:
        return self.valid


def _is_missing(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value.strip() == "")


def _is_number(value: Any) -> bool:
    # bool is an int subclass but never a valid numeric answer
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return not math.isnan(value)


def _format_bound(bound: float) -> str:
    return str(int(bound)) if float(bound).is_integer() else str(bound)


def _check_type(rule: FieldRule, value: Any) -> List[str]:
    if rule.type == "string" and not isinstance(value, str):
        return [f"Field {rule.key} must be a string."]
    if rule.type == "number" and not _is_number(value):
        return [f"Field {rule.key} must be a number."]
    if rule.type == "array" and not isinstance(value, list):
        return [f"Field {rule.key} must be an array."]
    return []


def _check_range(rule: FieldRule, value: Any) -> List[str]:
    if rule.type != "number" or not _is_number(value):
        return []
    errors = []
    if rule.min is not None and value < rule.min:
        errors.append(f"Field {rule.key} must be at least {_format_bound(rule.min)}.")
    if rule.max is not None and value > rule.max:
        errors.append(f"Field {rule.key} must be at most {_format_bound(rule.max)}.")
    return errors


def _check_allowed(rule: FieldRule, value: Any) -> List[str]:
    if not rule.allowed:
        return []
    if rule.type == "array":
        if not isinstance(value, list):
            return []
        invalid = [v for v in value if v not in rule.allowed]
        if invalid:
            return [f"Field {rule.key} contains invalid values: {', '.join(str(v) for v in invalid)}."]
        return []
    if rule.type == "string" and value not in rule.allowed:
        return [f"Field {rule.key} must be one of: {', '.join(rule.allowed)}."]
    return []


def _check_min_length(rule: FieldRule, value: Any) -> List[str]:
    if rule.min_length and isinstance(value, str) and len(value) < rule.min_length:
        return [f"Field {rule.key} must be at least {rule.min_length} characters."]
    return []


FIELD_CHECKS: Tuple[Callable[[FieldRule, Any], List[str]], ...] = (
    _check_type,
    _check_range,
    _check_allowed,
    _check_min_length,
)


def validate_fields(record: Any, rules: List[FieldRule], subject: str = "Profile data") -> FieldValidationResult:
    """
    Validate a record against an ordered list of field rules.

    Args:
        record: Mapping submitted by the user
        rules: Ordered rules; errors are reported in rule order
        subject: Name used in the top-level error for non-mapping input

    Returns:
        FieldValidationResult listing every violation
    """
    if not isinstance(record, Mapping):
        return FieldValidationResult(valid=False, errors=[f"{subject} must be an object."])

    errors: List[str] = []
    for rule in rules:
        value = record.get(rule.key)

        if _is_missing(value):
            errors.append(f"Missing required field: {rule.key}")
            continue

        for check in FIELD_CHECKS:
            errors.extend(check(rule, value))

    return FieldValidationResult(valid=not errors, errors=errors)
