"""
Schema Validator
================

Evaluates a rule set against a request payload.

Every rule runs (validation is exhaustive across fields and constraints),
except that a failed presence or type check stops the remaining rules for
that field. When no rule fails, the payload model applies defaults and the
accepted, normalized payload is returned.

Usage:
    from storefront.validation import validate

    result = validate("user.register", payload)
    if not result.is_valid:
        raise RequestValidationFailed(result.error_dicts(), "user.register")
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from storefront.core.exceptions import RequestValidationFailed
from storefront.validation.constraints import Required
from storefront.validation.rule_sets import RULE_SETS
from storefront.validation.rules import RuleSet, label

logger = logging.getLogger(__name__)


@dataclass
class FieldError:
    """One violated rule"""
    field: str
    message: str
    value: Any = None

    def to_dict(self) -> Dict[str, Any]:
        return {"field": self.field, "message": self.message, "value": self.value}


@dataclass
class ValidationResult:
    """Outcome of validating one payload"""
    rule_set: str
    data: Optional[Dict[str, Any]] = None
    errors: List[FieldError] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def error_dicts(self) -> List[Dict[str, Any]]:
        return [error.to_dict() for error in self.errors]


def get_rule_set(rule_set: Union[str, RuleSet]) -> RuleSet:
    if isinstance(rule_set, RuleSet):
        return rule_set
    try:
        return RULE_SETS[rule_set]
    except KeyError:
        raise KeyError(f"Unknown rule set: {rule_set}")


def validate(rule_set: Union[str, RuleSet], payload: Any) -> ValidationResult:
    """
    Validate ``payload`` against a rule set.

    Args:
        rule_set: Rule set key (e.g. ``"user.register"``) or a RuleSet
        payload: Decoded request body, form or query parameters

    Returns:
        ValidationResult with either the normalized payload or field errors
    """
    rules = get_rule_set(rule_set)

    if not isinstance(payload, Mapping):
        return ValidationResult(
            rule_set=rules.name,
            errors=[FieldError(field="", message="Payload must be an object", value=payload)],
        )

    # Unknown fields are stripped before any rule runs; null counts as absent
    values = {
        name: payload[name]
        for name in rules.fields
        if name in payload and payload[name] is not None
    }
    errors: List[FieldError] = []
    halted = set()

    for rule in rules.rules:
        name = rule.field
        if name in halted:
            continue

        value = values.get(name)
        if isinstance(rule.constraint, Required):
            if value is None:
                errors.append(FieldError(field=name, message=rule.message, value=None))
                halted.add(name)
            continue

        if value is None:
            continue
        if value == "" and name in rules.allow_blank:
            continue

        failures = rule.constraint.failures(value, values)
        for suffix, offending in failures:
            path = f"{name}.{suffix}" if suffix else name
            errors.append(FieldError(field=path, message=rule.message, value=offending))

        if rule.constraint.halts:
            if failures:
                halted.add(name)
            else:
                values[name] = rule.constraint.coerce(value)

    if errors:
        logger.debug(
            f"Rule set {rules.name} rejected payload",
            extra={"rule_set": rules.name, "error_count": len(errors)}
        )
        return ValidationResult(rule_set=rules.name, errors=errors)

    return _normalize(rules, values)


def _normalize(rules: RuleSet, values: Dict[str, Any]) -> ValidationResult:
    """Apply defaults; keep supplied keys and any non-null default"""
    try:
        model = rules.payload_model.model_validate(values)
    except PydanticValidationError as exc:
        # Rules and payload model disagree; report rather than crash
        errors = [
            FieldError(
                field=".".join(str(part) for part in error["loc"]),
                message=f"{label(str(error['loc'][0]))} {error['msg'].lower()}" if error["loc"] else error["msg"],
                value=error.get("input"),
            )
            for error in exc.errors()
        ]
        return ValidationResult(rule_set=rules.name, errors=errors)

    dumped = model.model_dump()
    data = {
        key: value
        for key, value in dumped.items()
        if key in model.model_fields_set or value is not None
    }
    return ValidationResult(rule_set=rules.name, data=data)


def validate_or_raise(rule_set: Union[str, RuleSet], payload: Any) -> Dict[str, Any]:
    """Return the normalized payload or raise RequestValidationFailed"""
    result = validate(rule_set, payload)
    if not result.is_valid:
        raise RequestValidationFailed(result.error_dicts(), rule_set=result.rule_set)
    return result.data
