"""
Rule set building blocks.

A rule set is an ordered list of ``Rule(field, constraint, message)``
tuples plus the payload model that supplies types and defaults once every
rule has passed. The field builders below expand one field declaration
into its rules, with a default message per constraint that a rule set can
override through ``messages``.
"""

from typing import Dict, Iterable, List, NamedTuple, Optional, Sequence, Type

from storefront.schemas.common import RequestPayload
from storefront.validation.constraints import (
    Constraint,
    Each,
    Email,
    IsBoolean,
    IsInteger,
    IsList,
    IsNumber,
    IsString,
    Matches,
    Max,
    MaxLength,
    Min,
    MinLength,
    NotEmpty,
    OneOf,
    Pattern,
    Positive,
    Required,
    Uri,
)


class Rule(NamedTuple):
    field: str
    constraint: Constraint
    message: str


class RuleSet:
    """Named, ordered collection of rules for one request shape"""

    def __init__(
        self,
        name: str,
        payload_model: Type[RequestPayload],
        rules: Iterable[Sequence[Rule]],
        allow_blank: Iterable[str] = (),
    ):
        self.name = name
        self.payload_model = payload_model
        self.rules: List[Rule] = [rule for group in rules for rule in group]
        # Fields whose empty string skips every other rule
        self.allow_blank = frozenset(allow_blank)

    @property
    def fields(self) -> List[str]:
        return list(self.payload_model.model_fields)

    def __repr__(self):
        return f"<RuleSet {self.name} ({len(self.rules)} rules)>"


def label(field: str) -> str:
    """``full_name`` -> ``Full name``"""
    return field.replace("_", " ").capitalize()


def _message(field: str, key: str, default: str, messages: Optional[Dict[str, str]]) -> str:
    if messages and key in messages:
        return messages[key]
    return default.format(label=label(field))


# ============================================
# Field builders
# ============================================

def text(
    field: str,
    *,
    required: bool = False,
    min_length: Optional[int] = None,
    max_length: Optional[int] = None,
    pattern: Optional[str] = None,
    email: bool = False,
    uri: bool = False,
    choices: Optional[Sequence[str]] = None,
    matches: Optional[str] = None,
    messages: Optional[Dict[str, str]] = None,
) -> List[Rule]:
    """String field. Constraints are evaluated in declaration order."""
    rules = []
    if required:
        rules.append(Rule(field, Required(), _message(field, "required", "{label} is required", messages)))
    rules.append(Rule(field, IsString(), _message(field, "type", "{label} must be a string", messages)))
    if choices is not None:
        rules.append(Rule(
            field, OneOf(choices),
            _message(field, "choices", "{label} must be one of [" + ", ".join(choices) + "]", messages),
        ))
    if matches is not None:
        rules.append(Rule(
            field, Matches(matches),
            _message(field, "matches", "{label} must match " + label(matches).lower(), messages),
        ))
    if choices is None and matches is None:
        rules.append(Rule(field, NotEmpty(), _message(field, "empty", "{label} is not allowed to be empty", messages)))
    if email:
        rules.append(Rule(field, Email(), _message(field, "email", "{label} must be a valid email address", messages)))
    if uri:
        rules.append(Rule(field, Uri(), _message(field, "uri", "{label} must be a valid uri", messages)))
    if pattern is not None:
        rules.append(Rule(field, Pattern(pattern), _message(field, "pattern", "{label} format is invalid", messages)))
    if min_length is not None:
        rules.append(Rule(
            field, MinLength(min_length),
            _message(field, "min_length", "{label} must be at least %d characters" % min_length, messages),
        ))
    if max_length is not None:
        rules.append(Rule(
            field, MaxLength(max_length),
            _message(field, "max_length", "{label} must be less than or equal to %d characters" % max_length, messages),
        ))
    return rules


def number(
    field: str,
    *,
    required: bool = False,
    integer: bool = False,
    positive: bool = False,
    minimum=None,
    maximum=None,
    messages: Optional[Dict[str, str]] = None,
) -> List[Rule]:
    """Numeric field; numeric strings are accepted and coerced"""
    rules = []
    if required:
        rules.append(Rule(field, Required(), _message(field, "required", "{label} is required", messages)))
    rules.append(Rule(field, IsNumber(), _message(field, "type", "{label} must be a number", messages)))
    if integer:
        rules.append(Rule(field, IsInteger(), _message(field, "integer", "{label} must be an integer", messages)))
    if positive:
        rules.append(Rule(field, Positive(), _message(field, "positive", "{label} must be a positive number", messages)))
    if minimum is not None:
        rules.append(Rule(
            field, Min(minimum),
            _message(field, "minimum", "{label} must be greater than or equal to %s" % minimum, messages),
        ))
    if maximum is not None:
        rules.append(Rule(
            field, Max(maximum),
            _message(field, "maximum", "{label} must be less than or equal to %s" % maximum, messages),
        ))
    return rules


def integer(field: str, **kwargs) -> List[Rule]:
    return number(field, integer=True, **kwargs)


def boolean(field: str, *, required: bool = False, messages: Optional[Dict[str, str]] = None) -> List[Rule]:
    rules = []
    if required:
        rules.append(Rule(field, Required(), _message(field, "required", "{label} is required", messages)))
    rules.append(Rule(field, IsBoolean(), _message(field, "type", "{label} must be a boolean", messages)))
    return rules


def uri_list(field: str, *, messages: Optional[Dict[str, str]] = None) -> List[Rule]:
    """List of URIs; an invalid element is reported as ``field.<index>``"""
    return [
        Rule(field, IsList(), _message(field, "type", "{label} must be an array", messages)),
        Rule(field, Each(Uri()), _message(field, "uri", "{label} items must be valid uris", messages)),
    ]
