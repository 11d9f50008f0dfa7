"""
Field constraints used by rule sets.

A constraint inspects one field value (and, for cross-field checks, the
rest of the payload). Type constraints halt evaluation of the remaining
rules for their field when they fail, and coerce the value when they pass
so that later range checks see a number rather than a query-string.
"""

import math
import re
from typing import Any, Iterable, List, Mapping, Tuple

from email_validator import EmailNotValidError, validate_email
from pydantic import AnyUrl, TypeAdapter, ValidationError as PydanticValidationError

_URI_ADAPTER = TypeAdapter(AnyUrl)

TRUE_STRINGS = {"true"}
FALSE_STRINGS = {"false"}

# (path suffix, offending value); an empty suffix points at the field itself
Failure = Tuple[str, Any]


class Constraint:
    """Base constraint: subclasses implement ``check``"""

    halts = False

    def check(self, value: Any, payload: Mapping[str, Any]) -> bool:
        raise NotImplementedError

    def coerce(self, value: Any) -> Any:
        return value

    def failures(self, value: Any, payload: Mapping[str, Any]) -> List[Failure]:
        if self.check(value, payload):
            return []
        return [("", value)]

    def __repr__(self):
        return f"{type(self).__name__}()"


class Required(Constraint):
    """Presence check; evaluated by the engine before any other rule"""

    halts = True

    def check(self, value, payload):
        return value is not None


# ============================================
# Type constraints
# ============================================

class IsString(Constraint):
    halts = True

    def check(self, value, payload):
        return isinstance(value, str)


class IsNumber(Constraint):
    """Accepts ints, floats and numeric strings (query/form values)"""

    halts = True

    def check(self, value, payload):
        if isinstance(value, bool):
            return False
        if isinstance(value, (int, float)):
            return math.isfinite(value)
        if isinstance(value, str):
            try:
                return math.isfinite(float(value.strip()))
            except ValueError:
                return False
        return False

    def coerce(self, value):
        if isinstance(value, str):
            text = value.strip()
            try:
                return int(text)
            except ValueError:
                return float(text)
        return value


class IsInteger(Constraint):
    """Run after IsNumber; rejects fractional values"""

    halts = True

    def check(self, value, payload):
        if isinstance(value, int):
            return True
        return isinstance(value, float) and value.is_integer()

    def coerce(self, value):
        return int(value)


class IsBoolean(Constraint):
    halts = True

    def check(self, value, payload):
        if isinstance(value, bool):
            return True
        return isinstance(value, str) and value.lower() in TRUE_STRINGS | FALSE_STRINGS

    def coerce(self, value):
        if isinstance(value, str):
            return value.lower() in TRUE_STRINGS
        return value


class IsList(Constraint):
    halts = True

    def check(self, value, payload):
        return isinstance(value, list)


# ============================================
# Value constraints
# ============================================

class NotEmpty(Constraint):
    def check(self, value, payload):
        return value != ""


class MinLength(Constraint):
    def __init__(self, limit: int):
        self.limit = limit

    def check(self, value, payload):
        return len(value) >= self.limit

    def __repr__(self):
        return f"MinLength({self.limit})"


class MaxLength(Constraint):
    def __init__(self, limit: int):
        self.limit = limit

    def check(self, value, payload):
        return len(value) <= self.limit

    def __repr__(self):
        return f"MaxLength({self.limit})"


class Pattern(Constraint):
    def __init__(self, pattern: str):
        self.regex = re.compile(pattern)

    def check(self, value, payload):
        return bool(self.regex.match(value))

    def __repr__(self):
        return f"Pattern({self.regex.pattern!r})"


class Email(Constraint):
    """Syntax only; deliverability is never checked"""

    def check(self, value, payload):
        try:
            validate_email(value, check_deliverability=False)
        except EmailNotValidError:
            return False
        return True


class Uri(Constraint):
    def check(self, value, payload):
        if not isinstance(value, str):
            return False
        try:
            _URI_ADAPTER.validate_python(value)
        except PydanticValidationError:
            return False
        return True


class Min(Constraint):
    def __init__(self, limit):
        self.limit = limit

    def check(self, value, payload):
        return value >= self.limit

    def __repr__(self):
        return f"Min({self.limit})"


class Max(Constraint):
    def __init__(self, limit):
        self.limit = limit

    def check(self, value, payload):
        return value <= self.limit

    def __repr__(self):
        return f"Max({self.limit})"


class Positive(Constraint):
    def check(self, value, payload):
        return value > 0


class OneOf(Constraint):
    def __init__(self, choices: Iterable[Any]):
        self.choices = tuple(choices)

    def check(self, value, payload):
        return value in self.choices

    def __repr__(self):
        return f"OneOf({list(self.choices)})"


class Matches(Constraint):
    """Cross-field equality against the submitted value of another field"""

    def __init__(self, other: str):
        self.other = other

    def check(self, value, payload):
        return value == payload.get(self.other)

    def __repr__(self):
        return f"Matches({self.other!r})"


class Each(Constraint):
    """Applies an item constraint to every element; failures carry the index"""

    def __init__(self, item: Constraint):
        self.item = item

    def failures(self, value, payload):
        return [
            (str(index), element)
            for index, element in enumerate(value)
            if not self.item.check(element, payload)
        ]

    def check(self, value, payload):
        return not self.failures(value, payload)

    def __repr__(self):
        return f"Each({self.item!r})"
