"""
Request validation: declarative rule sets plus fail-fast upload checks
"""
from storefront.validation.rule_sets import RULE_SETS
from storefront.validation.rules import Rule, RuleSet
from storefront.validation.uploads import validate_image, validate_images
from storefront.validation.validator import (
    FieldError,
    ValidationResult,
    get_rule_set,
    validate,
    validate_or_raise,
)

__all__ = [
    "RULE_SETS",
    "Rule",
    "RuleSet",
    "FieldError",
    "ValidationResult",
    "get_rule_set",
    "validate",
    "validate_or_raise",
    "validate_image",
    "validate_images",
]
