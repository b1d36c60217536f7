"""
Blog API - Request Validation Rule-Lists
========================================

What:  Declarative validation for request bodies: each rule-set is an
       ordered list of (field, predicate, message) rules.
How:   RuleSet.validate(payload) trims the configured string fields, runs
       EVERY rule in order, and raises one ValidationError holding all
       failures. Nothing short-circuits: an empty email reports both
       "Email is required" and "Please provide a valid email".
Who:   AuthService and PostService, before touching the database.

Optional rules are skipped when the field is absent or null, so
`"title": ""` on an update still fails "Title cannot be empty" while a
missing title is simply left alone.
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple

from email_validator import EmailNotValidError, validate_email

from blog_api.exceptions import ValidationError
from blog_api.models.post import POST_STATUSES


@dataclass(frozen=True)
class Rule:
    field: str
    check: Callable[[Any], bool]
    message: str
    optional: bool = False


def not_empty(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return value != ""
    return True


def is_email(value: Any) -> bool:
    if not isinstance(value, str):
        return False
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError:
        return False
    return True


def min_length(n: int) -> Callable[[Any], bool]:
    def check(value: Any) -> bool:
        return isinstance(value, str) and len(value) >= n
    return check


def one_of(choices: Iterable[str]) -> Callable[[Any], bool]:
    allowed = frozenset(choices)

    def check(value: Any) -> bool:
        return isinstance(value, str) and value in allowed
    return check


def is_array(value: Any) -> bool:
    return isinstance(value, (list, tuple))


def only_strings(value: Any) -> bool:
    # Non-arrays are left to is_array so they report a single failure
    if not isinstance(value, (list, tuple)):
        return True
    return all(isinstance(item, str) for item in value)


class RuleSet:
    """
    An ordered rule-list plus the fields to trim before evaluation.

    Example:
        rules = RuleSet(
            [Rule("name", not_empty, "Name is required")],
            trim=("name",),
        )
        clean = rules.validate({"name": "  Ada "})   # {"name": "Ada"}
    """

    def __init__(self, rules: List[Rule], trim: Tuple[str, ...] = ()):
        self.rules = rules
        self.trim = trim

    def sanitize(self, payload: Mapping[str, Any]) -> Dict[str, Any]:
        clean = dict(payload)
        for name in self.trim:
            if isinstance(clean.get(name), str):
                clean[name] = clean[name].strip()
        return clean

    def errors(self, clean: Mapping[str, Any]) -> List[Dict[str, Optional[str]]]:
        failures = []
        for rule in self.rules:
            value = clean.get(rule.field)
            if rule.optional and value is None:
                continue
            if not rule.check(value):
                failures.append({"field": rule.field, "message": rule.message})
        return failures

    def validate(self, payload: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Sanitize and check a payload.

        Returns:
            The trimmed payload

        Raises:
            ValidationError: with every failed rule in .errors
        """
        clean = self.sanitize(payload)
        failures = self.errors(clean)
        if failures:
            raise ValidationError(errors=failures)
        return clean


# ══════════════════════════════════════════════════════════════════════════
# Rule-sets
# ══════════════════════════════════════════════════════════════════════════

STATUS_MESSAGE = "Status must be either draft or published"
TAG_ITEM_MESSAGE = "Each tag must be a string"

register_rules = RuleSet(
    [
        Rule("name", not_empty, "Name is required"),
        Rule("email", not_empty, "Email is required"),
        Rule("email", is_email, "Please provide a valid email"),
        Rule("password", not_empty, "Password is required"),
        Rule("password", min_length(6), "Password must be at least 6 characters"),
    ],
    trim=("name", "email", "password"),
)

login_rules = RuleSet(
    [
        Rule("email", not_empty, "Email is required"),
        Rule("email", is_email, "Please provide a valid email"),
        Rule("password", not_empty, "Password is required"),
    ],
    trim=("email", "password"),
)

create_post_rules = RuleSet(
    [
        Rule("title", not_empty, "Title is required"),
        Rule("content", not_empty, "Content is required"),
        Rule("status", one_of(POST_STATUSES), STATUS_MESSAGE, optional=True),
        Rule("tags", is_array, "Tags must be an array", optional=True),
        Rule("tags", only_strings, TAG_ITEM_MESSAGE, optional=True),
    ],
    trim=("title", "content"),
)

update_post_rules = RuleSet(
    [
        Rule("title", not_empty, "Title cannot be empty", optional=True),
        Rule("content", not_empty, "Content cannot be empty", optional=True),
        Rule("status", one_of(POST_STATUSES), STATUS_MESSAGE, optional=True),
        Rule("tags", is_array, "Tags must be an array", optional=True),
        Rule("tags", only_strings, TAG_ITEM_MESSAGE, optional=True),
    ],
    trim=("title", "content"),
)
