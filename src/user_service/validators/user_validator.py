"""
Field rules for candidate users.

Every rule lives in `USER_RULES` and is evaluated by `validate_user()`. The two
ways the API validates a body both end up here:

- automatic: `user_service.core.dependencies.bind_user` runs while FastAPI binds
  the request body and hands the handler a `BindingResult`;
- manual: a handler calls `UserValidator.validate(candidate)` itself.

Rules are independent and all of them run, so a single candidate can collect
several violations. Output order follows the rule table.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Mapping

from pydantic.alias_generators import to_camel

# local-part "@" domain; the domain needs at least one dot and no label may
# start or end with a hyphen. Whitespace is not allowed anywhere.
EMAIL_PATTERN = re.compile(
    r"[A-Za-z0-9!#$%&'*+/=?^_`{|}~-]+(?:\.[A-Za-z0-9!#$%&'*+/=?^_`{|}~-]+)*"
    r"@"
    r"(?:[A-Za-z0-9](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?\.)+"
    r"[A-Za-z0-9](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?"
)


@dataclass(frozen=True)
class Violation:
    """One failed rule: the wire path of the field and a readable message."""

    field: str
    message: str


@dataclass(frozen=True)
class FieldRule:
    attribute: str
    is_valid: Callable[[Any], bool]
    message: str

    @property
    def path(self) -> str:
        return to_camel(self.attribute)


def is_not_null(value: Any) -> bool:
    return value is not None


def is_not_blank(value: Any) -> bool:
    return value is not None and bool(str(value).strip())


def is_valid_email(value: Any) -> bool:
    """Null passes (email is optional); anything else must match EMAIL_PATTERN."""
    if value is None:
        return True
    return isinstance(value, str) and EMAIL_PATTERN.fullmatch(value) is not None


USER_RULES: tuple[FieldRule, ...] = (
    FieldRule("first_name", is_not_null, "first name shouldn't be null"),
    FieldRule("first_name", is_not_blank, "the first name cannot be blank"),
    FieldRule("last_name", is_not_null, "last name shouldn't be null"),
    FieldRule("last_name", is_not_blank, "the last name cannot be blank"),
    FieldRule("email", is_valid_email, "invalid email address"),
)


def _read(candidate: Any, attribute: str) -> Any:
    if isinstance(candidate, Mapping):
        return candidate.get(attribute, candidate.get(to_camel(attribute)))
    return getattr(candidate, attribute, None)


def validate_user(candidate: Any, rules: Iterable[FieldRule] = USER_RULES) -> list[Violation]:
    """
    Check `candidate` against every rule and return the violations in rule order.

    `candidate` may be a `UserPayload`, a `User` row, or a plain mapping keyed by
    either snake_case or camelCase names. An empty list means the candidate is valid.
    """
    violations: list[Violation] = []
    for rule in rules:
        if not rule.is_valid(_read(candidate, rule.attribute)):
            violations.append(Violation(field=rule.path, message=rule.message))
    return violations


def messages_of(violations: Iterable[Violation]) -> list[str]:
    return [v.message for v in violations]


@dataclass
class BindingResult:
    """
    Outcome of binding a request body: the bound target plus any violations.

    Handlers check `has_errors()` before touching the target.
    """

    target: Any
    violations: list[Violation] = field(default_factory=list)

    def has_errors(self) -> bool:
        return bool(self.violations)

    @property
    def messages(self) -> list[str]:
        return messages_of(self.violations)


class UserValidator:
    """Validator object for handlers that validate explicitly."""

    def __init__(self, rules: Iterable[FieldRule] = USER_RULES):
        self.rules = tuple(rules)

    def validate(self, candidate: Any) -> list[Violation]:
        return validate_user(candidate, self.rules)

    def bind(self, candidate: Any) -> BindingResult:
        return BindingResult(target=candidate, violations=self.validate(candidate))
