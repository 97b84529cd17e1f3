"""
Course prerequisite rules.

Prerequisites are free text such as ``"Mathematics > 70%"`` or
``"Physical Sciences > 60% or Life Sciences > 65%"``. ``parse_rule`` turns
the text into a tagged value and ``evaluate_rule`` classifies it against
the applicant's marks as met, unmet or unknown.

Evaluation is permissive: anything the parser cannot read, or a subject
the applicant has not entered, is ``unknown`` rather than ``unmet``, and
a course only fails when some rule is definitely unmet.
"""

import enum
import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Protocol

_COMPARISON_PATTERN = re.compile(r"^(.+?)\s*>\s*(\d+)%?$")
_ALTERNATIVE_SEPARATOR = re.compile(r" or ", re.IGNORECASE)


class RuleStatus(str, enum.Enum):
    MET = "met"
    UNMET = "unmet"
    UNKNOWN = "unknown"


class Mark(Protocol):
    name: str
    percentage: int


@dataclass(frozen=True)
class Comparison:
    """``<subject> > <threshold>%``: satisfied by a mark of at least ``threshold``."""

    subject: str
    threshold: int
    operator: str = ">"


@dataclass(frozen=True)
class Alternatives:
    options: tuple["Rule", ...]


@dataclass(frozen=True)
class Unrecognized:
    text: str


Rule = Comparison | Alternatives | Unrecognized


@dataclass(frozen=True)
class RuleResult:
    text: str
    status: RuleStatus


@dataclass(frozen=True)
class CourseEligibility:
    course: str
    results: tuple[RuleResult, ...]

    @property
    def qualified(self) -> bool:
        return all(result.status is not RuleStatus.UNMET for result in self.results)


def _parse_clause(text: str) -> Rule:
    match = _COMPARISON_PATTERN.match(text)
    if not match:
        return Unrecognized(text)
    return Comparison(subject=match.group(1).strip(), threshold=int(match.group(2)))


def parse_rule(text: str) -> Rule:
    """Parse a prerequisite string."""
    text = text.strip()
    if " or " in text.lower():
        parts = _ALTERNATIVE_SEPARATOR.split(text)
        return Alternatives(tuple(_parse_clause(part.strip()) for part in parts))
    return _parse_clause(text)


def find_mark(subject: str, marks: Iterable[Mark]) -> Mark | None:
    """
    Find the applicant's mark for a required subject.

    Matches when the entered subject name contains the required name
    (case-insensitive). Any "math" subject satisfies a "math" requirement,
    so "Mathematical Literacy" is matched against "Mathematics".
    """
    required = subject.lower()
    for mark in marks:
        name = mark.name.lower()
        if required in name or ("math" in required and "math" in name):
            return mark
    return None


def evaluate_rule(rule: Rule, marks: Sequence[Mark]) -> RuleStatus:
    if isinstance(rule, Unrecognized):
        return RuleStatus.UNKNOWN

    if isinstance(rule, Alternatives):
        statuses = [evaluate_rule(option, marks) for option in rule.options]
        if RuleStatus.MET in statuses:
            return RuleStatus.MET
        if RuleStatus.UNKNOWN in statuses:
            return RuleStatus.UNKNOWN
        return RuleStatus.UNMET

    mark = find_mark(rule.subject, marks)
    if mark is None:
        return RuleStatus.UNKNOWN
    return RuleStatus.MET if mark.percentage >= rule.threshold else RuleStatus.UNMET


def evaluate_text(text: str, marks: Sequence[Mark]) -> RuleResult:
    return RuleResult(text=text, status=evaluate_rule(parse_rule(text), marks))


def evaluate_course(course: str, prerequisites: Iterable[str], marks: Sequence[Mark]) -> CourseEligibility:
    return CourseEligibility(
        course=course,
        results=tuple(evaluate_text(text, marks) for text in prerequisites),
    )


def is_course_qualified(prerequisites: Iterable[str], marks: Sequence[Mark]) -> bool:
    """A course qualifies unless one of its prerequisites is definitely unmet."""
    return evaluate_course("", prerequisites, marks).qualified
