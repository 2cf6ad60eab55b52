"""
Response Registry

Ordered, guard-aware rule lists describing how an action responds:

- response rules: "respond with ``resolver`` (when ``guard`` holds)"
- format rules: "for ``format`` (when ``guard`` holds), run ``block``"

Unconditional rules always sit after guarded ones, so a guarded rule wins
whenever its guard holds and declaration order breaks ties between guarded
rules. Subclasses get a copy of their parent's lists and extend it.
"""

from dataclasses import dataclass
from typing import (
    Any, Callable, Dict, Generic, Hashable, Iterable, Iterator,
    List, Optional, Tuple, TypeVar,
)


WILDCARD_FORMAT = "any"


GuardCheck = Callable[[str], bool]


@dataclass(frozen=True)
class ResponseRule:
    """Respond with the object named by ``resolver``, optionally only when ``guard`` holds."""

    resolver: str
    guard: Optional[str] = None

    @property
    def key(self) -> Optional[str]:
        return self.guard


@dataclass(frozen=True)
class FormatRule:
    """For ``format``, optionally only when ``guard`` holds, run ``block`` (if any)."""

    format: str
    guard: Optional[str] = None
    block: Optional[Callable[..., Any]] = None

    @property
    def key(self) -> Tuple[str, Optional[str]]:
        return (self.format, self.guard)


R = TypeVar("R", ResponseRule, FormatRule)


class RuleList(Generic[R]):
    """
    Ordered rule collection keeping unconditional rules last.

    Adding a rule whose key already exists replaces it in place; otherwise
    guarded rules are inserted in front of the first unconditional rule and
    unconditional rules are appended.
    """

    def __init__(self, rules: Iterable[R] = ()):
        self._rules: List[R] = []
        for rule in rules:
            self.add(rule)

    def add(self, rule: R) -> None:
        for index, existing in enumerate(self._rules):
            if existing.key == rule.key:
                self._rules[index] = rule
                return

        if rule.guard is None:
            self._rules.append(rule)
            return

        for index, existing in enumerate(self._rules):
            if existing.guard is None:
                self._rules.insert(index, rule)
                return
        self._rules.append(rule)

    def get(self, key: Hashable) -> Optional[R]:
        for rule in self._rules:
            if rule.key == key:
                return rule
        return None

    def keys(self) -> List[Hashable]:
        return [rule.key for rule in self._rules]

    def first_match(self, holds: GuardCheck) -> Optional[R]:
        """Return the first rule that is unconditional or whose guard holds."""
        for rule in self._rules:
            if rule.guard is None or holds(rule.guard):
                return rule
        return None

    def copy(self) -> "RuleList[R]":
        clone: RuleList[R] = RuleList()
        clone._rules = list(self._rules)
        return clone

    def __iter__(self) -> Iterator[R]:
        return iter(self._rules)

    def __len__(self) -> int:
        return len(self._rules)

    def __contains__(self, key: Hashable) -> bool:
        return any(rule.key == key for rule in self._rules)

    def __repr__(self) -> str:
        return f"RuleList({self._rules!r})"


class ResponseRegistry:
    """
    Response and format rules owned by one action class.

    Attributes:
        responses: Ordered response rules
        formats: Ordered format rules
    """

    def __init__(
        self,
        responses: Optional[RuleList[ResponseRule]] = None,
        formats: Optional[RuleList[FormatRule]] = None,
    ):
        self.responses: RuleList[ResponseRule] = responses if responses is not None else RuleList()
        self.formats: RuleList[FormatRule] = formats if formats is not None else RuleList()

    def inherit(self) -> "ResponseRegistry":
        """Registry for a subclass: the same rules, in lists the subclass owns."""
        return ResponseRegistry(self.responses.copy(), self.formats.copy())

    # ------------------------------------------------------------------
    # Declaration
    # ------------------------------------------------------------------

    def add_response(self, resolver: str, on: Optional[str] = None) -> ResponseRule:
        rule = ResponseRule(resolver=resolver, guard=on)
        self.responses.add(rule)
        return rule

    def add_format(
        self,
        *formats: str,
        on: Optional[str] = None,
        block: Optional[Callable[..., Any]] = None,
    ) -> List[FormatRule]:
        rules = [FormatRule(format=str(fmt), guard=on, block=block) for fmt in formats]
        for rule in rules:
            self.formats.add(rule)
        return rules

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    def resolve_response(self, holds: GuardCheck) -> Optional[ResponseRule]:
        return self.responses.first_match(holds)

    def select_formats(self, holds: GuardCheck) -> Dict[str, FormatRule]:
        """
        Pick one rule per format.

        Formats keep the order in which they first appear; for each format the
        first rule that is unconditional or whose guard holds is selected.
        Formats with no applicable rule are left out.
        """
        selected: Dict[str, FormatRule] = {}
        for rule in self.formats:
            if rule.format in selected:
                continue
            if rule.guard is None or holds(rule.guard):
                selected[rule.format] = rule
        return selected

    def declared_formats(self) -> List[str]:
        """Distinct declared formats, wildcard excluded."""
        seen: List[str] = []
        for rule in self.formats:
            if rule.format != WILDCARD_FORMAT and rule.format not in seen:
                seen.append(rule.format)
        return seen

    @property
    def has_wildcard(self) -> bool:
        return any(rule.format == WILDCARD_FORMAT for rule in self.formats)

    @property
    def has_blocks(self) -> bool:
        return any(rule.block is not None for rule in self.formats)

    def __repr__(self) -> str:
        return f"ResponseRegistry(responses={self.responses!r}, formats={self.formats!r})"
