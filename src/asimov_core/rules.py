"""
Sentinel/target rule table.

A rule pairs a manifest file (the sentinel) with the heavy generated
directory that sits next to it (the target). The table is built once at
startup and never mutated.
"""

from dataclasses import dataclass
from typing import Iterable, Iterator, List, Optional, Tuple

from .constants import DEFAULT_RULES


@dataclass(frozen=True)
class Rule:
    """A single sentinel -> target pairing"""
    sentinel: str
    target: str


class RuleTable:
    """
    Small ordered list of rules.

    Lookups are linear; the table holds a handful of entries.
    """

    def __init__(self, rules: Optional[Iterable[Tuple[str, str]]] = None):
        pairs = DEFAULT_RULES if rules is None else rules
        self._rules: Tuple[Rule, ...] = tuple(
            r if isinstance(r, Rule) else Rule(*r) for r in pairs
        )

        overlap = set(self.sentinels()) & set(self.targets())
        if overlap:
            raise ValueError(
                f"Names used as both sentinel and target: {sorted(overlap)}"
            )

    def forward(self, filename: str) -> Optional[str]:
        """Target name for a sentinel filename (first match)"""
        for rule in self._rules:
            if rule.sentinel == filename:
                return rule.target
        return None

    def backward(self, filename: str) -> Optional[str]:
        """Sentinel name for a target filename (first match)"""
        for rule in self._rules:
            if rule.target == filename:
                return rule.sentinel
        return None

    def sentinels(self) -> List[str]:
        return [rule.sentinel for rule in self._rules]

    def targets(self) -> List[str]:
        return [rule.target for rule in self._rules]

    def __iter__(self) -> Iterator[Rule]:
        return iter(self._rules)

    def __len__(self) -> int:
        return len(self._rules)

    def __repr__(self) -> str:
        pairs = ", ".join(f"{r.sentinel}->{r.target}" for r in self._rules)
        return f"RuleTable({pairs})"
