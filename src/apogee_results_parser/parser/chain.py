"""Ordered-fallback strategy chains."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Iterable, Optional

from apogee_results_parser.parser.document import TranscriptDocument

StrategyFunc = Callable[[TranscriptDocument], Any]
Validator = Callable[[Any], bool]


@dataclass(frozen=True)
class Strategy:
    """One named extraction attempt: document in, candidate value or None out."""

    name: str
    func: StrategyFunc

    def __call__(self, doc: TranscriptDocument) -> Any:
        return self.func(doc)


def _truthy(value: Any) -> bool:
    return bool(value)


@dataclass(frozen=True)
class ChainOutcome:
    value: Any
    strategy: Optional[str]
    attempts: tuple[tuple[str, bool], ...]

    @property
    def found(self) -> bool:
        return self.strategy is not None


def run_chain(
    strategies: Iterable[Strategy],
    doc: TranscriptDocument,
    is_valid: Validator = _truthy,
) -> ChainOutcome:
    """
    Try strategies strictly in order; the first valid candidate wins.

    Later strategies are not evaluated once one succeeds, and results are
    never merged.
    """
    attempts: list[tuple[str, bool]] = []
    for strategy in strategies:
        candidate = strategy(doc)
        ok = candidate is not None and is_valid(candidate)
        attempts.append((strategy.name, ok))
        if ok:
            return ChainOutcome(candidate, strategy.name, tuple(attempts))
    return ChainOutcome(None, None, tuple(attempts))
