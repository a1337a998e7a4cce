"""Company name normalisation through acquisition rules.

Rules are checked once when the mapper is built; a rule set that could map a
name in two different ways is rejected before anything is mapped. Lookups try
the rules in declaration order and cache every answer, including "unmapped".
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Final

from shreconcile.domain.errors import AcquisitionRuleError

if TYPE_CHECKING:
    from collections.abc import Iterable

    from shreconcile.domain.model import AcquisitionRule

log = getLogger(__name__)

UNMAPPED: Final[str] = "---"


@dataclass(frozen=True, slots=True)
class CompiledRule:
    pattern: re.Pattern[str]
    result: str
    index: int


@dataclass(slots=True)
class MappingStats:
    """How often a result came from a fresh regex scan versus the cache."""

    regex_matches: int = 0
    cache_hits: int = 0


@dataclass(frozen=True, slots=True)
class _CacheEntry:
    result: str
    mapped: bool


def compile_rules(rules: Iterable[AcquisitionRule]) -> tuple[CompiledRule, ...]:
    """Validate ``rules`` and compile them in declaration order."""

    rule_list = list(rules)
    results_by_pattern: dict[str, str] = {}
    seen_results: set[str] = set()
    compiled: list[CompiledRule] = []
    for index, rule in enumerate(rule_list):
        if rule.pattern in results_by_pattern:
            raise AcquisitionRuleError(
                f"Acquisition number {index} {rule!r} is already present in the mapping "
                f"and maps into {results_by_pattern[rule.pattern]!r}"
            )
        results_by_pattern[rule.pattern] = rule.result
        if rule.result in seen_results:
            raise AcquisitionRuleError(
                f"Acquisition number {index} {rule!r}: some other acquisition already maps "
                f"into {rule.result!r}, merge them"
            )
        seen_results.add(rule.result)
        try:
            pattern = re.compile(rule.pattern)
        except re.error as exc:
            raise AcquisitionRuleError(
                f"Acquisition number {index} {rule!r}: invalid regular expression: {exc}"
            ) from exc
        compiled.append(CompiledRule(pattern=pattern, result=rule.result, index=index))

    for candidate in compiled:
        for index, rule in enumerate(rule_list):
            if index != candidate.index and candidate.pattern.search(rule.result):
                raise AcquisitionRuleError(
                    f"Acquisition number {index} {rule.pattern!r} result {rule.result!r} "
                    f"matches acquisition number {candidate.index} "
                    f"{candidate.pattern.pattern!r} which maps to {candidate.result!r}, "
                    f"simplify it: {rule.pattern!r} -> {candidate.result!r}"
                )
            if candidate.pattern.search(rule.pattern) and candidate.result != rule.result:
                raise AcquisitionRuleError(
                    f"Acquisition number {index} {rule.pattern!r} matches acquisition number "
                    f"{candidate.index} {candidate.pattern.pattern!r} which maps to "
                    f"{candidate.result!r}: result is different {rule.result!r}"
                )
    return tuple(compiled)


@dataclass(slots=True)
class CompanyNameMapper:
    rules: tuple[CompiledRule, ...]
    _cache: dict[str, _CacheEntry] = field(default_factory=dict["str", "_CacheEntry"])
    _stats: dict[str, MappingStats] = field(default_factory=dict["str", "MappingStats"])

    @classmethod
    def from_rules(cls, rules: Iterable[AcquisitionRule]) -> CompanyNameMapper:
        compiled = compile_rules(rules)
        log.info("Loaded %d acquisition rules", len(compiled))
        return cls(rules=compiled)

    def map(self, company: str) -> str:
        cached = self._cache.get(company)
        if cached is not None:
            self._stat(cached.result if cached.mapped else UNMAPPED).cache_hits += 1
            return cached.result

        for rule in self.rules:
            if rule.pattern.search(company):
                self._cache[company] = _CacheEntry(result=rule.result, mapped=True)
                self._stat(rule.result).regex_matches += 1
                return rule.result

        self._cache[company] = _CacheEntry(result=company, mapped=False)
        self._stat(UNMAPPED).regex_matches += 1
        return company

    def stats(self) -> dict[str, MappingStats]:
        """Per result statistics; unmapped names are counted under ``UNMAPPED``."""

        return dict(self._stats)

    def used_mappings(self) -> dict[str, str]:
        return {raw: entry.result for raw, entry in self._cache.items() if entry.mapped}

    def log_report(self) -> None:
        for result, stat in sorted(self._stats.items()):
            if result == UNMAPPED:
                log.info(
                    "Non-acquired companies: checked all regexp: %d, cache hit: %d",
                    stat.regex_matches,
                    stat.cache_hits,
                )
            else:
                log.info(
                    "Mapped to %r: checked regexp: %d, cache hit: %d",
                    result,
                    stat.regex_matches,
                    stat.cache_hits,
                )
        for raw, result in sorted(self.used_mappings().items()):
            log.info("Used mapping %r --> %r", raw, result)

    def _stat(self, result: str) -> MappingStats:
        stat = self._stats.get(result)
        if stat is None:
            stat = self._stats[result] = MappingStats()
        return stat
