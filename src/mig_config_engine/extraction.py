from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable

from .constants import (
    BUSINESS_KEYWORDS,
    COMPLEXITY_THRESHOLDS,
    ENVIRONMENT_KEYWORDS,
    PROBLEM_KEYWORDS,
    SERVICE_COUNT_NOUNS,
    TRAINING_COUNT_NOUNS,
)
from .errors import EmptyInputError
from .models import IssueSignals, PatternMatch


@dataclass(frozen=True)
class KeywordRule:
    flag: str
    keywords: frozenset[str]

    def pattern(self) -> re.Pattern[str]:
        return _compile_keywords(self.keywords)


def _keyword_regex(keyword: str) -> str:
    # a trailing space marks a whole-word keyword; everything else matches as a word prefix
    if keyword.endswith(" "):
        return rf"\b{re.escape(keyword.strip())}\b"
    return rf"\b{re.escape(keyword)}"


def _compile_keywords(keywords: Iterable[str]) -> re.Pattern[str]:
    ordered = sorted(keywords, key=lambda item: (-len(item), item))
    return re.compile("|".join(_keyword_regex(keyword) for keyword in ordered), flags=re.IGNORECASE)


def _count_regex(nouns: Iterable[str]) -> re.Pattern[str]:
    alternatives = "|".join(re.escape(noun) for noun in nouns)
    return re.compile(rf"\b(\d+)\s+(?:[a-z-]+\s+)?(?:{alternatives})[a-z-]*", flags=re.IGNORECASE)


def build_rules(table: Iterable[tuple[str, Iterable[str]]]) -> tuple[KeywordRule, ...]:
    return tuple(KeywordRule(flag=flag, keywords=frozenset(keywords)) for flag, keywords in table)


PROBLEM_RULES = build_rules(PROBLEM_KEYWORDS)
BUSINESS_RULES = build_rules(BUSINESS_KEYWORDS)
ENVIRONMENT_RULES = build_rules(ENVIRONMENT_KEYWORDS)

_RULE_PATTERNS: dict[KeywordRule, re.Pattern[str]] = {
    rule: rule.pattern() for rule in (*PROBLEM_RULES, *BUSINESS_RULES, *ENVIRONMENT_RULES)
}

SERVICE_COUNT_RE = _count_regex(SERVICE_COUNT_NOUNS)
TRAINING_COUNT_RE = _count_regex(TRAINING_COUNT_NOUNS)


def _rule_pattern(rule: KeywordRule) -> re.Pattern[str]:
    pattern = _RULE_PATTERNS.get(rule)
    if pattern is None:
        pattern = rule.pattern()
        _RULE_PATTERNS[rule] = pattern
    return pattern


def scan_flags(text: str, rules: Iterable[KeywordRule]) -> dict[str, bool]:
    flags: dict[str, bool] = {}
    for rule in rules:
        flags[rule.flag] = flags.get(rule.flag, False) or bool(_rule_pattern(rule).search(text))
    return flags


def first_matching_flag(text: str, rules: Iterable[KeywordRule], default: str) -> str:
    for rule in rules:
        if _rule_pattern(rule).search(text):
            return rule.flag
    return default


def find_count_matches(text: str, pattern: re.Pattern[str]) -> list[PatternMatch]:
    return [
        PatternMatch(text=match.group(0), count=int(match.group(1)))
        for match in pattern.finditer(text)
    ]


def classify_complexity(text: str) -> str:
    length = len(text)
    if length < COMPLEXITY_THRESHOLDS["low_max"]:
        return "low"
    if length < COMPLEXITY_THRESHOLDS["medium_max"]:
        return "medium"
    return "high"


def extract_issue_signals(text: str) -> IssueSignals:
    if text is None or not text.strip():
        raise EmptyInputError("issue description must not be blank")

    cleaned = " ".join(text.split())
    return IssueSignals(
        environment=first_matching_flag(cleaned, ENVIRONMENT_RULES, default="production"),
        service_matches=find_count_matches(cleaned, SERVICE_COUNT_RE),
        training_matches=find_count_matches(cleaned, TRAINING_COUNT_RE),
        problems=scan_flags(cleaned, PROBLEM_RULES),
        business_context=scan_flags(cleaned, BUSINESS_RULES),
        complexity=classify_complexity(cleaned),
    )
