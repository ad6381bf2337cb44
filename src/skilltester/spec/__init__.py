"""Lightweight describe/it spec engine."""

from skilltester.spec.context import (
    ContextKeyError,
    ExecutionContext,
    ExpectationNotMetError,
    ExpectationTarget,
    SkipSignal,
)
from skilltester.spec.group import Example, ExampleGroup, SpecDefinitionError, describe
from skilltester.spec.matchers import (
    EqualityMatcher,
    ExistMatcher,
    IncludeMatcher,
    MatchMatcher,
    Matcher,
    TruthyMatcher,
    be_true,
    eq,
    exist,
    include,
    match,
)
from skilltester.spec.reporter import ConsoleReporter
from skilltester.spec.results import ExampleResult, ExampleStatus, FailureRecord
from skilltester.spec.world import SpecLoadError, World, load_spec_file, run

__all__ = [
    "ConsoleReporter",
    "ContextKeyError",
    "EqualityMatcher",
    "Example",
    "ExampleGroup",
    "ExampleResult",
    "ExampleStatus",
    "ExecutionContext",
    "ExistMatcher",
    "ExpectationNotMetError",
    "ExpectationTarget",
    "FailureRecord",
    "IncludeMatcher",
    "MatchMatcher",
    "Matcher",
    "SkipSignal",
    "SpecDefinitionError",
    "SpecLoadError",
    "TruthyMatcher",
    "World",
    "be_true",
    "describe",
    "eq",
    "exist",
    "include",
    "load_spec_file",
    "match",
    "run",
]
