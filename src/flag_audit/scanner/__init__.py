"""Flag-reference scanner — matcher table, extractor, destructuring helpers."""

from flag_audit.scanner.extract import (
    NON_FLAG_NAMES,
    FlagReferenceExtractor,
    is_likely_flag_name,
    join_lines,
)
from flag_audit.scanner.patterns import DEFAULT_MATCHERS, Matcher, build_matchers

__all__ = [
    "DEFAULT_MATCHERS",
    "FlagReferenceExtractor",
    "Matcher",
    "NON_FLAG_NAMES",
    "build_matchers",
    "is_likely_flag_name",
    "join_lines",
]
