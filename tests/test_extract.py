"""Tests for flag-reference extraction (single lines, chunks, destructuring)."""

from __future__ import annotations

import pytest

from flag_audit.constants import ConstantResolver
from flag_audit.model.reference import FlagReference
from flag_audit.scanner.extract import (
    FlagReferenceExtractor,
    is_likely_flag_name,
    join_lines,
)
from flag_audit.scanner.patterns import build_matchers

PATH = "ui/components/widget.tsx"


def _names(refs: list[FlagReference]) -> set[str]:
    return {r.flag_name for r in refs}


@pytest.fixture()
def extractor() -> FlagReferenceExtractor:
    return FlagReferenceExtractor(
        ConstantResolver({"FeatureFlagNames.Foo": "fooFlag", "MY_FLAG": "myConstFlag"})
    )


# ════════════════════════════════════════════════════════════════════
# Plausibility filter / line joining
# ════════════════════════════════════════════════════════════════════


class TestHelpers:
    @pytest.mark.parametrize("name", ["fooBar", "abc", "someLongFlagName"])
    def test_likely_flag_names(self, name: str):
        assert is_likely_flag_name(name)

    @pytest.mark.parametrize("name", ["ab", "FooBar", "length", "constructor", "_private"])
    def test_rejected_names(self, name: str):
        assert not is_likely_flag_name(name)

    def test_custom_deny_list(self):
        assert not is_likely_flag_name("fooBar", frozenset({"fooBar"}))

    def test_join_single_line_unchanged(self):
        assert join_lines(["  a.b  "]) == "  a.b  "

    def test_join_strips_comment_and_seams(self):
        assert join_lines(["a // c", "  .b"]) == "a.b"

    def test_join_three_lines(self):
        assert join_lines(["x = bag", "  .y /* z */ ", "  .w"]) == "x = bag.y.w"


# ════════════════════════════════════════════════════════════════════
# Single-line extraction
# ════════════════════════════════════════════════════════════════════


class TestExtractLine:
    def test_dot_access(self, extractor: FlagReferenceExtractor):
        refs = extractor.extract("const x = remoteFeatureFlags.myFlag;", PATH)
        assert refs == [FlagReference(flag_name="myFlag", file_path=PATH)]

    def test_optional_chaining(self, extractor: FlagReferenceExtractor):
        refs = extractor.extract("if (remoteFeatureFlags?.optFlag) {", PATH)
        assert _names(refs) == {"optFlag"}

    def test_state_path(self, extractor: FlagReferenceExtractor):
        refs = extractor.extract(
            "const v = state.metamask.remoteFeatureFlags.statePathFlag;", PATH
        )
        assert _names(refs) == {"statePathFlag"}

    def test_getter_dot_access(self, extractor: FlagReferenceExtractor):
        refs = extractor.extract("return getRemoteFeatureFlags(state).getterFlag;", PATH)
        assert _names(refs) == {"getterFlag"}

    def test_getter_with_nested_call(self, extractor: FlagReferenceExtractor):
        refs = extractor.extract(
            "getRemoteFeatureFlags(getState()).nestedCallFlag", PATH
        )
        assert _names(refs) == {"nestedCallFlag"}

    @pytest.mark.parametrize("quote", ["'", '"', "`"])
    def test_bracket_literal(self, extractor: FlagReferenceExtractor, quote: str):
        line = f"const v = remoteFeatureFlags[{quote}bracketFlag{quote}];"
        assert _names(extractor.extract(line, PATH)) == {"bracketFlag"}

    def test_getter_bracket_literal(self, extractor: FlagReferenceExtractor):
        line = "getRemoteFeatureFlags(state)?.['getterBracket']"
        assert _names(extractor.extract(line, PATH)) == {"getterBracket"}

    def test_inside_outer_string_ignored(self, extractor: FlagReferenceExtractor):
        line = "const s = \"remoteFeatureFlags['hiddenFlag']\";"
        assert extractor.extract(line, PATH) == []

    def test_dot_access_inside_string_ignored(self, extractor: FlagReferenceExtractor):
        line = "log('remoteFeatureFlags.quotedFlag is on');"
        assert extractor.extract(line, PATH) == []

    @pytest.mark.parametrize(
        "line",
        [
            "// remoteFeatureFlags.commentedFlag",
            "  * remoteFeatureFlags.docFlag",
            "foo(); // remoteFeatureFlags.trailingFlag",
            "foo(/* remoteFeatureFlags.blockFlag */);",
            "  / count; // remoteFeatureFlags.divisionFlag",
        ],
    )
    def test_comments_ignored(self, extractor: FlagReferenceExtractor, line: str):
        assert extractor.extract(line, PATH) == []

    def test_constant_resolved(self, extractor: FlagReferenceExtractor):
        refs = extractor.extract("remoteFeatureFlags[FeatureFlagNames.Foo]", PATH)
        assert _names(refs) == {"fooFlag"}

    def test_file_constant_resolved(self, extractor: FlagReferenceExtractor):
        refs = extractor.extract("getRemoteFeatureFlags(state)[MY_FLAG]", PATH)
        assert _names(refs) == {"myConstFlag"}

    def test_unknown_constant_reported_unresolved(self, extractor: FlagReferenceExtractor):
        refs = extractor.extract("remoteFeatureFlags[UNKNOWN_CONST]", PATH)
        assert _names(refs) == {"<unresolved constant: UNKNOWN_CONST>"}

    def test_unknown_enum_member_reported_unresolved(self, extractor: FlagReferenceExtractor):
        refs = extractor.extract("remoteFeatureFlags[FeatureFlagNames.Missing]", PATH)
        assert _names(refs) == {"<unresolved constant: FeatureFlagNames.Missing>"}

    def test_runtime_variable_skipped(self, extractor: FlagReferenceExtractor):
        assert extractor.extract("remoteFeatureFlags[flagKey]", PATH) == []

    @pytest.mark.parametrize(
        "line",
        [
            "remoteFeatureFlags.length",
            "remoteFeatureFlags.ab",
            "remoteFeatureFlags.SomeFlag",
            "Object.keys(remoteFeatureFlags).map(fn)",
        ],
    )
    def test_implausible_names_rejected(self, extractor: FlagReferenceExtractor, line: str):
        assert extractor.extract(line, PATH) == []

    def test_multiple_references_on_one_line(self, extractor: FlagReferenceExtractor):
        line = "const a = remoteFeatureFlags.firstFlag && remoteFeatureFlags['secondFlag'];"
        assert _names(extractor.extract(line, PATH)) == {"firstFlag", "secondFlag"}

    def test_custom_accessor_names(self):
        ex = FlagReferenceExtractor(
            matchers=build_matchers("featureFlags", "selectFeatureFlags"),
            flag_getter="selectFeatureFlags",
        )
        refs = ex.extract("const v = featureFlags.customBagFlag;", PATH)
        assert _names(refs) == {"customBagFlag"}
        assert ex.extract("remoteFeatureFlags.notOurBag", PATH) == []


# ════════════════════════════════════════════════════════════════════
# Destructuring
# ════════════════════════════════════════════════════════════════════


class TestDestructuring:
    def test_same_line_destructuring(self, extractor: FlagReferenceExtractor):
        line = "const { flagA, flagB: renamed } = getRemoteFeatureFlags(state);"
        assert _names(extractor.extract(line, PATH)) == {"flagA", "flagB"}

    def test_rest_element_skipped(self, extractor: FlagReferenceExtractor):
        line = "const { flagA, ...others } = getRemoteFeatureFlags(state);"
        assert _names(extractor.extract(line, PATH)) == {"flagA"}

    def test_use_selector(self, extractor: FlagReferenceExtractor):
        line = "const { selFlag } = useSelector(getRemoteFeatureFlags);"
        assert _names(extractor.extract(line, PATH)) == {"selFlag"}

    def test_use_selector_cast(self, extractor: FlagReferenceExtractor):
        line = "const flags = useSelector(getRemoteFeatureFlags) as { castFlag: boolean };"
        assert _names(extractor.extract(line, PATH)) == {"castFlag"}

    def test_bag_shape(self, extractor: FlagReferenceExtractor):
        line = "const { remoteFeatureFlags: { shapeFlag } } = state.metamask;"
        assert "shapeFlag" in _names(extractor.extract(line, PATH))

    def test_typed_destructuring(self, extractor: FlagReferenceExtractor):
        line = "const { typedFlag }: Flags = getRemoteFeatureFlags(state);"
        assert _names(extractor.extract(line, PATH)) == {"typedFlag"}

    def test_skip_destructuring_for_joined_lines(self, extractor: FlagReferenceExtractor):
        line = "const { flagA } = getRemoteFeatureFlags(state);"
        assert extractor.extract(line, PATH, skip_destructuring=True) == []


# ════════════════════════════════════════════════════════════════════
# Chunk extraction
# ════════════════════════════════════════════════════════════════════


class TestExtractChunk:
    def test_wrapped_dot_access(self, extractor: FlagReferenceExtractor):
        chunk = ["const enabled = remoteFeatureFlags", "  .wrappedFlag;"]
        assert _names(extractor.extract_chunk(chunk, PATH)) == {"wrappedFlag"}

    def test_wrapped_across_three_lines(self, extractor: FlagReferenceExtractor):
        chunk = ["const enabled = getRemoteFeatureFlags(", "  state,", ").tripleFlag;"]
        assert _names(extractor.extract_chunk(chunk, PATH)) == {"tripleFlag"}

    def test_multiline_destructuring(self, extractor: FlagReferenceExtractor):
        chunk = [
            "const {",
            "  multiA,",
            "  multiB, // comment",
            "} = getRemoteFeatureFlags(state);",
        ]
        assert _names(extractor.extract_chunk(chunk, PATH)) == {"multiA", "multiB"}

    def test_multiline_destructuring_beyond_window(self):
        ex = FlagReferenceExtractor(destructuring_window=2)
        chunk = [
            "const {",
            "  farA,",
            "  farB,",
            "  farC,",
            "} = getRemoteFeatureFlags(state);",
        ]
        assert ex.extract_chunk(chunk, PATH) == []

    def test_references_carry_file_path(self, extractor: FlagReferenceExtractor):
        refs = extractor.extract_chunk(["remoteFeatureFlags.pathFlag"], PATH)
        assert {r.file_path for r in refs} == {PATH}

    def test_extract_lines_scans_each_line(self, extractor: FlagReferenceExtractor):
        refs = extractor.extract_lines(
            ["remoteFeatureFlags.oneFlag", "remoteFeatureFlags.twoFlag"], PATH
        )
        assert _names(refs) == {"oneFlag", "twoFlag"}
