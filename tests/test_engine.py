"""Tests for the rewrite engine."""

from gha_pin.parser import extract_references
from gha_pin.pinning.engine import (
    RewriteDecision,
    apply_decisions,
    build_decision,
    needs_rewrite,
    render_pinned_line,
)
from gha_pin.resolver import ResolvedVersion

from conftest import SHA_A, SHA_B, SHA_C


def _ref(line):
    return extract_references(line)[0]


def _decision(reference, version="v1.0.0", sha=SHA_A):
    decision = build_decision(reference, ResolvedVersion(reference.repository, version, sha))
    assert decision is not None
    return decision


# ---------------------------------------------------------------------------
# needs_rewrite
# ---------------------------------------------------------------------------

class TestNeedsRewrite:
    def test_pinned_same_version(self):
        ref = _ref(f"  - uses: actions/checkout@{SHA_A} # tag v4.2.2")
        assert not needs_rewrite(ref, ResolvedVersion("actions/checkout", "v4.2.2", SHA_B))

    def test_pinned_same_version_without_v(self):
        ref = _ref(f"  - uses: actions/checkout@{SHA_A} # tag v4.2.2")
        assert not needs_rewrite(ref, ResolvedVersion("actions/checkout", "4.2.2", SHA_B))

    def test_pinned_same_commit(self):
        ref = _ref(f"  - uses: actions/checkout@{SHA_A}")
        assert not needs_rewrite(ref, ResolvedVersion("actions/checkout", "v4.2.2", SHA_A))

    def test_pinned_older_version(self):
        ref = _ref(f"  - uses: actions/checkout@{SHA_A} # tag v4.1.0")
        assert needs_rewrite(ref, ResolvedVersion("actions/checkout", "v4.2.2", SHA_B))

    def test_tag_ref_always_rewritten(self):
        ref = _ref("  - uses: actions/checkout@v4")
        assert needs_rewrite(ref, ResolvedVersion("actions/checkout", "v4", SHA_A))

    def test_short_sha_never_pinned(self):
        ref = _ref("  - uses: actions/checkout@11bd719 # tag v4.2.2")
        assert needs_rewrite(ref, ResolvedVersion("actions/checkout", "v4.2.2", SHA_A))


# ---------------------------------------------------------------------------
# build_decision / render_pinned_line
# ---------------------------------------------------------------------------

class TestBuildDecision:
    def test_list_item_line(self):
        decision = _decision(_ref("      - uses: actions/checkout@v4"), "v4.2.2", SHA_A)
        assert decision.updated_line == f"      - uses: actions/checkout@{SHA_A} # tag v4.2.2"
        assert decision.old_version == "v4"

    def test_plain_key_line_replaces_comment(self):
        decision = _decision(_ref("        uses: actions/setup-python@v5 # python"), "v5.3.0", SHA_C)
        assert decision.updated_line == f"        uses: actions/setup-python@{SHA_C} # tag v5.3.0"

    def test_reusable_workflow_keeps_path(self):
        ref = _ref("    uses: acme/tools/.github/workflows/deploy.yml@v2")
        assert ref.repository == "acme/tools"
        decision = _decision(ref, "v2.1.0", SHA_B)
        assert decision.updated_line == (
            f"    uses: acme/tools/.github/workflows/deploy.yml@{SHA_B} # tag v2.1.0"
        )

    def test_sub_action_keeps_path(self):
        decision = _decision(_ref("  - uses: acme/toolkit/dist/setup@v1"), "v1.2.0", SHA_A)
        assert "acme/toolkit/dist/setup@" in decision.updated_line

    def test_old_version_from_comment(self):
        ref = _ref(f"  - uses: actions/checkout@{SHA_A} # tag v4.1.0")
        assert _decision(ref, "v4.2.2", SHA_B).old_version == "v4.1.0"

    def test_skip_marker_never_decided(self):
        ref = _ref("  - uses: a/b@c1d2 # skip-pinning")
        assert build_decision(ref, ResolvedVersion("a/b", "v1.0.0", SHA_A)) is None

    def test_up_to_date_not_decided(self):
        ref = _ref(f"  - uses: actions/checkout@{SHA_A} # tag v4.2.2")
        assert build_decision(ref, ResolvedVersion("actions/checkout", "v4.2.2", SHA_A)) is None

    def test_crlf_preserved(self):
        ref = extract_references("  - uses: a/b@v1\r")[0]
        assert render_pinned_line(ref, "v1.0.0", SHA_A).endswith("# tag v1.0.0\r")


class TestDecisionLink:
    def test_release_link(self):
        decision = _decision(_ref("  - uses: a/b@v1"), "v1.0.0", SHA_A)
        assert decision.link == "https://github.com/a/b/releases/tag/v1.0.0"

    def test_commit_link_for_branch(self):
        decision = _decision(_ref("  - uses: a/b@v1"), "main", SHA_A)
        assert decision.link == f"https://github.com/a/b/commit/{SHA_A}"

    def test_release_link_for_four_part_tag(self):
        decision = _decision(_ref("  - uses: a/b@v1"), "v1.2.3.4", SHA_A)
        assert decision.link == "https://github.com/a/b/releases/tag/v1.2.3.4"


# ---------------------------------------------------------------------------
# apply_decisions
# ---------------------------------------------------------------------------

class TestApplyDecisions:
    def test_empty_decisions_identity(self, ci_workflow_text):
        assert apply_decisions(ci_workflow_text, []) == ci_workflow_text

    def test_only_named_lines_change(self, ci_workflow_text):
        refs = extract_references(ci_workflow_text)
        decisions = [_decision(refs[0]), _decision(refs[4])]
        patched = apply_decisions(ci_workflow_text, decisions)

        before = ci_workflow_text.split("\n")
        after = patched.split("\n")
        assert len(before) == len(after)
        changed = {i for i, (a, b) in enumerate(zip(before, after)) if a != b}
        assert changed == {refs[0].line_index, refs[4].line_index}

    def test_order_of_decisions_irrelevant(self, ci_workflow_text):
        refs = extract_references(ci_workflow_text)
        decisions = [_decision(refs[0]), _decision(refs[2])]
        assert apply_decisions(ci_workflow_text, decisions) == apply_decisions(
            ci_workflow_text, list(reversed(decisions))
        )

    def test_out_of_range_skipped(self):
        text = "jobs:\n  a:\n    steps:\n      - uses: a/b@v1\n"
        ref = extract_references(text)[0]
        good = _decision(ref)
        stray = RewriteDecision(
            reference=extract_references("\n" * 40 + "  - uses: c/d@v1")[0],
            resolved=ResolvedVersion("c/d", "v1.0.0", SHA_B),
            updated_line="garbage",
            old_version="v1",
        )
        patched = apply_decisions(text, [stray, good])
        assert "garbage" not in patched
        assert SHA_A in patched
        assert patched.count("\n") == text.count("\n")

    def test_crlf_document(self):
        text = "jobs:\r\n  a:\r\n    steps:\r\n      - uses: a/b@v1\r\n      - run: make\r\n"
        ref = extract_references(text)[0]
        patched = apply_decisions(text, [_decision(ref)])
        assert patched == (
            f"jobs:\r\n  a:\r\n    steps:\r\n      - uses: a/b@{SHA_A} # tag v1.0.0\r\n      - run: make\r\n"
        )

    def test_trailing_newline_kept(self):
        text = "  - uses: a/b@v1\n"
        patched = apply_decisions(text, [_decision(extract_references(text)[0])])
        assert patched.endswith("\n")
        assert not patched.endswith("\n\n")
