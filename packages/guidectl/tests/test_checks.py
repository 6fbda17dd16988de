from __future__ import annotations

from pathlib import Path

import pytest
from guidectl.checks import CHECKS, Severity, check_ids, domains, run_checks, select_checks
from guidectl.checks.integrity import (
    check_chapters_non_empty,
    check_headings_unique,
    check_line_length,
    check_links_internal,
    check_no_orphans,
    check_no_placeholders,
    check_parse_clean,
    check_render_idempotent,
    check_toc_anchors_resolve,
    check_toc_order,
)
from guidectl.config import BundleConfig
from guidectl.contracts.schema import validate
from guidectl.model import Block, Bundle, Chapter, Guide
from guidectl.parse import parse_guide
from tests.helpers import GUIDE_A, GUIDE_B


def _config(root: Path, **overrides: object) -> BundleConfig:
    return BundleConfig(title="Docs", root=root, source_dir=root, out_dir=root / "out", **overrides)


def _bundle(root: Path, *guides: Guide, orphans: tuple[str, ...] = ()) -> Bundle:
    return Bundle(title="Docs", root=root, guides=guides, orphans=orphans)


def _parsed(root: Path, **texts: str) -> Bundle:
    return _bundle(root, *(parse_guide(text, f"{name}.md") for name, text in texts.items()))


def test_clean_bundle_passes_every_check(tmp_path: Path) -> None:
    bundle = _parsed(tmp_path, alpha=GUIDE_A, beta=GUIDE_B)
    config = _config(tmp_path)
    for chk in CHECKS:
        assert chk.fn(bundle, config) == (0, []), chk.check_id


def test_parse_clean_reports_issues(tmp_path: Path) -> None:
    code, errors = check_parse_clean(_parsed(tmp_path, bad="# T\n\n#Oops\n"), _config(tmp_path))
    assert code == 1
    assert errors == ["bad.md:3: heading-format: missing space after `#` in `#Oops`"]


def test_duplicate_headings_are_flagged(tmp_path: Path) -> None:
    bundle = _parsed(tmp_path, dup="# Guide\n\n## Setup\n\na\n\n### setup\n\nb\n\n## Guide\n\nc\n")
    code, errors = check_headings_unique(bundle, _config(tmp_path))
    assert code == 1
    assert errors == [
        "dup.md:7: duplicate heading `setup` (same as line 3)",
        "dup.md:11: duplicate heading `Guide` (same as the guide title)",
    ]


def test_toc_entry_without_matching_heading_is_flagged(tmp_path: Path) -> None:
    chapter = Chapter(title="Intro", level=2, anchor="wrong", line=3, blocks=(Block(kind="prose", text="x", line=5),))
    guide = Guide(slug="g", title="G", source="g.md", chapters=(chapter,))
    code, errors = check_toc_anchors_resolve(_bundle(tmp_path, guide), _config(tmp_path))
    assert code == 1
    assert "g.md: rendered toc link `#wrong` does not resolve" in errors


def test_chapters_out_of_source_order_are_flagged(tmp_path: Path) -> None:
    body = (Block(kind="prose", text="x", line=1),)
    guide = Guide(
        slug="g",
        title="G",
        source="g.md",
        chapters=(Chapter("Second", 2, "second", 10, body), Chapter("First", 2, "first", 5, body)),
    )
    code, errors = check_toc_order(_bundle(tmp_path, guide), _config(tmp_path))
    assert code == 1
    assert errors == ["g.md: chapters are not in source order"]


def test_unstable_rendering_is_flagged(tmp_path: Path) -> None:
    prose = Block(kind="prose", text="before\n<!-- toc -->\n- [x](#x)\n<!-- /toc -->\nafter", line=4)
    guide = Guide(slug="g", title="G", source="g.md", chapters=(Chapter("One", 2, "one", 3, (prose,)),))
    code, errors = check_render_idempotent(_bundle(tmp_path, guide), _config(tmp_path))
    assert code == 1
    assert errors[0].startswith("g.md: rendering is not stable")


def test_internal_links_must_resolve(tmp_path: Path) -> None:
    (tmp_path / "assets").mkdir()
    (tmp_path / "assets/diagram.txt").write_text("x", encoding="utf-8")
    text = (
        "# A\n\n## One\n\n"
        "[ok](#one) [title](#a) [file](assets/diagram.txt) [web](https://example.com/x.md)\n"
        "[gone](#missing) [other](beta.md#nope) [nofile](missing.md)\n"
        "![img](missing.png)\n\n"
        "```md\n[in code](#ignored)\n```\n"
    )
    bundle = _bundle(tmp_path, parse_guide(text, "a.md"), parse_guide(GUIDE_B, "beta.md"))
    code, errors = check_links_internal(bundle, _config(tmp_path))
    assert code == 1
    assert errors == [
        "a.md:6: broken anchor `#missing`",
        "a.md:6: broken anchor `beta.md#nope`",
        "a.md:6: broken link target `missing.md`",
    ]


def test_links_resolve_relative_to_the_guide_directory(tmp_path: Path) -> None:
    nested = parse_guide("# N\n\n## Back\n\nSee [beta](../beta.md#setup).\n", "sub/nested.md")
    bundle = _bundle(tmp_path, nested, parse_guide(GUIDE_B, "beta.md"))
    assert check_links_internal(bundle, _config(tmp_path)) == (0, [])


def test_orphans_are_reported(tmp_path: Path) -> None:
    bundle = _bundle(tmp_path, parse_guide(GUIDE_B, "beta.md"), orphans=("notes.md",))
    assert check_no_orphans(bundle, _config(tmp_path)) == (1, ["orphan markdown file not listed in manifest: notes.md"])


def test_empty_chapters_are_reported(tmp_path: Path) -> None:
    bundle = _parsed(tmp_path, g="# G\n\n## Empty\n\n## Full\n\ntext\n")
    assert check_chapters_non_empty(bundle, _config(tmp_path)) == (1, ["g.md:3: chapter `Empty` has no content"])


def test_long_prose_lines_are_reported_but_code_and_tables_are_not(tmp_path: Path) -> None:
    long = "word " * 10
    text = f"# G\n\n## One\n\n{long}\n\n| {long} |\n\n```\n{long}\n```\n"
    code, errors = check_line_length(_parsed(tmp_path, g=text), _config(tmp_path, max_line_length=20))
    assert code == 1
    assert errors == ["g.md:5: line length exceeds 20 chars"]


def test_placeholders_in_prose_are_reported(tmp_path: Path) -> None:
    text = "# G\n\n## One\n\nTODO: finish this.\n\n```\n// TODO in code is fine\n```\n"
    assert check_no_placeholders(_parsed(tmp_path, g=text), _config(tmp_path)) == (1, ["g.md:5: placeholder `TODO` in prose"])


def test_registry_ids_are_unique_and_warn_checks_are_marked() -> None:
    assert len(check_ids()) == len(set(check_ids())) == 10
    warn = {c.check_id for c in CHECKS if c.severity is Severity.WARN}
    assert warn == {"bundle/no-orphans", "chapters/non-empty", "style/line-length", "style/no-placeholders"}
    assert "all" in domains()


def test_select_by_domain_and_id() -> None:
    assert [c.check_id for c in select_checks("toc")] == ["toc/anchors-resolve", "toc/order"]
    assert [c.check_id for c in select_checks("all", ["links/internal"])] == ["links/internal"]
    assert select_checks("style", ["links/internal"]) == []


def test_runner_payload_matches_report_schema(tmp_path: Path) -> None:
    bundle = _parsed(tmp_path, g="# G\n\n## Empty\n\n## Full\n\ntext\n")
    code, payload = run_checks(bundle, _config(tmp_path), select_checks())
    validate("guidectl.check-report.v1", payload)
    assert code == 0
    assert payload["status"] == "pass"
    assert payload["warn_count"] == 1
    rows = {row["id"]: row for row in payload["checks"]}
    assert rows["chapters/non-empty"]["status"] == "warn"
    assert rows["parse/clean"]["status"] == "pass"


def test_runner_fails_on_error_checks_and_honours_fail_fast(tmp_path: Path) -> None:
    bundle = _parsed(tmp_path, g="# G\n\n#Bad\n\n## One\n\n[x](#nowhere)\n")
    code, payload = run_checks(bundle, _config(tmp_path), select_checks())
    assert code == 1
    assert payload["failed_count"] == 2
    code, payload = run_checks(bundle, _config(tmp_path), select_checks(), fail_fast=True)
    assert code == 1
    assert [row["id"] for row in payload["checks"]] == ["parse/clean"]


@pytest.mark.parametrize("check_id", ["toc/anchors-resolve", "toc/order", "render/idempotent"])
def test_structural_checks_hold_for_combined_bundles_with_shared_titles(tmp_path: Path, check_id: str) -> None:
    bundle = _parsed(tmp_path, alpha=GUIDE_A, beta=GUIDE_B, gamma="# Alpha Notes\n\n## Install\n\nx\n\n# Second Part\n\ny\n")
    chk = next(c for c in CHECKS if c.check_id == check_id)
    assert chk.fn(bundle, _config(tmp_path)) == (0, [])
