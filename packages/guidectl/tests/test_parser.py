from __future__ import annotations

from pathlib import Path

import pytest
from guidectl.core.errors import ScriptError
from guidectl.core.exit_codes import ERR_DOCS
from guidectl.parse import guide_slug, parse_guide, parse_guide_file
from tests.helpers import GUIDE_A


def test_parse_splits_intro_chapters_and_subheadings() -> None:
    guide = parse_guide(GUIDE_A, "alpha.md")
    assert guide.slug == "alpha"
    assert guide.title == "Alpha"
    assert [c.title for c in guide.chapters] == ["Install", "Usage"]
    assert [c.anchor for c in guide.chapters] == ["install", "usage"]
    install = guide.chapters[0]
    assert [b.kind for b in install.blocks] == ["prose", "code", "heading", "prose"]
    assert install.blocks[1].language == "sh"
    assert install.blocks[1].text == "./install.sh"
    assert install.blocks[2].anchor == "verify"
    assert [b.kind for b in guide.intro] == ["prose"]
    assert guide.issues == ()


def test_chapter_order_and_lines_follow_source() -> None:
    guide = parse_guide(GUIDE_A, "alpha.md")
    assert [c.line for c in guide.chapters] == [5, 17]
    assert guide.anchors() == ["install", "verify", "usage"]


def test_headings_inside_code_fences_are_ignored() -> None:
    text = "# T\n\n## Real\n\n~~~~md\n## Not a heading\n```\nstill code\n~~~~\n"
    guide = parse_guide(text, "t.md")
    assert [c.title for c in guide.chapters] == ["Real"]
    code = guide.chapters[0].blocks[0]
    assert code.fence == "~~~~"
    assert code.text == "## Not a heading\n```\nstill code"


def test_duplicate_headings_get_suffixed_anchors() -> None:
    guide = parse_guide("# Guide\n\n## Setup\n\na\n\n## Setup\n\nb\n\n## Guide\n\nc\n", "g.md")
    assert [c.anchor for c in guide.chapters] == ["setup", "setup-1", "guide-1"]


def test_closing_hashes_are_stripped() -> None:
    guide = parse_guide("# Title #\n\n## Chapter ##\n\nx\n", "t.md")
    assert guide.title == "Title"
    assert guide.chapters[0].title == "Chapter"


def test_malformed_and_empty_headings_are_reported_and_skipped() -> None:
    guide = parse_guide("# T\n\n#Bad heading\n\n## \n\n## Good\n\ntext\n", "t.md")
    codes = [issue.code for issue in guide.issues]
    assert codes == ["heading-format", "heading-empty"]
    assert guide.issues[0].line == 3
    assert [c.title for c in guide.chapters] == ["Good"]
    assert guide.intro[0].text == "#Bad heading"


def test_unterminated_fence_is_reported_and_closed_at_eof() -> None:
    guide = parse_guide("# T\n\n## Code\n\n```dart\nvoid main() {}\n", "t.md")
    assert [i.code for i in guide.issues] == ["unterminated-fence"]
    assert guide.chapters[0].blocks[0].text == "void main() {}"


def test_front_matter_is_parsed_into_meta() -> None:
    guide = parse_guide("---\ntitle: From Meta\ntags: [a, b]\n---\n\n## One\n\nx\n", "t.md")
    assert guide.meta == {"title": "From Meta", "tags": ["a", "b"]}
    assert guide.title == "From Meta"
    assert guide.chapters[0].line == 6


def test_front_matter_must_be_a_mapping() -> None:
    guide = parse_guide("---\n- a\n- b\n---\n\n## One\n\nx\n", "t.md")
    assert [i.code for i in guide.issues] == ["front-matter"]
    assert guide.meta == {}


def test_toc_region_is_dropped() -> None:
    text = "# T\n\n<!-- toc -->\n- [One](#one)\n<!-- /toc -->\n\n## One\n\nx\n"
    guide = parse_guide(text, "t.md")
    assert guide.intro == ()
    assert guide.issues == ()


def test_unmatched_toc_marker_is_reported() -> None:
    guide = parse_guide("# T\n\n<!-- toc -->\n\n## One\n\nx\n", "t.md")
    assert [i.code for i in guide.issues] == ["toc-marker"]


def test_toc_end_marker_inside_code_fence_does_not_close_region() -> None:
    text = "# T\n\n<!-- toc -->\n\n## A\n\n```html\n<!-- /toc -->\n```\n\n## B\n\nx\n"
    guide = parse_guide(text, "t.md")
    assert [c.title for c in guide.chapters] == ["A", "B"]
    assert [(i.code, i.line) for i in guide.issues] == [("toc-marker", 3)]
    code = guide.chapters[0].code_blocks[0]
    assert (code.language, code.text) == ("html", "<!-- /toc -->")


def test_title_falls_back_to_file_stem() -> None:
    guide = parse_guide("## First\n\nbody\n", "nested/clean-code.md")
    assert guide.slug == "nested-clean-code"
    assert guide.title == "Nested Clean Code"


def test_title_override_wins() -> None:
    assert parse_guide("# Parsed\n", "t.md", title="Override").title == "Override"


def test_deeper_chapter_level_promotes_subheadings() -> None:
    guide = parse_guide(GUIDE_A, "alpha.md", chapter_level=3)
    assert [c.title for c in guide.chapters] == ["Install", "Verify", "Usage"]


def test_chapter_level_out_of_range_is_rejected() -> None:
    with pytest.raises(ValueError):
        parse_guide("# T\n", "t.md", chapter_level=1)


def test_guide_slug_from_nested_path() -> None:
    assert guide_slug("flutter/Widgets Intro.md") == "flutter-widgets-intro"


def test_parse_guide_file_reads_relative_source(tmp_path: Path) -> None:
    (tmp_path / "docs").mkdir()
    path = tmp_path / "docs/alpha.md"
    path.write_text("\ufeff" + GUIDE_A, encoding="utf-8")
    guide = parse_guide_file(path, tmp_path)
    assert guide.source == "docs/alpha.md"
    assert guide.title == "Alpha"
    assert guide.path == path


def test_parse_guide_file_rejects_invalid_utf8(tmp_path: Path) -> None:
    path = tmp_path / "bad.md"
    path.write_bytes(b"# T\n\xff\xfe\n")
    with pytest.raises(ScriptError) as err:
        parse_guide_file(path, tmp_path)
    assert err.value.code == ERR_DOCS
