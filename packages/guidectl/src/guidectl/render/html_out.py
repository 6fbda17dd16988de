"""Static HTML site: an index, one page per guide, and a single combined page."""

from __future__ import annotations

import html
import posixpath
import re
from typing import Callable, Iterable
from xml.etree.ElementTree import Element

import markdown
from jinja2 import Environment, PackageLoader, StrictUndefined
from markdown.extensions import Extension
from markdown.treeprocessors import Treeprocessor

from ..model import Block, Bundle, Guide, TocEntry
from ..parse import plain_title, slugify
from ..toc import build_toc, nest
from .links import resolve_guide_link
from .markdown_out import combined_anchors, combined_link_rewriter, combined_rows

LinkRewriter = Callable[[str], "str | None"]

_PROSE_EXTENSIONS = ["tables", "sane_lists", "smarty"]
_ORDERED_MARK_RE = re.compile(r"^(\d{1,9})([.)])(?=\s|$)")
_BLOCK_MARK_RE = re.compile(r"^(?:[-+*](?=\s|$)|[>#]|[-*_](?=(?:\s*[-*_]){2,}\s*$))")


class _LinkTreeprocessor(Treeprocessor):
    def __init__(self, md: markdown.Markdown, ext: "GuideLinkExtension") -> None:
        super().__init__(md)
        self.ext = ext

    def run(self, root: Element) -> None:
        if self.ext.rewrite is None:
            return
        for node in root.iter("a"):
            href = node.get("href")
            if not href:
                continue
            new = self.ext.rewrite(href)
            if new is not None:
                node.set("href", new)


class GuideLinkExtension(Extension):
    """Point links between guides at their rendered pages."""

    def __init__(self, **kwargs: object) -> None:
        self.rewrite: LinkRewriter | None = None
        super().__init__(**kwargs)

    def extendMarkdown(self, md: markdown.Markdown) -> None:  # noqa: N802
        md.treeprocessors.register(_LinkTreeprocessor(md, self), "guidectl_links", 5)


class _ProseRenderer:
    def __init__(self) -> None:
        self.links = GuideLinkExtension()
        self.md = markdown.Markdown(extensions=[*_PROSE_EXTENSIONS, self.links], output_format="html")

    def block(self, text: str, rewrite: LinkRewriter | None) -> str:
        self.links.rewrite = rewrite
        try:
            return self.md.reset().convert(text)
        finally:
            self.links.rewrite = None

    def inline(self, text: str) -> str:
        """Inline markup only; a leading list, quote or rule marker is kept as text."""
        text = _ORDERED_MARK_RE.sub(r"\1\\\2", text, count=1)
        text = _BLOCK_MARK_RE.sub(lambda m: "\\" + m.group(0), text, count=1)
        out = self.md.reset().convert(text)
        if out.startswith("<p>") and out.endswith("</p>"):
            out = out[3:-4]
        return out


def _code_html(block: Block) -> str:
    lang = block.language.split()[0] if block.language else ""
    cls = f' class="language-{html.escape(lang, quote=True)}"' if lang else ""
    return f"<pre><code{cls}>{html.escape(block.text)}\n</code></pre>"


def _blocks_html(
    renderer: _ProseRenderer,
    blocks: Iterable[Block],
    rewrite: LinkRewriter | None,
    anchor_for: Callable[[str], str],
    level_shift: int = 0,
) -> str:
    parts: list[str] = []
    for block in blocks:
        if block.kind == "prose":
            parts.append(renderer.block(block.text, rewrite))
        elif block.kind == "code":
            parts.append(_code_html(block))
        else:
            level = min(block.level + level_shift, 6)
            parts.append(f'<h{level} id="{anchor_for(block.anchor)}">{renderer.inline(block.text)}</h{level}>')
    return "\n".join(parts)


def _toc_view(renderer: _ProseRenderer, entries: Iterable[TocEntry]) -> list[dict[str, object]]:
    return [
        {
            "title": renderer.inline(plain_title(entry.title)),
            "anchor": entry.anchor,
            "children": _toc_view(renderer, entry.children),
        }
        for entry in entries
    ]


def _page_rewriter(bundle: Bundle, guide: Guide, prefix: str) -> LinkRewriter:
    def rewrite(href: str) -> str | None:
        resolved = resolve_guide_link(bundle, guide, href)
        if resolved is None:
            return None
        target, fragment = resolved
        if target.slug == guide.slug and not href.partition("#")[0]:
            return None
        page = posixpath.join(prefix, "guides", f"{target.slug}.html")
        return f"{page}#{fragment}" if fragment else page

    return rewrite


def _environment() -> Environment:
    return Environment(
        loader=PackageLoader("guidectl.render", "templates"),
        autoescape=True,
        undefined=StrictUndefined,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )


def _guide_view(renderer: _ProseRenderer, bundle: Bundle, guide: Guide, toc_depth: int, prefix: str) -> dict[str, object]:
    rewrite = _page_rewriter(bundle, guide, prefix)
    chapters = [
        {
            "title": renderer.inline(chapter.title),
            "level": chapter.level,
            "anchor": chapter.anchor,
            "html": _blocks_html(renderer, chapter.blocks, rewrite, str),
        }
        for chapter in guide.chapters
    ]
    return {
        "slug": guide.slug,
        "title": guide.title,
        "source": guide.source,
        "description": str(guide.meta.get("description", "")),
        "intro_html": _blocks_html(renderer, guide.intro, rewrite, str),
        "chapters": chapters,
        "title_anchor": slugify(guide.title),
        "toc": _toc_view(renderer, build_toc(guide, toc_depth)),
    }


def _combined_view(renderer: _ProseRenderer, bundle: Bundle, toc_depth: int) -> dict[str, object]:
    anchors = combined_anchors(bundle)
    sections: list[dict[str, object]] = []
    for guide in bundle.guides:
        local = anchors[guide.slug]
        rewrite = combined_link_rewriter(bundle, guide, anchors)
        mapped = local.__getitem__
        sections.append(
            {
                "title": guide.title,
                "anchor": local[""],
                "intro_html": _blocks_html(renderer, guide.intro, rewrite, mapped, 1),
                "chapters": [
                    {
                        "title": renderer.inline(chapter.title),
                        "level": min(chapter.level + 1, 6),
                        "anchor": local[chapter.anchor],
                        "html": _blocks_html(renderer, chapter.blocks, rewrite, mapped, 1),
                    }
                    for chapter in guide.chapters
                ],
            }
        )
    toc = nest(row for row in combined_rows(bundle, anchors) if row[0] <= toc_depth + 1)
    return {"sections": sections, "toc": _toc_view(renderer, toc)}


def render_site(bundle: Bundle, toc_depth: int = 3) -> dict[str, str]:
    """Return ``{relative path: html}`` for the whole site; writing is left to the caller."""
    env = _environment()
    renderer = _ProseRenderer()
    nav = [{"slug": g.slug, "title": g.title} for g in bundle.guides]
    pages: dict[str, str] = {}

    index_guides = [
        {
            "slug": guide.slug,
            "title": guide.title,
            "description": str(guide.meta.get("description", "")),
            "toc": _toc_view(renderer, build_toc(guide, min(toc_depth, 2))),
        }
        for guide in bundle.guides
    ]
    pages["index.html"] = env.get_template("index.html.j2").render(
        bundle_title=bundle.title, nav=nav, prefix="", current="", guides=index_guides
    )
    for guide in bundle.guides:
        view = _guide_view(renderer, bundle, guide, toc_depth, "..")
        pages[f"guides/{guide.slug}.html"] = env.get_template("guide.html.j2").render(
            bundle_title=bundle.title, nav=nav, prefix="../", current=guide.slug, guide=view
        )
    combined = _combined_view(renderer, bundle, toc_depth)
    pages["all.html"] = env.get_template("all.html.j2").render(
        bundle_title=bundle.title, nav=nav, prefix="", current="all", **combined
    )
    return pages
