"""Markdown → HTML for answer articles.

Answers are rendered server-side with markdown-it-py (CommonMark plus GFM
tables, raw HTML disabled) and the article's CSS classes are attached to the
headings, mandatory-clause blockquotes, inline code and tables.
"""

from __future__ import annotations

from markdown_it import MarkdownIt
from markdown_it.common.utils import escapeHtml

#: Tag → class attribute added on the opening token.
ELEMENT_CLASSES: dict[str, str] = {
    "h1": "text-3xl font-extrabold mb-8 text-slate-900 border-b-2 border-slate-50 pb-6",
    "h2": "text-2xl font-bold mt-12 mb-6 text-slate-800 flex items-center gap-3",
    "h3": "text-xl font-bold mt-8 mb-4 text-slate-800",
    "blockquote": "border-l-4 border-red-500 bg-red-50/50 p-6 my-6 rounded-r-2xl italic text-slate-700",
    "table": "min-w-full divide-y divide-slate-200 border border-slate-200 rounded-lg",
    "th": "px-4 py-2 bg-slate-50 font-bold text-slate-700 text-left",
    "td": "px-4 py-2 border-t border-slate-100",
}
CODE_CLASS = "bg-slate-100 text-indigo-600 px-1.5 py-0.5 rounded font-mono text-sm"
TABLE_WRAPPER = '<div class="overflow-x-auto my-8">'


def _open_with_class(md: MarkdownIt, rule: str) -> None:
    def render(self, tokens, idx, options, env):
        token = tokens[idx]
        css = ELEMENT_CLASSES.get(token.tag)
        if css:
            token.attrJoin("class", css)
        html = self.renderToken(tokens, idx, options, env)
        if token.tag == "table":
            html = TABLE_WRAPPER + html
        return html

    md.add_render_rule(rule, render)


def _close_table(self, tokens, idx, options, env):
    return self.renderToken(tokens, idx, options, env) + "</div>\n"


def _code_inline(self, tokens, idx, options, env):
    token = tokens[idx]
    token.attrJoin("class", CODE_CLASS)
    return f"<code{self.renderAttrs(token)}>{escapeHtml(token.content)}</code>"


def _build_renderer() -> MarkdownIt:
    md = MarkdownIt("commonmark", {"html": False}).enable("table")
    for rule in (
        "heading_open", "blockquote_open", "table_open", "th_open", "td_open",
    ):
        _open_with_class(md, rule)
    md.add_render_rule("table_close", _close_table)
    md.add_render_rule("code_inline", _code_inline)
    return md


_RENDERER = _build_renderer()


def render_markdown(text: str) -> str:
    """Render an answer's markdown to styled HTML."""
    return _RENDERER.render(text or "")
