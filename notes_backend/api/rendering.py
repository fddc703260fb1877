import bleach
import markdown

ALLOWED_TAGS = [
    "h1", "h2", "h3", "h4", "h5", "h6",
    "p", "br", "strong", "em", "b", "i", "u", "s", "del",
    "ol", "ul", "li", "blockquote", "code", "pre", "hr",
    "a", "img", "table", "thead", "tbody", "tr", "th", "td",
]

ALLOWED_ATTRIBUTES = {
    "a": ["href", "title"],
    "img": ["src", "alt", "title"],
}

MARKDOWN_EXTENSIONS = ["extra", "sane_lists"]


# PUBLIC_INTERFACE
def render_markdown(text: str) -> str:
    """
    Render note Markdown to HTML and strip anything outside the allow-list.
    Raw HTML typed into a note is escaped rather than executed.
    """
    html = markdown.markdown(text or "", extensions=MARKDOWN_EXTENSIONS)
    return bleach.clean(html, tags=ALLOWED_TAGS, attributes=ALLOWED_ATTRIBUTES)
