import bleach
import markdown
from markupsafe import Markup

ALLOWED_TAGS = sorted(set(bleach.sanitizer.ALLOWED_TAGS) | {
    "p", "br", "hr", "pre", "span", "del",
    "h1", "h2", "h3", "h4", "h5", "h6",
    "table", "thead", "tbody", "tr", "th", "td",
})
ALLOWED_ATTRIBUTES = {
    **bleach.sanitizer.ALLOWED_ATTRIBUTES,
    "code": ["class"],
    "th": ["align"],
    "td": ["align"],
}

def render_markdown(text: str) -> Markup:
    html = markdown.markdown(
        text or "",
        extensions=[
            "fenced_code",
            "tables",
            "nl2br",
        ],
    )
    return Markup(bleach.clean(html, tags=ALLOWED_TAGS, attributes=ALLOWED_ATTRIBUTES, strip=True))
