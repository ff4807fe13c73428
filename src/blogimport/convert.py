"""HTML to Markdown conversion of post content."""

from bs4 import BeautifulSoup
from markdownify import markdownify

from .exceptions import ConversionError
from .utils import collapse_blank_lines

NBSP_ENTITY = "&nbsp;"


def html_to_markdown(html: str) -> str:
    """
    Convert post HTML to Markdown.

    Scripts and styles are dropped before conversion; headings use ATX
    ("#") style.

    Raises:
        ConversionError: The converter failed on this content
    """
    if not html:
        return ""
    try:
        soup = BeautifulSoup(html, "lxml")
        for tag in soup(["script", "style"]):
            tag.decompose()
        body = soup.body if soup.body is not None else soup
        text = markdownify(body.decode_contents(), heading_style="ATX")
    except Exception as e:
        raise ConversionError(str(e)) from e
    return collapse_blank_lines(text).strip() + "\n"


def clean_content(content: str) -> str:
    """Final touch-up applied to every post body."""
    return content.replace(NBSP_ENTITY, " ")
