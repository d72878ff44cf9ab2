"""
Lesson content normalizer.

Turns rich-text editor HTML into a single line of plain text: markup
removed, entities decoded, whitespace collapsed. Uses a real HTML parser
so malformed or unbalanced markup still yields its text.

Dependencies: bs4
System role: First stage of lesson indexing
"""

import html

from bs4 import BeautifulSoup, Comment
from bs4.exceptions import ParserRejectedMarkup

# Elements whose boundaries separate words in the rendered text
BLOCK_TAGS = [
    "address", "article", "aside", "blockquote", "br", "dd", "div", "dl", "dt",
    "figcaption", "figure", "footer", "h1", "h2", "h3", "h4", "h5", "h6",
    "header", "hr", "li", "main", "nav", "ol", "p", "pre", "section", "table",
    "tbody", "td", "tfoot", "th", "thead", "tr", "ul",
]

# Elements whose text is never lesson content
DROPPED_TAGS = ["script", "style", "template", "noscript"]


def normalize_content(raw: str) -> str:
    """
    Strip markup from a rich-text string.

    Deterministic and total for any string input.

    Args:
        raw: HTML or plain text

    Returns:
        str: Plain text with single spaces, trimmed
    """
    if not raw:
        return ""

    try:
        soup = BeautifulSoup(raw, "html.parser")
    except ParserRejectedMarkup:
        # Unparseable declarations: keep every character as text
        soup = BeautifulSoup(html.escape(raw), "html.parser")

    for tag in soup.find_all(DROPPED_TAGS):
        tag.decompose()
    for comment in soup.find_all(string=lambda text: isinstance(text, Comment)):
        comment.extract()
    for tag in soup.find_all(BLOCK_TAGS):
        tag.insert_before(" ")
        tag.insert_after(" ")

    # str.split() also treats the decoded &nbsp; (U+00A0) as whitespace
    return " ".join(soup.get_text().split())


def compose_lesson_text(title: str, description: str, content: str) -> str:
    """
    Build the indexed text for a lesson from its title, description and body.

    Args:
        title: Lesson title
        description: Short lesson description
        content: Rich-text lesson body

    Returns:
        str: Normalized plain text covering all three fields
    """
    return normalize_content(f"{title}\n\n{description}\n\n{content}")
