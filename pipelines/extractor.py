"""HTML text extraction for toolscout.

Turns raw markup into a bounded, signal-dense text profile: title, meta
description, headings, then the main content block.
"""

import re
import logging
from typing import List

from bs4 import BeautifulSoup

from services.shared.models import ExtractedContent

logger = logging.getLogger(__name__)

# Nodes that never carry readable page content
NON_CONTENT_SELECTOR = (
    'script, style, noscript, iframe, img, svg, [aria-hidden="true"], '
    '.hidden, .visually-hidden, meta, link, head > *'
)

# Probed in order; the first non-empty match is the main content block
CONTENT_SELECTORS = ['main', 'article', '.content', '#content', '.main', '#main']

_WHITESPACE_RE = re.compile(r'\s+')


def collapse_whitespace(text: str) -> str:
    """Collapse runs of whitespace to single spaces and trim."""
    return _WHITESPACE_RE.sub(' ', text or '').strip()


def _text_of(node) -> str:
    return collapse_whitespace(node.get_text(' '))


def _main_content(soup: BeautifulSoup) -> str:
    for selector in CONTENT_SELECTORS:
        node = soup.select_one(selector)
        if node is None:
            continue
        text = _text_of(node)
        if text:
            return text

    body = soup.body
    if body is None:
        return _text_of(soup)
    return _text_of(body)


def extract(html: str) -> ExtractedContent:
    """Extract title, description and prioritized text from raw HTML.

    Missing elements contribute empty strings; this never raises on odd markup.
    """
    soup = BeautifulSoup(html or '', 'html.parser')

    # Title and description live in <head>, which is stripped below
    title = _text_of(soup.title) if soup.title else ''
    description = ''
    meta = soup.find('meta', attrs={'name': 'description'})
    if meta is not None:
        description = collapse_whitespace(meta.get('content', ''))

    for node in soup.select(NON_CONTENT_SELECTOR):
        node.decompose()

    h1_text = collapse_whitespace(' '.join(_text_of(h) for h in soup.find_all('h1')))
    h2_text = collapse_whitespace(' '.join(_text_of(h) for h in soup.find_all('h2')))
    main_text = _main_content(soup)

    parts: List[str] = [title, description, h1_text, h2_text, main_text]
    text = '\n\n'.join(part for part in parts if part)

    logger.debug(f"Extracted {len(text)} characters (title={title!r})")
    return ExtractedContent(title=title, description=description, text=text)
