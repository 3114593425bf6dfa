"""
Content extraction from rendered HTML.

The WordPress plugin can send a post's rendered HTML instead of separate
title, body and heading fields. This pulls out what clustering compares:
- Title (<title>, else the first <h1>)
- Meta description
- Headings (h1-h6, in document order)
- Visible body text (scripts, styles and navigation chrome dropped)
"""
from typing import List, Optional

from bs4 import BeautifulSoup

from .datatypes import ContentDocument

HEADING_TAGS = ['h1', 'h2', 'h3', 'h4', 'h5', 'h6']
NON_CONTENT_TAGS = ['script', 'style', 'noscript', 'nav', 'header', 'footer', 'aside', 'form']


def document_from_html(
    url: str,
    html: str,
    title: Optional[str] = None,
    meta_description: Optional[str] = None,
    headings: Optional[List[str]] = None,
) -> ContentDocument:
    """
    Build a ContentDocument from HTML.

    Explicit title, meta description and headings take precedence over what
    is found in the markup.
    """
    if not html:
        return ContentDocument(
            url=url,
            title=title or '',
            meta_description=meta_description,
            headings=tuple(headings or ()),
        )

    soup = BeautifulSoup(html, 'html.parser')

    if not title:
        title = extract_title(soup)
    if meta_description is None:
        meta_description = extract_meta_description(soup)
    if not headings:
        headings = extract_headings(soup)

    return ContentDocument(
        url=url,
        title=title or '',
        body=extract_body_text(soup),
        meta_description=meta_description,
        headings=tuple(headings),
    )


def extract_title(soup: BeautifulSoup) -> str:
    if soup.title and soup.title.get_text(strip=True):
        return soup.title.get_text(strip=True)

    h1 = soup.find('h1')
    return h1.get_text(strip=True) if h1 else ''


def extract_meta_description(soup: BeautifulSoup) -> Optional[str]:
    tag = soup.find('meta', attrs={'name': 'description'})
    if tag and tag.get('content'):
        return tag['content'].strip()
    return None


def extract_headings(soup: BeautifulSoup) -> List[str]:
    headings = []
    for tag in soup.find_all(HEADING_TAGS):
        text = tag.get_text(' ', strip=True)
        if text:
            headings.append(text)
    return headings


def extract_body_text(soup: BeautifulSoup) -> str:
    """Visible text of <body> (or the whole fragment), whitespace-collapsed."""
    # decompose() mutates, so strip a copy
    root = BeautifulSoup(str(soup.body or soup), 'html.parser')

    for tag in root.find_all(NON_CONTENT_TAGS):
        tag.decompose()

    return ' '.join(root.get_text(' ').split())
