import logging
from typing import Union

from bs4 import BeautifulSoup

HIDDEN_STYLES = ("display: none", "display:none", "visibility: hidden", "visibility:hidden")


def make_soup(page: Union[str, bytes, BeautifulSoup]) -> BeautifulSoup:
    """Parses raw HTML, passing already-parsed documents through untouched."""
    if isinstance(page, BeautifulSoup):
        return page
    return BeautifulSoup(page or "", "html.parser")


def remove_honeypot_links(soup: BeautifulSoup) -> BeautifulSoup:
    """
    Drops schedule anchors hidden with inline styles, so a trap race link is
    never queued for fetching. Mutates and returns `soup`.
    """
    hidden = soup.select(", ".join(f'a[style*="{style}"]' for style in HIDDEN_STYLES))
    for anchor in hidden:
        logging.info(f"Ignoring hidden link: {anchor.get('href', '<no href>')}")
        anchor.decompose()
    return soup
