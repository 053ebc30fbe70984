"""Menu container extraction and anchor-text collection"""

import re
from typing import List, Set

from bs4 import BeautifulSoup

from .config import DEFAULT_CONTAINER_SELECTOR, DISABLED_PREFIX, DISABLED_SELECTOR
from .models import ContainerExtract

_WHITESPACE = re.compile(r"\s+")


def _clean_text(text: str) -> str:
    return _WHITESPACE.sub(" ", text).strip()


def extract_container(html: str, selector: str = DEFAULT_CONTAINER_SELECTOR) -> ContainerExtract:
    """Inner markup of the first element matching ``selector``"""
    if not html:
        return ContainerExtract(missing=True)
    soup = BeautifulSoup(html, "lxml")
    element = soup.select_one(selector)
    if element is None:
        return ContainerExtract(missing=True)
    return ContainerExtract(missing=False, inner_html=element.decode_contents())


def extract_anchor_texts(inner_html: str) -> List[str]:
    """
    Ordered anchor texts of a menu fragment.

    Anchors inside disabled entries come first, prefixed with
    ``[DISABLED]``; every other anchor follows in document order. An anchor
    reported as disabled is not repeated as a plain entry.
    """
    if not inner_html:
        return []
    soup = BeautifulSoup(inner_html, "lxml")
    texts: List[str] = []
    processed: Set[int] = set()

    for element in soup.select(DISABLED_SELECTOR):
        anchor = element.find("a")
        if anchor is None or id(anchor) in processed:
            continue
        text = _clean_text(anchor.get_text())
        if text:
            texts.append(f"{DISABLED_PREFIX} {text}")
            processed.add(id(anchor))

    for anchor in soup.find_all("a"):
        if id(anchor) in processed:
            continue
        text = _clean_text(anchor.get_text())
        if text:
            texts.append(text)

    return texts
