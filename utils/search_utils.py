"""
utils/search_utils.py

Purpose: Accent-insensitive listing search

- Text normalization for Vietnamese titles
- Keyword extraction stored on listings
- Match predicate and relevance scoring used by free-text search
"""

import re
from typing import List

from utils.format_utils import strip_accents

_TOKEN_RE = re.compile(r"[0-9a-z]+")


def normalize_text(text: str) -> str:
    """Lowercases and strips diacritics."""
    return strip_accents(text or "").lower()


def tokenize(text: str) -> List[str]:
    return _TOKEN_RE.findall(normalize_text(text))


def build_keywords(title: str) -> List[str]:
    """
    Builds the keyword list stored on a listing: unique normalized tokens
    of the title in order of appearance.
    """
    seen = []
    for token in tokenize(title):
        if token not in seen:
            seen.append(token)
    return seen


def is_search_match(title: str, query: str) -> bool:
    """
    True if every query token is a prefix of some title token.

    "ip 15" matches "Bán iPhone 15 Pro", "dien thoai" matches "Điện thoại".
    """
    query_tokens = tokenize(query)
    if not query_tokens:
        return False

    title_tokens = tokenize(title)
    return all(
        any(t.startswith(q) for t in title_tokens)
        for q in query_tokens
    )


def calculate_relevance_score(title: str, query: str) -> int:
    """
    Scores how well a title matches a query. Higher is better.

    Whole-phrase hits outrank prefix hits, and a title starting with the
    query outranks one containing it later.
    """
    norm_title = normalize_text(title)
    norm_query = " ".join(tokenize(query))
    if not norm_query:
        return 0

    title_tokens = tokenize(title)
    score = 0

    if norm_title == norm_query:
        score += 100
    if norm_title.startswith(norm_query):
        score += 50
    elif norm_query in norm_title:
        score += 30

    for q in tokenize(query):
        if q in title_tokens:
            score += 10
        elif any(t.startswith(q) for t in title_tokens):
            score += 5

    return score
