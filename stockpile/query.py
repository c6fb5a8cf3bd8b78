"""Search-query composition for a (topic, subtopic, category) triple."""

from __future__ import annotations

from typing import Optional

DEFAULT_LOCALE = "ja"

# Keyword groups appended per category hint, keyed by locale.
CATEGORY_KEYWORDS: dict[str, dict[str, str]] = {
    "ja": {
        "history": "歴史 沿革",
        "trivia": "豆知識 トリビア",
        "background": "背景 由来",
        "technical": "仕組み 技術",
        "cultural": "文化 意味",
    },
    "en": {
        "history": "history origins",
        "trivia": "facts trivia",
        "background": "background origin",
        "technical": "mechanism technology",
        "cultural": "culture meaning",
    },
}

CATEGORIES = tuple(CATEGORY_KEYWORDS[DEFAULT_LOCALE])


def compose_query(
    topic_name: str,
    subtopic_name: str,
    category: Optional[str] = None,
    locale: str = DEFAULT_LOCALE,
) -> str:
    """Return the search query for a subtopic.

    The query is always ``"{topic_name} {subtopic_name}"``.  When *category*
    names one of :data:`CATEGORIES` the locale's keyword group is appended;
    unknown or empty hints append nothing.  Unknown locales use the default
    keyword table.

    Examples::

        >>> compose_query("Japan", "Economy")
        'Japan Economy'
        >>> compose_query("Japan", "Economy", "technical", locale="en")
        'Japan Economy mechanism technology'
    """
    query = f"{topic_name} {subtopic_name}"
    if not category:
        return query

    keywords = CATEGORY_KEYWORDS.get(locale, CATEGORY_KEYWORDS[DEFAULT_LOCALE])
    suffix = keywords.get(category.strip().lower())
    if suffix:
        query = f"{query} {suffix}"
    return query
