"""
Token-subset search.

A query matches an item when every query word is a substring of some word
of the item's name, case-insensitively. Word order does not matter, so
"pro adobe" finds "Adobe Creative Cloud Pro".

Results keep Store order; there is no ranking.

An empty query is not "show everything": it hides the dropdown. A query
with no matches is a different state that renders a disabled placeholder.
"""

from typing import Iterable, Sequence

from license_calculator.models.item import Item, MatchResult, MatchState


def tokenize(text: str) -> list[str]:
    return (text or "").lower().split()


def _name_matches(name_tokens: Sequence[str], query_tokens: Sequence[str]) -> bool:
    return all(
        any(q in word for word in name_tokens)
        for q in query_tokens
    )


def match(items: Iterable[Item], query: str) -> list[Item]:
    """Ordered subsequence of `items` matching `query` ([] for an empty query)."""
    query_tokens = tokenize(query)
    if not query_tokens:
        return []
    return [item for item in items if _name_matches(tokenize(item.name), query_tokens)]


class SearchIndex:
    """
    Pre-tokenized view over the Store entries.

    Rebuilt on every Store notification; each search is then a scan over
    already lower-cased words.
    """

    def __init__(self, entries: Iterable[tuple[str, Item]] = ()):
        self._entries: list[tuple[str, Item, list[str]]] = []
        self.rebuild(entries)

    def __len__(self) -> int:
        return len(self._entries)

    def rebuild(self, entries: Iterable[tuple[str, Item]]) -> None:
        self._entries = [(key, item, tokenize(item.name)) for key, item in entries]

    def search(self, query: str) -> MatchResult:
        query_tokens = tokenize(query)
        if not query_tokens:
            return MatchResult(query=query or "", state=MatchState.HIDDEN)

        found = tuple(
            (key, item)
            for key, item, name_tokens in self._entries
            if _name_matches(name_tokens, query_tokens)
        )
        return MatchResult(
            query=query,
            state=MatchState.MATCHES if found else MatchState.EMPTY,
            entries=found,
        )
