"""Search console package."""

from license_calculator.search.index import SearchIndex, match, tokenize
from license_calculator.search.navigator import NavKey, SelectionNavigator
from license_calculator.search.console import SearchConsole

__all__ = [
    "NavKey",
    "SearchConsole",
    "SearchIndex",
    "SelectionNavigator",
    "match",
    "tokenize",
]
