"""
Core data structures for request context handling.

Provides:
- MultiDict: Multi-value dictionary for query parameters
- Headers: Case-insensitive header access
- URL helpers: merging query parameters into absolute or relative URLs
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Mapping, Optional, Tuple
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit


# ============================================================================
# MultiDict
# ============================================================================

class MultiDict(Mapping[str, List[str]]):
    """
    Read-only dictionary that supports multiple values per key.

    Used for query parameters where keys can repeat.
    """

    def __init__(self, items: Optional[List[Tuple[str, str]]] = None):
        self._data: Dict[str, List[str]] = {}
        for key, value in items or []:
            self._data.setdefault(key, []).append(value)

    @classmethod
    def from_query_string(cls, query_string: str) -> MultiDict:
        return cls(parse_qsl(query_string, keep_blank_values=True))

    def __getitem__(self, key: str) -> List[str]:
        return self._data[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"MultiDict({self._data})"

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        """Get first value for a key."""
        values = self._data.get(key)
        return values[0] if values else default

    def get_all(self, key: str) -> List[str]:
        """Get all values for a key."""
        return list(self._data.get(key, []))


# ============================================================================
# Headers
# ============================================================================

@dataclass
class Headers:
    """
    Case-insensitive header access over raw ASGI header pairs.
    """

    raw: List[Tuple[bytes, bytes]] = field(default_factory=list)
    _index: Dict[str, List[bytes]] = field(default_factory=dict, init=False, repr=False)

    def __post_init__(self):
        self._index = {}
        for name, value in self.raw:
            self._index.setdefault(name.decode("latin-1").lower(), []).append(value)

    def get(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """Get first value for header (case-insensitive)."""
        values = self._index.get(name.lower())
        if values:
            return values[0].decode("latin-1")
        return default

    def get_all(self, name: str) -> List[str]:
        return [value.decode("latin-1") for value in self._index.get(name.lower(), [])]

    def __contains__(self, name: str) -> bool:
        return name.lower() in self._index

    def __repr__(self) -> str:
        items = [(n.decode("latin-1"), v.decode("latin-1")) for n, v in self.raw]
        return f"Headers({items})"


# ============================================================================
# URL helpers
# ============================================================================

def with_params(url: str, **params: str) -> str:
    """
    Return ``url`` with ``params`` merged into its query string.

    Existing parameters are kept; a parameter given here replaces any
    existing value for the same key. Works for relative URLs.

    Example:
        >>> with_params("/callback?x=1", client_name="cas")
        '/callback?x=1&client_name=cas'
    """
    parts = urlsplit(url)
    query = [(k, v) for k, v in parse_qsl(parts.query, keep_blank_values=True) if k not in params]
    query.extend(params.items())
    return urlunsplit((parts.scheme, parts.netloc, parts.path, urlencode(query), parts.fragment))
