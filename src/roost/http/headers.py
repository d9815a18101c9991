"""Read-only multi-value mappings for request headers and query strings.

Both decode once at construction and keep every value, so
``mapping[key]`` gives the first value and ``get_list`` gives all.
"""

from collections.abc import Iterable, Iterator, Mapping
from urllib.parse import parse_qsl


class MultiValueMap(Mapping[str, str]):
    """Immutable ``str -> [str, ...]`` mapping with first-value lookup."""

    __slots__ = ("_data", "_fold")

    def __init__(self, pairs: Iterable[tuple[str, str]] = (), *, fold_case: bool = False) -> None:
        data: dict[str, list[str]] = {}
        for key, value in pairs:
            if fold_case:
                key = key.lower()
            data.setdefault(key, []).append(value)
        self._data = data
        self._fold = fold_case

    def _key(self, key: str) -> str:
        return key.lower() if self._fold else key

    def __getitem__(self, key: str) -> str:
        return self._data[self._key(key)][0]

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self._key(key) in self._data

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        items = ", ".join(f"{k!r}: {v[0]!r}" for k, v in self._data.items())
        return f"{type(self).__name__}({{{items}}})"

    def get_list(self, key: str) -> list[str]:
        """Return all values for *key*."""
        return list(self._data.get(self._key(key), ()))


class Headers(MultiValueMap):
    """Case-insensitive request headers built from raw ASGI byte pairs."""

    __slots__ = ("_raw",)

    def __init__(self, raw: tuple[tuple[bytes, bytes], ...] = ()) -> None:
        super().__init__(
            ((name.decode("latin-1"), value.decode("latin-1")) for name, value in raw),
            fold_case=True,
        )
        self._raw = raw

    @property
    def raw(self) -> tuple[tuple[bytes, bytes], ...]:
        """Raw header byte pairs as received from the server."""
        return self._raw


class QueryParams(MultiValueMap):
    """Parsed query string; blank values are kept."""

    __slots__ = ("_raw",)

    def __init__(self, query_string: bytes = b"") -> None:
        super().__init__(parse_qsl(query_string.decode("latin-1"), keep_blank_values=True))
        self._raw = query_string

    @property
    def raw(self) -> bytes:
        return self._raw
