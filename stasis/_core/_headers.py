from __future__ import annotations

from typing import Any, Iterable, Iterator, List, Mapping, MutableMapping, Optional, Tuple, Union

__all__ = ("Headers",)


class Headers(MutableMapping[str, str]):
    """
    Case-insensitive, insertion-ordered header mapping.

    Names are stored lowercased. A name may carry several values; reading it
    joins them with ", ". Assigning a name replaces all of its values.
    """

    def __init__(self, headers: Mapping[str, Union[str, List[str]]] | None = None) -> None:
        self._headers = {k.lower(): ([v] if isinstance(v, str) else v[:]) for k, v in (headers or {}).items()}

    @classmethod
    def from_raw(cls, raw_headers: Iterable[Tuple[str, str]]) -> "Headers":
        headers = cls()
        for key, value in raw_headers:
            headers.add(key, value)
        return headers

    def add(self, key: str, value: str) -> None:
        self._headers.setdefault(key.lower(), []).append(value)

    def get_list(self, key: str) -> Optional[List[str]]:
        return self._headers.get(key.lower(), None)

    def raw_items(self) -> List[Tuple[str, str]]:
        return [(key, value) for key, values in self._headers.items() for value in values]

    def copy(self) -> "Headers":
        return Headers(self._headers)

    def __getitem__(self, key: str) -> str:
        return ", ".join(self._headers[key.lower()])

    def __setitem__(self, key: str, value: str) -> None:
        self._headers[key.lower()] = [value]

    def __delitem__(self, key: str) -> None:
        del self._headers[key.lower()]

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and key.lower() in self._headers

    def __iter__(self) -> Iterator[str]:
        return iter(self._headers)

    def __len__(self) -> int:
        return len(self._headers)

    def __repr__(self) -> str:
        return repr(self._headers)

    def __str__(self) -> str:
        return str(self._headers)

    def __eq__(self, other_headers: Any) -> bool:
        return isinstance(other_headers, Headers) and self._headers == other_headers._headers
