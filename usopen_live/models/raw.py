from typing import Any, List, Optional, Sequence, Union

PathKey = Union[str, int]


class UntrustedRecord:
    """Read-only view over a decoded JSON value from an upstream feed.

    Nothing about the wrapped value is trusted: keys may be missing, lists may
    hold non-objects and scalars may carry the wrong type. Accessors return
    ``None`` (or an empty record / list) instead of raising.
    """

    __slots__ = ("_data",)

    def __init__(self, data: Any = None):
        self._data = data if isinstance(data, dict) else {}

    def __bool__(self) -> bool:
        return bool(self._data)

    def __repr__(self) -> str:
        return f"UntrustedRecord(keys={sorted(self._data)[:8]})"

    def get(self, *path: PathKey) -> Any:
        """Walks dict keys and list indices, returning None on any miss."""
        value: Any = self._data
        for key in path:
            if isinstance(key, int):
                if not isinstance(value, list) or not -len(value) <= key < len(value):
                    return None
                value = value[key]
            elif isinstance(value, dict):
                value = value.get(key)
            else:
                return None
            if value is None:
                return None
        return value

    def text(self, *path: PathKey) -> Optional[str]:
        """Non-empty string at ``path``; numbers are stringified."""
        value = self.get(*path)
        if isinstance(value, bool):
            return None
        if isinstance(value, (int, float)):
            return str(value)
        if isinstance(value, str) and value:
            return value
        return None

    def records(self, *path: PathKey) -> List["UntrustedRecord"]:
        value = self.get(*path)
        if not isinstance(value, list):
            return []
        return [UntrustedRecord(item) for item in value]

    def first_text(self, *paths: Sequence[PathKey]) -> Optional[str]:
        """First non-empty text among ``paths``, in order."""
        for path in paths:
            value = self.text(*path)
            if value is not None:
                return value
        return None

    def first_present(self, *paths: Sequence[PathKey]) -> Any:
        """First value among ``paths`` that is not None, empty, zero or False."""
        for path in paths:
            value = self.get(*path)
            if value not in (None, "", 0, False):
                return value
        return None
