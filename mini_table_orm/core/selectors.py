"""Resolution of key selectors into dataclass field names."""

from __future__ import annotations

from typing import Any, Callable, List, Sequence, Union

from .errors import InvalidKeySpecError

FieldSelector = Union[str, Callable[[Any], Any]]


class _FieldRef:
    __slots__ = ("name",)

    def __init__(self, name: str) -> None:
        self.name = name


class _FieldProbe:
    """Stand-in record that records which attributes a selector reads."""

    def __init__(self) -> None:
        object.__setattr__(self, "_accessed", [])

    def __getattr__(self, name: str) -> _FieldRef:
        if name.startswith("__"):
            raise AttributeError(name)
        self._accessed.append(name)
        return _FieldRef(name)

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError("Key selectors must not assign attributes.")


def selector_name(selector: FieldSelector) -> str:
    """Return the field name a selector reads.

    A selector is either a field name or a callable that returns exactly one
    attribute of its argument, such as `lambda row: row.merchant_id`.

    Raises:
        InvalidKeySpecError: If the selector is not a plain field access.
    """

    if isinstance(selector, str):
        if not selector:
            raise InvalidKeySpecError("Key field names must be non-empty strings.")
        return selector
    if not callable(selector):
        raise InvalidKeySpecError(
            f"Key selector must be a field name or callable, got {type(selector).__name__}."
        )

    probe = _FieldProbe()
    try:
        result = selector(probe)
    except Exception as exc:
        raise InvalidKeySpecError(
            f"Key selector {selector!r} is not a plain field access."
        ) from exc

    accessed = object.__getattribute__(probe, "_accessed")
    if not isinstance(result, _FieldRef) or accessed != [result.name]:
        raise InvalidKeySpecError(
            f"Key selector {selector!r} is not a plain field access."
        )
    return result.name


def selector_names(selectors: Sequence[FieldSelector]) -> List[str]:
    """Resolve every selector in declared order."""

    if isinstance(selectors, (str, bytes)) or callable(selectors):
        selectors = [selectors]  # type: ignore[list-item]
    return [selector_name(selector) for selector in selectors]
