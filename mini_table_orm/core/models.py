"""Model utilities for dataclass record types."""

from __future__ import annotations

from dataclasses import Field, fields, is_dataclass
from functools import lru_cache
from typing import Any, ClassVar, Dict, List, Protocol, Type, get_type_hints

from .errors import UnsupportedTypeError


class DataclassModel(Protocol):
    """Protocol for supported dataclass model types."""

    __dataclass_fields__: ClassVar[dict[str, Any]]


def require_dataclass_model(cls: Type[Any]) -> None:
    """Validate that a class is a dataclass model."""

    if not isinstance(cls, type) or not is_dataclass(cls):
        name = getattr(cls, "__name__", type(cls).__name__)
        raise TypeError(f"{name} must be a dataclass.")


def table_name(model_or_cls: Any) -> str:
    """Resolve table name from model class or instance.

    Uses `__table__` override when present, otherwise the class name.
    """

    cls = model_or_cls if isinstance(model_or_cls, type) else type(model_or_cls)
    name = getattr(cls, "__table__", None)
    return name if isinstance(name, str) and name else cls.__name__


def model_fields(cls: Type[DataclassModel]) -> List[Field[Any]]:
    """Return dataclass fields for a model type."""

    require_dataclass_model(cls)
    return list(fields(cls))


@lru_cache(maxsize=None)
def model_type_hints(cls: Type[Any]) -> Dict[str, Any]:
    """Return resolved field annotations, keeping `Annotated` extras."""

    require_dataclass_model(cls)
    try:
        return dict(get_type_hints(cls, include_extras=True))
    except NameError as exc:
        raise UnsupportedTypeError(
            f"Cannot resolve field annotations of {cls.__name__}: {exc}"
        ) from exc
