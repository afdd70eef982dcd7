"""Mapping between dataclass records and table store rows."""

from __future__ import annotations

from dataclasses import Field, dataclass
from operator import attrgetter
from typing import Any, Callable, Dict, Generic, List, Optional, Sequence, Tuple, Type, TypeVar

from .codecs import from_native, to_native
from .errors import (
    InvalidKeySpecError,
    KeyFieldConversionError,
    MalformedKeyError,
    MissingFieldError,
    MissingValueError,
)
from .field_types import FieldType, normalize_field_type, resolve_annotation
from .keys import assemble_key, disassemble_key, format_key_part, parse_key_part
from .models import DataclassModel, model_fields, model_type_hints, require_dataclass_model
from .selectors import FieldSelector, selector_names
from .types import MutableNativeRow, NativeRow

T = TypeVar("T", bound=DataclassModel)


@dataclass(frozen=True)
class FieldBinding:
    """Resolved description of one record field.

    Attributes:
        name: Dataclass field name.
        field_type: Declared primitive type.
        nullable: Whether the annotation is `Optional[...]`.
        init: Whether the field is accepted by the dataclass `__init__`.
        getter: Reads the field (or the key selector) from a record.
    """

    name: str
    field_type: FieldType
    nullable: bool
    init: bool
    getter: Callable[[Any], Any]


class EntityMapper(Generic[T]):
    """Convert records of one dataclass type to and from store rows.

    The key specification is resolved once here. Partition and row key fields
    are encoded positionally, so the declared order must stay the same between
    writes and reads.
    """

    def __init__(
        self,
        model: Type[T],
        partition_key: Sequence[FieldSelector],
        row_key: Sequence[FieldSelector],
        *,
        partition_key_names: Optional[Sequence[str]] = None,
        row_key_names: Optional[Sequence[str]] = None,
    ) -> None:
        """Resolve field bindings for `model`.

        Args:
            model: Dataclass record type.
            partition_key: Ordered field names or attribute selectors.
            row_key: Ordered field names or attribute selectors.
            partition_key_names: Explicit field names for `partition_key`. When
                given, the selectors only read values and may compute them.
            row_key_names: Explicit field names for `row_key`.

        Raises:
            TypeError: If `model` is not a dataclass.
            InvalidKeySpecError: If the key specification is invalid.
            UnsupportedTypeError: If any field has an unsupported annotation.
        """

        require_dataclass_model(model)
        self.model = model

        fields = model_fields(model)
        hints = model_type_hints(model)
        self._init_flags = {field.name: field.init for field in fields}
        self._field_types: Dict[str, Tuple[FieldType, bool]] = {
            field.name: _resolve_field(field, hints) for field in fields
        }

        self.partition_bindings = self._key_bindings(
            "partition", partition_key, partition_key_names
        )
        self.row_bindings = self._key_bindings("row", row_key, row_key_names)

        partition_names = [binding.name for binding in self.partition_bindings]
        row_names = [binding.name for binding in self.row_bindings]
        overlap = sorted(set(partition_names) & set(row_names))
        if overlap:
            raise InvalidKeySpecError(
                f"Fields {overlap} cannot be part of both the partition and row key."
            )

        key_names = set(partition_names) | set(row_names)
        self.value_bindings = [
            self._binding(field.name, attrgetter(field.name))
            for field in fields
            if field.name not in key_names
        ]
        self.field_names = [field.name for field in fields]

    @property
    def partition_key_names(self) -> List[str]:
        return [binding.name for binding in self.partition_bindings]

    @property
    def row_key_names(self) -> List[str]:
        return [binding.name for binding in self.row_bindings]

    @property
    def value_names(self) -> List[str]:
        return [binding.name for binding in self.value_bindings]

    def to_row(self, record: T) -> Tuple[str, str, MutableNativeRow]:
        """Derive both store keys and the native values of one record."""

        partition_key, row_key = self.keys_for(record)

        values: MutableNativeRow = {}
        for binding in self.value_bindings:
            value = binding.getter(record)
            if value is None:
                if binding.nullable:
                    continue
                raise MissingValueError(
                    f"Field {binding.name!r} of {self.model.__name__} is None."
                )
            values[binding.name] = to_native(value, binding.field_type)
        return partition_key, row_key, values

    def from_row(self, partition_key: str, row_key: str, values: NativeRow) -> T:
        """Rebuild a record from its store keys and native values.

        Raises:
            MalformedKeyError: If a key has the wrong number of parts.
            KeyFieldConversionError: If a key part cannot be parsed.
            MissingFieldError: If a non-optional value field is absent.
            MissingValueError: If a native value has the wrong kind.
        """

        data: Dict[str, Any] = {}
        data.update(self._decode_key("partition", partition_key, self.partition_bindings))
        data.update(self._decode_key("row", row_key, self.row_bindings))

        for binding in self.value_bindings:
            native = values.get(binding.name)
            if native is None:
                if binding.nullable:
                    data[binding.name] = None
                    continue
                raise MissingFieldError(
                    f"Row ({partition_key!r}, {row_key!r}) has no value for "
                    f"field {binding.name!r}."
                )
            data[binding.name] = from_native(native, binding.field_type)
        return self._build(data)

    def keys_for(self, record: T) -> Tuple[str, str]:
        """Return the `(partition_key, row_key)` pair of a record."""

        self._require_instance(record)
        return (
            self._encode_key(record, self.partition_bindings),
            self._encode_key(record, self.row_bindings),
        )

    def partition_key_for(self, *values: Any) -> str:
        """Build a partition key from raw values in declared order."""

        return self._key_from_values("partition", values, self.partition_bindings)

    def row_key_for(self, *values: Any) -> str:
        """Build a row key from raw values in declared order."""

        return self._key_from_values("row", values, self.row_bindings)

    def _key_bindings(
        self,
        role: str,
        selectors: Sequence[FieldSelector],
        explicit_names: Optional[Sequence[str]],
    ) -> List[FieldBinding]:
        if isinstance(selectors, str) or callable(selectors):
            selectors = [selectors]  # type: ignore[list-item]
        selectors = list(selectors)
        if not selectors:
            raise InvalidKeySpecError(f"The {role} key needs at least one field.")

        if explicit_names is None:
            names = selector_names(selectors)
            getters: List[Callable[[Any], Any]] = [attrgetter(name) for name in names]
        else:
            names = list(explicit_names)
            if len(names) != len(selectors):
                raise InvalidKeySpecError(
                    f"Got {len(selectors)} {role} key selector(s) but "
                    f"{len(names)} field name(s)."
                )
            getters = [
                attrgetter(selector) if isinstance(selector, str) else selector
                for selector in selectors
            ]

        if len(set(names)) != len(names):
            raise InvalidKeySpecError(f"The {role} key lists a field twice: {names}.")
        for name in names:
            if name not in self._field_types:
                raise InvalidKeySpecError(
                    f"{self.model.__name__} has no field {name!r} for the {role} key."
                )
        return [self._binding(name, getter) for name, getter in zip(names, getters)]

    def _binding(self, name: str, getter: Callable[[Any], Any]) -> FieldBinding:
        field_type, nullable = self._field_types[name]
        return FieldBinding(
            name=name,
            field_type=field_type,
            nullable=nullable,
            init=self._init_flags[name],
            getter=getter,
        )

    def _encode_key(self, record: T, bindings: Sequence[FieldBinding]) -> str:
        parts = []
        for binding in bindings:
            value = binding.getter(record)
            if value is None:
                raise MissingValueError(
                    f"Key field {binding.name!r} of {self.model.__name__} is None."
                )
            parts.append(format_key_part(value, binding.field_type))
        return assemble_key(parts)

    def _key_from_values(
        self,
        role: str,
        values: Sequence[Any],
        bindings: Sequence[FieldBinding],
    ) -> str:
        if len(values) != len(bindings):
            raise ValueError(
                f"The {role} key of {self.model.__name__} has {len(bindings)} "
                f"part(s), got {len(values)} value(s)."
            )
        return assemble_key(
            [format_key_part(value, binding.field_type) for value, binding in zip(values, bindings)]
        )

    def _decode_key(
        self,
        role: str,
        key: str,
        bindings: Sequence[FieldBinding],
    ) -> Dict[str, Any]:
        try:
            parts = disassemble_key(key, len(bindings))
        except MalformedKeyError as exc:
            raise MalformedKeyError(
                f"Cannot split {role} key {key!r} into fields "
                f"{[binding.name for binding in bindings]}."
            ) from exc

        decoded: Dict[str, Any] = {}
        for binding, part in zip(bindings, parts):
            try:
                decoded[binding.name] = parse_key_part(part, binding.field_type)
            except KeyFieldConversionError as exc:
                raise KeyFieldConversionError(
                    f"Cannot convert {role} key part {part!r} to field "
                    f"{binding.name!r} ({binding.field_type.value})."
                ) from exc
        return decoded

    def _build(self, data: Dict[str, Any]) -> T:
        init_kwargs = {name: value for name, value in data.items() if self._init_flags[name]}
        record = self.model(**init_kwargs)  # type: ignore[call-arg]
        for name, value in data.items():
            if not self._init_flags[name]:
                object.__setattr__(record, name, value)
        return record

    def _require_instance(self, record: Any) -> None:
        if not isinstance(record, self.model):
            raise TypeError(
                f"Expected {self.model.__name__} instance, got {type(record).__name__}."
            )


def _resolve_field(field: Field[Any], hints: Dict[str, Any]) -> Tuple[FieldType, bool]:
    field_type, nullable = resolve_annotation(hints.get(field.name, field.type))
    override = field.metadata.get("field_type")
    if override is not None:
        field_type = normalize_field_type(override)
    return field_type, nullable
