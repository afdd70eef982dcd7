"""Filter condition primitives for table range scans."""

from __future__ import annotations

from collections.abc import Sequence as SequenceABC
from dataclasses import dataclass
from typing import Any, Sequence

COMPARISON_OPERATORS = ("eq", "ne", "lt", "le", "gt", "ge")


@dataclass(frozen=True)
class Condition:
    """Represents one comparison against a key column or property.

    Attributes:
        col: Column name (`PartitionKey`, `RowKey`, or a property name).
        op: Comparison operator, one of `COMPARISON_OPERATORS`.
        value: Right-hand value.
    """

    col: str
    op: str
    value: Any = None

    def __post_init__(self) -> None:
        if self.op not in COMPARISON_OPERATORS:
            raise ValueError(
                f"Unsupported operator {self.op!r}. Supported: {list(COMPARISON_OPERATORS)}"
            )


@dataclass(frozen=True)
class ConditionGroup:
    """Represents a grouped logical expression (`and`/`or`)."""

    operator: str
    items: tuple["WhereExpression", ...]


@dataclass(frozen=True)
class NotCondition:
    """Represents a negated expression."""

    item: "WhereExpression"


WhereExpression = Condition | ConditionGroup | NotCondition


class C:
    """Fluent condition factory methods."""

    @staticmethod
    def eq(col: str, val: Any) -> Condition:
        """Build `col eq value` condition."""

        return Condition(col=col, op="eq", value=val)

    @staticmethod
    def ne(col: str, val: Any) -> Condition:
        """Build `col ne value` condition."""

        return Condition(col=col, op="ne", value=val)

    @staticmethod
    def lt(col: str, val: Any) -> Condition:
        """Build `col lt value` condition."""

        return Condition(col=col, op="lt", value=val)

    @staticmethod
    def le(col: str, val: Any) -> Condition:
        """Build `col le value` condition."""

        return Condition(col=col, op="le", value=val)

    @staticmethod
    def gt(col: str, val: Any) -> Condition:
        """Build `col gt value` condition."""

        return Condition(col=col, op="gt", value=val)

    @staticmethod
    def ge(col: str, val: Any) -> Condition:
        """Build `col ge value` condition."""

        return Condition(col=col, op="ge", value=val)

    @staticmethod
    def and_(*items: WhereExpression | Sequence[WhereExpression]) -> ConditionGroup:
        """Build a grouped `and` expression."""

        return ConditionGroup(operator="and", items=C._normalize_group_items(items))

    @staticmethod
    def or_(*items: WhereExpression | Sequence[WhereExpression]) -> ConditionGroup:
        """Build a grouped `or` expression."""

        return ConditionGroup(operator="or", items=C._normalize_group_items(items))

    @staticmethod
    def not_(item: WhereExpression) -> NotCondition:
        """Build a negated expression."""

        C._ensure_expr(item)
        return NotCondition(item=item)

    @staticmethod
    def _normalize_group_items(
        items: Sequence[WhereExpression | Sequence[WhereExpression]],
    ) -> tuple[WhereExpression, ...]:
        normalized_input: Sequence[WhereExpression | Sequence[WhereExpression]]
        if (
            len(items) == 1
            and isinstance(items[0], SequenceABC)
            and not isinstance(
                items[0], (str, bytes, Condition, ConditionGroup, NotCondition)
            )
        ):
            normalized_input = items[0]
        else:
            normalized_input = items

        normalized: list[WhereExpression] = []
        for item in normalized_input:
            C._ensure_expr(item)
            normalized.append(item)

        if not normalized:
            raise ValueError("Grouped condition must contain at least one expression.")
        return tuple(normalized)

    @staticmethod
    def _ensure_expr(item: Any) -> None:
        if not isinstance(item, (Condition, ConditionGroup, NotCondition)):
            raise TypeError(
                "Expression must be Condition, ConditionGroup, or NotCondition."
            )
