"""Range-scan filter builders and OData filter compilation.

Repositories describe scans with `Condition` trees. Adapters for remote
stores compile them into the store's filter syntax with this module; the
in-memory adapter evaluates them directly.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List

from .conditions import C, Condition, ConditionGroup, NotCondition, WhereExpression
from .types import PARTITION_KEY, ROW_KEY


@dataclass(frozen=True)
class CompiledFilter:
    """Represents a compiled filter string with its named parameters."""

    expression: str
    parameters: Dict[str, Any] = field(default_factory=dict)


class _ParamNameGenerator:
    """Generates safe, unique parameter names from column hints."""

    def __init__(self) -> None:
        self._counter = 0

    def next(self, base: str) -> str:
        self._counter += 1
        safe = "".join(ch if ch.isalnum() else "_" for ch in base)
        return f"{safe}_{self._counter}"


def partition_range(partition_from: str, partition_to: str) -> WhereExpression:
    """Rows whose partition key lies in `[partition_from, partition_to)`."""

    return C.and_(C.ge(PARTITION_KEY, partition_from), C.lt(PARTITION_KEY, partition_to))


def row_range(partition_key: str, row_from: str, row_to: str) -> WhereExpression:
    """Rows of one partition whose row key lies in `[row_from, row_to)`."""

    return C.and_(
        C.eq(PARTITION_KEY, partition_key),
        C.ge(ROW_KEY, row_from),
        C.lt(ROW_KEY, row_to),
    )


def compile_filter(where: WhereExpression) -> CompiledFilter:
    """Compile a condition tree into an OData filter with `@name` parameters.

    Every token is separated by a single space, including parentheses. The
    Azure SDK substitutes parameters by splitting the filter on spaces, so a
    parameter must never touch a parenthesis.

    Args:
        where: Condition, group, or negation.

    Returns:
        Filter expression and the parameter values it references.
    """

    generator = _ParamNameGenerator()
    parameters: Dict[str, Any] = {}
    expression = _compile(where, generator, parameters)
    return CompiledFilter(expression=expression, parameters=parameters)


def _compile(
    expr: WhereExpression,
    generator: _ParamNameGenerator,
    parameters: Dict[str, Any],
) -> str:
    if isinstance(expr, Condition):
        key = generator.next(expr.col)
        parameters[key] = expr.value
        return f"{expr.col} {expr.op} @{key}"

    if isinstance(expr, ConditionGroup):
        clauses: List[str] = [_compile(item, generator, parameters) for item in expr.items]
        if len(clauses) == 1:
            return clauses[0]
        return "( " + f" {expr.operator} ".join(clauses) + " )"

    if isinstance(expr, NotCondition):
        return f"not ( {_compile(expr.item, generator, parameters)} )"

    raise TypeError("Expression must be Condition, ConditionGroup, or NotCondition.")
