"""Store-native property values.

Table stores keep non-key properties as typed values drawn from a small fixed
set of kinds. `NativeValue` is the discriminated wrapper the mapper produces
and store adapters persist.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class NativeKind(str, Enum):
    """Property kinds understood by the table store."""

    BOOLEAN = "Edm.Boolean"
    BINARY = "Edm.Binary"
    DATETIME = "Edm.DateTime"
    DOUBLE = "Edm.Double"
    GUID = "Edm.Guid"
    INT32 = "Edm.Int32"
    INT64 = "Edm.Int64"
    STRING = "Edm.String"


@dataclass(frozen=True)
class NativeValue:
    """One typed property value as stored by a table backend.

    Attributes:
        kind: Native kind the payload was written as.
        value: Payload; `None` means the slot is empty.
    """

    kind: NativeKind
    value: Any = None

    def slot(self, kind: NativeKind) -> Optional[Any]:
        """Return the payload when it was stored as `kind`, otherwise `None`."""

        if self.kind is not kind:
            return None
        return self.value
