"""Shared value types passed between the harness and its capabilities."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from .capture import ColumnInfo, DbCapture
from .parameters import Parameter
from .text import AutoTruncate

NamedParams = Dict[str, Any]
PositionalParams = List[Any]
QueryParams = Union[NamedParams, PositionalParams, None]

Row = Sequence[Any]


class CommandKind(str, Enum):
    """How the query statement is interpreted."""

    TEXT = "text"
    STORED_PROCEDURE = "stored_procedure"
    TABLE_DIRECT = "table_direct"


@dataclass(frozen=True)
class QueryDescriptor:
    """Everything a command builder needs to bind one execution.

    Attributes:
        statement: SQL text, or a procedure/table name for the other kinds.
        command_kind: How `statement` is interpreted.
        parameters: Parameters bound to the command.
        timeout: Command timeout in seconds, if any.
        transaction: Externally managed transaction handle, if any.
        capture: Capture object receiving columns and output parameters.
        auto_truncate: String policy for object rows and scalars.
    """

    statement: str
    command_kind: CommandKind = CommandKind.TEXT
    parameters: Tuple[Parameter, ...] = ()
    timeout: Optional[float] = None
    transaction: Any = None
    capture: Optional[DbCapture] = None
    auto_truncate: AutoTruncate = AutoTruncate.NONE

    @property
    def output_parameters(self) -> Tuple[Parameter, ...]:
        return tuple(p for p in self.parameters if p.is_output)


@dataclass
class DataTable:
    """In-memory snapshot of a full result set."""

    name: Optional[str] = None
    columns: List[ColumnInfo] = field(default_factory=list)
    rows: List[Tuple[Any, ...]] = field(default_factory=list)

    @property
    def column_names(self) -> List[str]:
        return [column.name for column in self.columns]

    def to_dicts(self) -> List[Dict[str, Any]]:
        names = self.column_names
        return [dict(zip(names, row)) for row in self.rows]

    def __len__(self) -> int:
        return len(self.rows)
