"""Errors raised while compiling templates and generating data."""

from __future__ import annotations

from dataclasses import dataclass
from os import PathLike
from typing import Optional, Union


class DbgenError(Exception):
    """Base class of all errors produced by the package."""


class IntegerOverflowError(DbgenError):
    """An integer expression produced a value too big to represent."""

    def __init__(self, expression: str) -> None:
        super().__init__(f"integer '{expression}' is too big")
        self.expression = expression


class InvalidArgumentsError(DbgenError):
    """The arguments given to a function or command are invalid."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class UnknownParentTableError(DbgenError):
    """A derived table refers to a parent table which does not exist."""

    def __init__(self, parent: str) -> None:
        super().__init__(f"cannot find parent table {parent} to generate derived rows")
        self.parent = parent


class DerivedTableNameMismatchError(DbgenError):
    """The FOR EACH ROW directive and CREATE TABLE name different tables."""

    def __init__(self, for_each_row: str, create_table: str) -> None:
        super().__init__(
            "derived table name in the FOR EACH ROW and CREATE TABLE statements "
            f"do not match ({for_each_row} vs {create_table})"
        )
        self.for_each_row = for_each_row
        self.create_table = create_table


class UnexpectedValueTypeError(DbgenError):
    """A value cannot be converted into the expected type."""

    def __init__(self, expected: str, value: str) -> None:
        super().__init__(f"cannot convert {value} into {expected}")
        self.expected = expected
        self.value = value


class FileIoError(DbgenError):
    """An I/O operation on a file failed."""

    def __init__(
        self,
        action: str,
        path: Union[str, "PathLike[str]"],
        source: Optional[BaseException] = None,
    ) -> None:
        super().__init__(f"failed to {action} at {path}")
        self.action = action
        self.path = path
        self.source = source
        self.__cause__ = source


class CannotUseTableNameForMultipleTablesError(DbgenError):
    """``--table-name`` was given for a template holding several tables."""

    def __init__(self) -> None:
        super().__init__("cannot use --table-name when template contains multiple tables")


class UnsupportedCliParameterError(DbgenError, ValueError):
    """A command-line parameter has a value which is not supported."""

    def __init__(self, kind: str, value: str) -> None:
        super().__init__(f"unsupported {kind} {value}")
        self.kind = kind
        self.value = value


@dataclass(frozen=True)
class Purpose:
    """Why a specification is being evaluated.

    ``step`` is ``None`` when producing argument specifications, otherwise it
    is the index of the execution step.
    """

    step: Optional[int] = None

    def __str__(self) -> str:
        if self.step is None:
            return "arguments"
        return f"execution (index={self.step})"


class StepError(DbgenError):
    """One step of a multi-step generation failed."""

    def __init__(self, step: int, message: str) -> None:
        super().__init__(f"cannot execute dbgen (index={step}):\n{message}")
        self.step = step
        self.message = message