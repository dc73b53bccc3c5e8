"""Command-line arguments of the generator and the row counts derived from them."""

from __future__ import annotations

import datetime
import re
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, Mapping, Optional, Union

from dbgen.errors import InvalidArgumentsError
from dbgen.names import ComponentName, CompressionName, FormatName, RngName, Seed

U32_MAX = 2**32 - 1
U64_MAX = 2**64 - 1
U8_MAX = 2**8 - 1
DEFAULT_ZONEINFO = "/usr/share/zoneinfo"
DEFAULT_COMPONENTS_MASK = int(ComponentName.TABLE) | int(ComponentName.DATA)

PathType = Union[str, Path]

_SIZE_PATTERN = re.compile(
    r"""
    \s*
    (?P<number>[0-9][0-9_]*(?:\.[0-9_]*)?|\.[0-9][0-9_]*)
    \s*
    (?P<prefix>[kmgtpe]i?)?
    \s*
    (?P<byte>b)?
    \s*
    """,
    re.VERBOSE | re.IGNORECASE,
)
_PREFIX_POWERS = {"k": 1, "m": 2, "g": 3, "t": 4, "p": 5, "e": 6}


def div_rem_plus_one(n: int, d: int) -> tuple[int, int]:
    """Divides ``n`` by ``d``, reporting a zero remainder as a full ``d``."""
    div, rem = divmod(n, d)
    if rem == 0:
        return div, d
    return div + 1, rem


def _parse_size(text: str, allow_byte_suffix: bool) -> int:
    if not text.strip():
        raise ValueError("cannot parse integer from empty string")
    match = _SIZE_PATTERN.fullmatch(text)
    if match is None:
        raise ValueError(f"invalid digit found in string: {text!r}")
    if match.group("byte") and not allow_byte_suffix:
        raise ValueError(f"byte suffix is not allowed: {text!r}")
    try:
        number = Decimal(match.group("number").replace("_", ""))
    except InvalidOperation:
        raise ValueError(f"invalid digit found in string: {text!r}") from None
    prefix = (match.group("prefix") or "").lower()
    multiplier = 1
    if prefix:
        base = 1024 if prefix.endswith("i") else 1000
        multiplier = base ** _PREFIX_POWERS[prefix[0]]
    value = int(number * multiplier)
    if value > U64_MAX:
        raise ValueError(f"number too large to fit in target type: {text!r}")
    return value


def parse_size(text: str) -> int:
    """Parses a size such as ``1024``, ``1.5k``, ``10 MB`` or ``4 KiB`` into bytes.

    Decimal prefixes (k, M, G, …) are powers of 1000; binary ones (Ki, Mi, …)
    are powers of 1024. An optional ``B`` suffix is accepted.
    """
    return _parse_size(text, allow_byte_suffix=True)


def parse_row_count(text: str) -> int:
    """Parses a row count, which accepts size prefixes but not a byte suffix."""
    return _parse_size(text, allow_byte_suffix=False)


def _check_u32(value: int, message: str) -> int:
    if not 0 <= value <= U32_MAX:
        raise ValueError(message)
    return value


@dataclass(frozen=True)
class RowArgs:
    """How many files, statements and rows are generated."""

    files_count: int = 0
    inserts_count: int = 0
    last_file_inserts_count: int = 0
    rows_count: int = 0
    final_insert_rows_count: int = 0
    last_file_final_insert_rows_count: int = 0
    rows_per_file: int = 0
    total_count: int = 0


def _get_int(data: Mapping[str, Any], key: str, default: int, maximum: int) -> int:
    value = data.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidArgumentsError(f"invalid type for {key}: expected an integer, got {value!r}")
    if not 0 <= value <= maximum:
        raise InvalidArgumentsError(f"invalid value for {key}: {value} is out of range")
    return value


def _get_opt_int(data: Mapping[str, Any], key: str, maximum: int) -> Optional[int]:
    if data.get(key) is None:
        return None
    return _get_int(data, key, 0, maximum)


def _get_bool(data: Mapping[str, Any], key: str) -> bool:
    value = data.get(key, False)
    if not isinstance(value, bool):
        raise InvalidArgumentsError(f"invalid type for {key}: expected a boolean, got {value!r}")
    return value


def _get_opt_str(data: Mapping[str, Any], key: str) -> Optional[str]:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise InvalidArgumentsError(f"invalid type for {key}: expected a string, got {value!r}")
    return value


def _get_str(data: Mapping[str, Any], key: str, default: str) -> str:
    value = data.get(key, default)
    if not isinstance(value, str):
        raise InvalidArgumentsError(f"invalid type for {key}: expected a string, got {value!r}")
    return value


@dataclass
class Args:
    """Arguments of the generator program."""

    qualified: bool = False
    table_name: Optional[str] = None
    schema_name: Optional[str] = None
    out_dir: PathType = ""
    files_count: int = 1
    inserts_count: int = 1
    rows_count: int = 1
    last_file_inserts_count: Optional[int] = None
    last_insert_rows_count: Optional[int] = None
    total_count: Optional[int] = None
    rows_per_file: Optional[int] = None
    size: Optional[int] = None
    escape_backslash: bool = False
    template: Optional[PathType] = None
    template_string: Optional[str] = None
    seed: Optional[Seed] = None
    jobs: int = 0
    rng: RngName = RngName.HC128
    quiet: bool = False
    time_zone: str = "UTC"
    zoneinfo: PathType = DEFAULT_ZONEINFO
    now: Optional[datetime.datetime] = None
    format: FormatName = FormatName.SQL
    format_true: Optional[str] = None
    format_false: Optional[str] = None
    format_null: Optional[str] = None
    headers: bool = False
    compression: Optional[CompressionName] = None
    compress_level: int = 6
    components: list[ComponentName] = field(
        default_factory=lambda: [ComponentName.TABLE, ComponentName.DATA]
    )
    no_schemas: bool = False
    no_data: bool = False
    initialize: list[str] = field(default_factory=list)

    def row_args(self) -> RowArgs:
        """Computes how rows are distributed among files and INSERT statements."""
        rows_count = self.rows_count

        if self.rows_per_file is not None:
            inserts_count, final_insert_rows_count = div_rem_plus_one(self.rows_per_file, rows_count)
            inserts_count = _check_u32(inserts_count, "--rows-per-file is too large")
            rows_per_file = self.rows_per_file
        else:
            inserts_count = self.inserts_count
            final_insert_rows_count = rows_count
            rows_per_file = self.inserts_count * rows_count

        if self.total_count is not None:
            files_count, excess_rows_count = div_rem_plus_one(self.total_count, rows_per_file)
            files_count = _check_u32(files_count, "--total-count is too large")
            if excess_rows_count == rows_per_file:
                last_file_inserts_count = inserts_count
                last_file_final_insert_rows_count = final_insert_rows_count
            else:
                last_file_inserts_count, last_file_final_insert_rows_count = div_rem_plus_one(
                    excess_rows_count, rows_count
                )
                last_file_inserts_count = _check_u32(
                    last_file_inserts_count, "--rows-per-file is too large"
                )
            total_count = self.total_count
        else:
            files_count = self.files_count
            last_file_inserts_count = (
                inserts_count if self.last_file_inserts_count is None else self.last_file_inserts_count
            )
            last_file_final_insert_rows_count = (
                final_insert_rows_count
                if self.last_insert_rows_count is None
                else self.last_insert_rows_count
            )
            if files_count == 0:
                raise ValueError("--files-count must be at least 1")
            if last_file_inserts_count == 0:
                raise ValueError("--last-file-inserts-count must be at least 1")
            total_count = (
                (files_count - 1) * rows_per_file
                + (last_file_inserts_count - 1) * rows_count
                + last_file_final_insert_rows_count
            )

        return RowArgs(
            files_count=files_count,
            inserts_count=inserts_count,
            last_file_inserts_count=last_file_inserts_count,
            rows_count=rows_count,
            final_insert_rows_count=final_insert_rows_count,
            last_file_final_insert_rows_count=last_file_final_insert_rows_count,
            rows_per_file=rows_per_file,
            total_count=total_count,
        )

    def to_dict(self) -> dict[str, Any]:
        """Serializes the arguments, leaving out those at their default values."""
        result: dict[str, Any] = {}
        if self.qualified:
            result["qualified"] = True
        if self.table_name is not None:
            result["table_name"] = self.table_name
        if self.schema_name is not None:
            result["schema_name"] = self.schema_name
        result["out_dir"] = str(self.out_dir)
        if self.files_count != 1:
            result["files_count"] = self.files_count
        if self.inserts_count != 1:
            result["inserts_count"] = self.inserts_count
        result["rows_count"] = self.rows_count
        if self.last_file_inserts_count is not None:
            result["last_file_inserts_count"] = self.last_file_inserts_count
        if self.last_insert_rows_count is not None:
            result["last_insert_rows_count"] = self.last_insert_rows_count
        result["total_count"] = self.total_count
        result["rows_per_file"] = self.rows_per_file
        result["size"] = self.size
        if self.escape_backslash:
            result["escape_backslash"] = True
        if self.template is not None:
            result["template"] = str(self.template)
        if self.template_string is not None:
            result["template_string"] = self.template_string
        result["seed"] = None if self.seed is None else str(self.seed)
        if self.jobs != 0:
            result["jobs"] = self.jobs
        if self.rng is not RngName.HC128:
            result["rng"] = self.rng.value
        if self.quiet:
            result["quiet"] = True
        if self.time_zone != "UTC":
            result["time_zone"] = self.time_zone
        if Path(self.zoneinfo) != Path(DEFAULT_ZONEINFO):
            result["zoneinfo"] = str(self.zoneinfo)
        if self.now is not None:
            result["now"] = self.now.isoformat()
        if self.format is not FormatName.SQL:
            result["format"] = self.format.value
        if self.format_true is not None:
            result["format_true"] = self.format_true
        if self.format_false is not None:
            result["format_false"] = self.format_false
        if self.format_null is not None:
            result["format_null"] = self.format_null
        if self.headers:
            result["headers"] = True
        if self.compression is not None:
            result["compression"] = self.compression.value
        if self.compress_level != 6:
            result["compress_level"] = self.compress_level
        if ComponentName.union_all(self.components) != DEFAULT_COMPONENTS_MASK:
            result["components"] = [component.label for component in self.components]
        if self.initialize:
            result["initialize"] = list(self.initialize)
        return result

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Args":
        """Builds arguments from a mapping; missing keys take their defaults.

        Unknown keys are ignored, as are ``no_schemas`` and ``no_data``.
        """
        args = cls()
        args.qualified = _get_bool(data, "qualified")
        args.table_name = _get_opt_str(data, "table_name")
        args.schema_name = _get_opt_str(data, "schema_name")
        args.out_dir = _get_str(data, "out_dir", "")
        args.files_count = _get_int(data, "files_count", 1, U32_MAX)
        args.inserts_count = _get_int(data, "inserts_count", 1, U32_MAX)
        args.rows_count = _get_int(data, "rows_count", 1, U32_MAX)
        args.last_file_inserts_count = _get_opt_int(data, "last_file_inserts_count", U32_MAX)
        args.last_insert_rows_count = _get_opt_int(data, "last_insert_rows_count", U32_MAX)
        args.total_count = _get_opt_int(data, "total_count", U64_MAX)
        args.rows_per_file = _get_opt_int(data, "rows_per_file", U64_MAX)
        args.size = _get_opt_int(data, "size", U64_MAX)
        args.escape_backslash = _get_bool(data, "escape_backslash")
        template = _get_opt_str(data, "template")
        args.template = None if template is None else template
        args.template_string = _get_opt_str(data, "template_string")
        seed = _get_opt_str(data, "seed")
        if seed is not None:
            try:
                args.seed = Seed.parse(seed)
            except ValueError as exc:
                raise InvalidArgumentsError(f"invalid seed: {exc}") from exc
        args.jobs = _get_int(data, "jobs", 0, U64_MAX)
        args.rng = RngName.parse(_get_str(data, "rng", RngName.HC128.value))
        args.quiet = _get_bool(data, "quiet")
        args.time_zone = _get_str(data, "time_zone", "UTC")
        args.zoneinfo = _get_str(data, "zoneinfo", DEFAULT_ZONEINFO)
        now = _get_opt_str(data, "now")
        if now is not None:
            try:
                args.now = datetime.datetime.fromisoformat(now)
            except ValueError as exc:
                raise InvalidArgumentsError(f"invalid timestamp: {now}") from exc
        args.format = FormatName.parse(_get_str(data, "format", FormatName.SQL.value))
        args.format_true = _get_opt_str(data, "format_true")
        args.format_false = _get_opt_str(data, "format_false")
        args.format_null = _get_opt_str(data, "format_null")
        args.headers = _get_bool(data, "headers")
        compression = _get_opt_str(data, "compression")
        args.compression = None if compression is None else CompressionName.parse(compression)
        args.compress_level = _get_int(data, "compress_level", 6, U8_MAX)
        if "components" in data:
            components = data["components"]
            if isinstance(components, str) or not isinstance(components, (list, tuple)):
                raise InvalidArgumentsError("invalid type for components: expected a list")
            args.components = [ComponentName.parse(name) for name in components]
        if "initialize" in data:
            initialize = data["initialize"]
            if isinstance(initialize, str) or not isinstance(initialize, (list, tuple)):
                raise InvalidArgumentsError("invalid type for initialize: expected a list")
            if not all(isinstance(item, str) for item in initialize):
                raise InvalidArgumentsError("invalid type for initialize: expected strings")
            args.initialize = list(initialize)
        return args