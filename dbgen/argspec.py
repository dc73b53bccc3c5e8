"""Command-line argument specifications for multi-step generation scripts.

A script describes its own arguments as plain data (see ``App.from_dict``).
The specification is turned into a command-line parser, and the parsed
values are collected into a mapping of argument names to values.
"""

from __future__ import annotations

import argparse
import enum
import re
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, MutableMapping, Optional, Union

from dbgen.errors import InvalidArgumentsError
from dbgen.names import Seed
from dbgen.rows import U64_MAX, parse_size

Match = Union[bool, str, int, float, list]

_INT_PATTERN = re.compile(r"\+?[0-9]+")
_FLOAT_PATTERN = re.compile(
    r"[+-]?(?:inf|infinity|nan|(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?)",
    re.IGNORECASE,
)


class ArgKind(str, enum.Enum):
    """The kind of value an argument takes."""

    BOOL = "bool"
    STR = "str"
    INT = "int"
    SIZE = "size"
    FLOAT = "float"
    CHOICES = "choices"


def _parse_int(text: str) -> int:
    if not text:
        raise ValueError("cannot parse integer from empty string")
    if not _INT_PATTERN.fullmatch(text):
        raise ValueError("invalid digit found in string")
    value = int(text)
    if value > U64_MAX:
        raise ValueError("number too large to fit in target type")
    return value


def _parse_float(text: str) -> float:
    if not text:
        raise ValueError("cannot parse float from empty string")
    if not _FLOAT_PATTERN.fullmatch(text):
        raise ValueError("invalid float literal")
    return float(text)


@dataclass(frozen=True)
class ArgType:
    """The type of an argument; ``choices`` and ``multiple`` apply to choices only."""

    kind: ArgKind = ArgKind.STR
    choices: tuple = ()
    multiple: bool = False

    def parse_input(self, text: str) -> Match:
        """Converts the raw text of an argument into its value.

        Raises ``ValueError`` when the text does not fit the type.
        """
        if self.kind is ArgKind.INT:
            return _parse_int(text)
        if self.kind is ArgKind.FLOAT:
            return _parse_float(text)
        if self.kind is ArgKind.SIZE:
            return parse_size(text)
        return text

    @property
    def takes_value(self) -> bool:
        if self.kind is ArgKind.BOOL:
            return False
        if self.kind is ArgKind.CHOICES:
            return bool(self.choices) or self.multiple
        return True


@dataclass
class Arg:
    """Specification of one command-line argument."""

    short: str = ""
    long: str = ""
    help: str = ""
    required: bool = False
    default: Optional[str] = None
    type: ArgType = field(default_factory=ArgType)


def _expect(value: Any, kind: type, what: str) -> Any:
    if not isinstance(value, kind) or (kind is not bool and isinstance(value, bool)):
        raise InvalidArgumentsError(f"invalid type for {what}: {value!r}")
    return value


def _arg_type_from_spec(spec: Any) -> ArgType:
    if isinstance(spec, Mapping):
        if len(spec) != 1:
            raise InvalidArgumentsError(f"invalid argument type: {spec!r}")
        ((tag, content),) = spec.items()
    else:
        tag, content = spec, None
    _expect(tag, str, "argument type")
    try:
        kind = ArgKind(tag)
    except ValueError:
        raise InvalidArgumentsError(f"unknown argument type: {tag}") from None
    if kind is not ArgKind.CHOICES:
        if content is not None:
            raise InvalidArgumentsError(f"argument type {tag} takes no content")
        return ArgType(kind)
    if not isinstance(content, Mapping):
        raise InvalidArgumentsError("argument type choices needs 'choices' and 'multiple'")
    for key in ("choices", "multiple"):
        if key not in content:
            raise InvalidArgumentsError(f"argument type choices is missing '{key}'")
    choices = content["choices"]
    if isinstance(choices, str) or not isinstance(choices, (list, tuple)):
        raise InvalidArgumentsError("invalid type for choices: expected a list")
    for choice in choices:
        _expect(choice, str, "choice")
    multiple = _expect(content["multiple"], bool, "multiple")
    return ArgType(ArgKind.CHOICES, tuple(choices), multiple)


def _arg_from_spec(name: str, spec: Any) -> Arg:
    if not isinstance(spec, Mapping):
        raise InvalidArgumentsError(f"invalid specification for argument {name}")
    default = spec.get("default")
    return Arg(
        short=_expect(spec.get("short", ""), str, f"{name}.short"),
        long=_expect(spec.get("long", ""), str, f"{name}.long"),
        help=_expect(spec.get("help", ""), str, f"{name}.help"),
        required=_expect(spec.get("required", False), bool, f"{name}.required"),
        default=None if default is None else _expect(default, str, f"{name}.default"),
        type=_arg_type_from_spec(spec["type"]) if "type" in spec else ArgType(),
    )


def _value_type(arg_type: ArgType):
    def convert(text: str) -> Match:
        try:
            return arg_type.parse_input(text)
        except ValueError as exc:
            raise argparse.ArgumentTypeError(str(exc)) from None

    return convert


@dataclass
class App:
    """A simplified command-line application specification."""

    name: str = ""
    version: str = ""
    about: str = ""
    args: dict = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "App":
        """Builds the specification from a mapping; missing keys take defaults."""
        if not isinstance(data, Mapping):
            raise InvalidArgumentsError("application specification must be a mapping")
        args_spec = data.get("args", {})
        if not isinstance(args_spec, Mapping):
            raise InvalidArgumentsError("invalid type for args: expected a mapping")
        return cls(
            name=_expect(data.get("name", ""), str, "name"),
            version=_expect(data.get("version", ""), str, "version"),
            about=_expect(data.get("about", ""), str, "about"),
            args={
                _expect(name, str, "argument name"): _arg_from_spec(name, spec)
                for name, spec in args_spec.items()
            },
        )

    def _build_parser(self) -> tuple:
        parser = argparse.ArgumentParser(
            prog=f"dbdbgen {self.name}",
            description=self.about or None,
            add_help=False,
            allow_abbrev=False,
        )
        specs = []
        used_shorts = set()
        used_longs = set()
        for index, (name, arg) in enumerate(self.args.items()):
            dest = f"arg_{index}"
            long_name = arg.long or name
            flags = [f"--{long_name}"]
            used_longs.add(long_name)
            if arg.short:
                flags.insert(0, f"-{arg.short[0]}")
                used_shorts.add(arg.short[0])
            arg_type = arg.type
            required = (arg.required or arg_type.multiple) and arg.default is None
            options: dict = {"dest": dest, "help": arg.help or None, "required": required}
            if not arg_type.takes_value:
                options["action"] = "store_true"
            elif arg_type.kind is ArgKind.CHOICES and arg_type.multiple:
                options.update(action="append", nargs="+")
            elif arg_type.kind is ArgKind.CHOICES:
                options["choices"] = list(arg_type.choices)
            elif arg_type.kind is ArgKind.STR:
                pass
            else:
                options["type"] = _value_type(arg_type)
            if "action" not in options:
                options["default"] = None
            parser.add_argument(*flags, **options)
            specs.append((name, arg, dest))

        help_flags = [f for f, used in (("-h", "h" in used_shorts), ("--help", "help" in used_longs)) if not used]
        if help_flags:
            parser.add_argument(*help_flags, action="help", help="Prints help information")
        version_flags = [
            f for f, used in (("-V", "V" in used_shorts), ("--version", "version" in used_longs)) if not used
        ]
        if version_flags:
            parser.add_argument(
                *version_flags,
                action="version",
                version=f"{self.name} {self.version}",
                help="Prints version information",
            )
        return parser, specs

    def get_matches(self, args: Iterable[str]) -> dict:
        """Parses command-line arguments (without the program name).

        Invalid input prints a message and raises ``SystemExit``. Arguments
        which are neither given nor have a default are left out.
        """
        parser, specs = self._build_parser()
        namespace = parser.parse_args([str(a) for a in args])
        result: dict = {}
        for name, arg, dest in specs:
            raw = getattr(namespace, dest)
            arg_type = arg.type
            if not arg_type.takes_value:
                if arg_type.kind is ArgKind.BOOL:
                    result[name] = bool(raw) or arg.default is not None
                continue
            if arg_type.kind is ArgKind.CHOICES and arg_type.multiple:
                if raw is None:
                    if arg.default is None:
                        continue
                    values = arg.default.split(",")
                else:
                    values = [piece for group in raw for item in group for piece in item.split(",")]
                if arg_type.choices:
                    for value in values:
                        if value not in arg_type.choices:
                            parser.error(
                                f"argument --{arg.long or name}: invalid choice: {value!r} "
                                f"(choose from {', '.join(map(repr, arg_type.choices))})"
                            )
                result[name] = values
                continue
            if raw is None:
                if arg.default is None:
                    continue
                raw = arg_type.parse_input(arg.default)
            result[name] = raw
        return result


def ensure_seed(matches: MutableMapping[str, Any]) -> None:
    """Inserts a random 64-hex-digit ``seed`` into ``matches`` unless one exists."""
    if "seed" not in matches:
        matches["seed"] = str(Seed.random())