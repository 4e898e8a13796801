"""
Argument Normalization Pipeline

PURE CONVERSION - NO NETWORK, NO RULE ENFORCEMENT

Turns one of three caller input shapes into the flat ArgumentSet
submitted with a generation task:

- schema: typed groups whose names come from the provider's schema
- guided: the same groups with free-text names, plus a raw JSON object
          merged last
- json:   a single raw JSON object

Conversion rules per group:
- strings, links      -> str
- integers, floats    -> "" or absent dropped, else parsed
- booleans            -> True/"true", False/"false"; anything else unchanged
- objects, arrays     -> JSON-parsed; unparsable strings kept verbatim
- enums               -> unchanged

Only json mode treats invalid JSON as an error. Guided mode ignores an
unusable additional JSON object.

Groups are applied in the order above, so a name present in two
groups takes the value of the later one. Absent values never reach
the result.
"""

import json
import logging
import math
import re
from typing import Annotated, Any, Callable, Literal, Optional, Union

from pydantic import BaseModel, Field

from transport.metis import MalformedInput

logger = logging.getLogger(__name__)

ArgumentSet = dict[str, Any]

_INT_PREFIX_RE = re.compile(r"^[+-]?\d+")
_FLOAT_PREFIX_RE = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


# ============================================================================
# INPUT SHAPES (tagged on `mode`)
# ============================================================================

class ArgEntry(BaseModel):
    """One {name, value} row of an argument group."""

    name: Optional[str] = None
    value: Any = None


class SchemaArgs(BaseModel):
    """Typed groups; names are drawn from the resolved argument schema."""

    mode: Literal["schema"] = "schema"
    strings: list[ArgEntry] = Field(default_factory=list)
    links: list[ArgEntry] = Field(default_factory=list)
    integers: list[ArgEntry] = Field(default_factory=list)
    floats: list[ArgEntry] = Field(default_factory=list)
    booleans: list[ArgEntry] = Field(default_factory=list)
    objects: list[ArgEntry] = Field(default_factory=list)
    arrays: list[ArgEntry] = Field(default_factory=list)
    enums: list[ArgEntry] = Field(default_factory=list)


class GuidedArgs(BaseModel):
    """Free-text typed groups plus an optional JSON object merged last."""

    mode: Literal["guided"] = "guided"
    strings: list[ArgEntry] = Field(default_factory=list)
    links: list[ArgEntry] = Field(default_factory=list)
    integers: list[ArgEntry] = Field(default_factory=list)
    floats: list[ArgEntry] = Field(default_factory=list)
    booleans: list[ArgEntry] = Field(default_factory=list)
    objects: list[ArgEntry] = Field(default_factory=list)
    arrays: list[ArgEntry] = Field(default_factory=list)
    additional_args_json: str = ""


class JsonArgs(BaseModel):
    """A raw JSON object; invalid JSON aborts the submission."""

    mode: Literal["json"] = "json"
    raw: str = ""


ArgsInput = Annotated[
    Union[SchemaArgs, GuidedArgs, JsonArgs],
    Field(discriminator="mode"),
]


# ============================================================================
# VALUE CONVERSIONS
# ============================================================================

def _is_blank(value: Any) -> bool:
    return value is None or value == ""


def to_string(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def to_integer(value: Any) -> Optional[int]:
    """Base-10 integer; a leading numeric prefix is accepted ("12px" -> 12)."""
    if _is_blank(value):
        return None
    if isinstance(value, bool):
        raise MalformedInput(f"Invalid integer value: {value!r}")
    if isinstance(value, float) and not math.isfinite(value):
        raise MalformedInput(f"Invalid integer value: {value!r}")
    if isinstance(value, (int, float)):
        return int(value)
    match = _INT_PREFIX_RE.match(str(value).strip())
    if not match:
        raise MalformedInput(f"Invalid integer value: {value!r}")
    return int(match.group(0), 10)


def to_float(value: Any) -> Optional[float]:
    if _is_blank(value):
        return None
    if isinstance(value, bool):
        raise MalformedInput(f"Invalid float value: {value!r}")
    if isinstance(value, (int, float)):
        try:
            result = float(value)
        except OverflowError:
            raise MalformedInput(f"Invalid float value: {value!r}")
    else:
        text = str(value).strip()
        try:
            result = float(text)
        except ValueError:
            match = _FLOAT_PREFIX_RE.match(text)
            if not match:
                raise MalformedInput(f"Invalid float value: {value!r}")
            result = float(match.group(0))
    # NaN and infinities cannot be sent as JSON
    if not math.isfinite(result):
        raise MalformedInput(f"Invalid float value: {value!r}")
    return result


def to_boolean(value: Any) -> Any:
    if value is True or value == "true":
        return True
    if value is False or value == "false":
        return False
    return value


def _reject_constant(name: str) -> Any:
    raise ValueError(f"Non-finite number {name} is not valid JSON")


def _loads(raw: str) -> Any:
    return json.loads(raw, parse_constant=_reject_constant)


def parse_json_maybe(value: Any) -> Any:
    """JSON-decode strings; anything unparsable is returned as given."""
    if not isinstance(value, str):
        return value
    try:
        return _loads(value)
    except ValueError:
        return value


def passthrough(value: Any) -> Any:
    return value


GROUP_CONVERSIONS: list[tuple[str, Callable[[Any], Any]]] = [
    ("strings", to_string),
    ("links", to_string),
    ("integers", to_integer),
    ("floats", to_float),
    ("booleans", to_boolean),
    ("objects", parse_json_maybe),
    ("arrays", parse_json_maybe),
    ("enums", passthrough),
]


# ============================================================================
# PIPELINE
# ============================================================================

def build_args_from_groups(groups: SchemaArgs | GuidedArgs) -> ArgumentSet:
    """Apply group conversions in fixed order; later groups win on name clashes."""
    out: ArgumentSet = {}
    for group, convert in GROUP_CONVERSIONS:
        for entry in getattr(groups, group, None) or []:
            if not entry.name:
                continue
            try:
                out[entry.name] = convert(entry.value)
            except MalformedInput as e:
                raise MalformedInput(f"Argument '{entry.name}': {e}") from e
    return {k: v for k, v in out.items() if v is not None}


def parse_json_object(raw: str, what: str) -> ArgumentSet:
    """Strictly parse a JSON object; empty input is an empty object."""
    if not raw or not raw.strip():
        return {}
    try:
        parsed = _loads(raw)
    except ValueError as e:
        raise MalformedInput(f"Invalid JSON in {what}") from e
    if not isinstance(parsed, dict):
        raise MalformedInput(f"{what} must be a JSON object")
    return parsed


def build_args_from_guided(guided: GuidedArgs) -> ArgumentSet:
    """Guided groups, then the additional JSON object merged over them.

    Unusable additional JSON merges nothing; the guided fields are kept.
    """
    args = build_args_from_groups(guided)
    try:
        extra = parse_json_object(guided.additional_args_json, "Additional Args (JSON)")
    except MalformedInput as e:
        logger.warning(f"Ignoring additional args: {e}")
        extra = {}
    args.update(extra)
    return args


def build_args(args_input: SchemaArgs | GuidedArgs | JsonArgs) -> ArgumentSet:
    """
    Normalize any input shape into an ArgumentSet.

    Raises:
        MalformedInput: Invalid JSON in json mode, or an unparsable or
            non-finite integer/float
    """
    if isinstance(args_input, JsonArgs):
        return parse_json_object(args_input.raw, "Args (JSON)")

    elif isinstance(args_input, GuidedArgs):
        return build_args_from_guided(args_input)

    elif isinstance(args_input, SchemaArgs):
        return build_args_from_groups(args_input)

    else:
        raise TypeError(f"Unsupported args input: {type(args_input).__name__}")
