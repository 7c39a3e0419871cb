"""Typed access to persisted key/value snapshots.

Inactive entities keep their state as a flat string-to-string mapping (for
instance the module values of a saved part). These helpers read typed values
back out of such a mapping and fall back to the caller's default when a key
is missing or the stored text does not parse, so bad save data never reaches
the settlement engine.
"""

from enum import Enum
from typing import Annotated, Any, Literal, MutableMapping, Optional, Type, TypeVar

from pydantic import Field, TypeAdapter, ValidationError

Snapshot = MutableMapping[str, Any]
E = TypeVar("E", bound=Enum)

# Only the two spellings a saved bool is written with, in any case
_BOOL = TypeAdapter(Literal["true", "false"])
_INT = TypeAdapter(int)
_UINT = TypeAdapter(Annotated[int, Field(ge=0)])
# NaN and infinities turn up in saves from misbehaving plugins
_FLOAT = TypeAdapter(Annotated[float, Field(allow_inf_nan=False)])


def _parse(adapter: TypeAdapter, snapshot: Snapshot, name: str, default: Any) -> Any:
    raw = snapshot.get(name)
    if raw is None:
        return default
    if isinstance(raw, str):
        raw = raw.strip()
    try:
        return adapter.validate_python(raw)
    except ValidationError:
        return default


def get_bool(snapshot: Snapshot, name: str, default: bool = False) -> bool:
    """Read "true" or "false" (any case); anything else yields ``default``."""
    raw = snapshot.get(name)
    if isinstance(raw, bool):
        return raw
    if not isinstance(raw, str):
        return default
    try:
        return _BOOL.validate_python(raw.strip().lower()) == "true"
    except ValidationError:
        return default


def get_int(snapshot: Snapshot, name: str, default: int = 0) -> int:
    return _parse(_INT, snapshot, name, default)


def get_uint(snapshot: Snapshot, name: str, default: int = 0) -> int:
    """Read a non-negative integer; negative values yield ``default``."""
    return _parse(_UINT, snapshot, name, default)


def get_float(snapshot: Snapshot, name: str, default: float = 0.0) -> float:
    """Read a finite float; NaN and infinities yield ``default``."""
    return _parse(_FLOAT, snapshot, name, default)


def get_string(snapshot: Snapshot, name: str, default: str = "") -> str:
    value = snapshot.get(name)
    return default if value is None else str(value)


def get_enum(snapshot: Snapshot, name: str, enum_type: Type[E], default: Optional[E] = None) -> E:
    """Read an enum member stored by name.

    Without ``default`` an unknown or missing value yields the first member
    of ``enum_type``.
    """
    value = snapshot.get(name)
    member = enum_type.__members__.get(value) if isinstance(value, str) else None
    if member is not None:
        return member
    return default if default is not None else next(iter(enum_type))


def set_value(snapshot: Snapshot, name: str, value: Any) -> None:
    """Store ``value`` in its text form, overwriting any existing entry."""
    snapshot[name] = value.name if isinstance(value, Enum) else str(value)
