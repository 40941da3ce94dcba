"""Value types shared by the transport, the cache and the client."""

from typing import Any, Dict, Union

# SWITCH flags are booleans; INTEGER, FLOAT and STRING flags may be None when
# inactive, unconfigured or outside their scheduled window.
FlagValue = Union[bool, int, float, str, None]

# Every flag of one environment, from a single all-flags fetch
FlagSnapshot = Dict[str, FlagValue]


def is_flag_value(value: Any) -> bool:
    return value is None or isinstance(value, (bool, int, float, str))


def is_flag_snapshot(data: Any) -> bool:
    """True for a JSON object whose values are all scalar flag values."""
    return isinstance(data, dict) and all(is_flag_value(v) for v in data.values())


__all__ = ["FlagSnapshot", "FlagValue", "is_flag_snapshot", "is_flag_value"]
