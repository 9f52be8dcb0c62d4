"""Response envelopes returned by the exchange and the errors they can carry."""

from __future__ import annotations

import json
import time
from collections.abc import Callable, Iterable, Mapping
from dataclasses import MISSING, dataclass, field, fields
from enum import Enum
from typing import Any, TypeVar

_RATE_LIMITED = 10006
_V5_RATE_LIMITED = frozenset({10006, 10018})


def _wire(
    key: str,
    default: Any = "",
    *,
    parse: Callable[[Any], Any] | None = None,
    factory: Callable[[], Any] | None = None,
) -> Any:
    """Declare a dataclass field that is read from and written to ``key``."""
    metadata = {"key": key, "parse": parse}
    if factory is not None:
        return field(default_factory=factory, metadata=metadata)
    return field(default=default, metadata=metadata)


def _many(model: type[_WireModel]) -> Callable[[Any], list]:
    """Build a parser for a JSON array of ``model`` objects."""

    def parse(value: Any) -> list:
        if not isinstance(value, list):
            raise ValueError(f"expected a JSON array of {model.__name__}")
        return [model.from_dict(item) for item in value]

    return parse


def _text(value: Any) -> str:
    """Render a query value the way it travels on the wire."""
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _check_type(key: str, value: Any, expected: type) -> None:
    if expected is int:
        valid = isinstance(value, int) and not isinstance(value, bool)
    elif expected is float:
        valid = isinstance(value, (int, float)) and not isinstance(value, bool)
    else:
        valid = isinstance(value, expected)
    if not valid:
        raise ValueError(
            f"field {key!r}: expected {expected.__name__}, got {type(value).__name__}"
        )


_M = TypeVar("_M", bound="_WireModel")


def _decode(cls: type[_M], data: Any) -> _M:
    if not isinstance(data, Mapping):
        raise ValueError(f"expected a JSON object for {cls.__name__}")
    values: dict[str, Any] = {}
    for spec in fields(cls):
        key = spec.metadata.get("key")
        if key is None:
            continue
        raw = data.get(key)
        if raw is None:
            continue
        parse = spec.metadata.get("parse")
        if parse is not None:
            values[spec.name] = parse(raw)
            continue
        if spec.default is not MISSING and spec.default is not None:
            _check_type(key, raw, type(spec.default))
        values[spec.name] = raw
    return cls(**values)


def _encode(value: Any) -> Any:
    if isinstance(value, _WireModel):
        return value.to_dict()
    if isinstance(value, list):
        return [_encode(item) for item in value]
    return value


class _WireModel:
    """Mixin for dataclasses that mirror a JSON object."""

    @classmethod
    def from_dict(cls: type[_M], data: Any) -> _M:
        """Build an instance from a decoded JSON object."""
        return _decode(cls, data)

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON object this instance stands for."""
        return {
            spec.metadata["key"]: _encode(getattr(self, spec.name))
            for spec in fields(self)  # type: ignore[arg-type]
            if "key" in spec.metadata
        }


def _load(body: bytes | str) -> Mapping[str, Any]:
    data = json.loads(body)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError("response body is not a JSON object")
    return data


def _decode_body(
    body: bytes | str,
    model: type[_M],
    check: Callable[[bytes | str], None],
) -> _M:
    """Check a raw reply for errors, then decode it into ``model``."""
    check(body)
    return model.from_dict(_load(body))


@dataclass
class CommonResponse(_WireModel):
    """Envelope shared by the older endpoints."""

    ret_code: int = _wire("ret_code", 0)
    ret_msg: str = _wire("ret_msg")
    ext_code: str = _wire("ext_code")
    ext_info: str = _wire("ext_info")
    time_now: str = _wire("time_now")
    rate_limit_status: int = _wire("rate_limit_status", 0)
    rate_limit_reset_ms: int = _wire("rate_limit_reset_ms", 0)
    rate_limit: int = _wire("rate_limit", 0)

    @classmethod
    def from_dict(cls, data: Any) -> CommonResponse:
        """Build the envelope from a decoded JSON object."""
        return _decode(cls, data)


@dataclass
class CommonV5Response(_WireModel):
    """Envelope shared by the v3 and v5 endpoints."""

    ret_code: int = _wire("retCode", 0)
    ret_msg: str = _wire("retMsg")
    ret_ext_info: Any = _wire("retExtInfo", None)
    time: int = _wire("time", 0)

    @classmethod
    def from_dict(cls, data: Any) -> CommonV5Response:
        """Build the envelope from a decoded JSON object."""
        return _decode(cls, data)


class ErrorResponse(Exception):
    """The exchange answered with a non-zero return code."""

    def __init__(self, ret_code: int, ret_msg: str) -> None:
        super().__init__(ret_code, ret_msg)
        self.ret_code = ret_code
        self.ret_msg = ret_msg

    def __str__(self) -> str:
        return f"{self.ret_code}, {self.ret_msg}"


def _decimal(value: int, unit: int) -> str:
    whole, fraction = divmod(value, unit)
    digits = str(fraction).rjust(len(str(unit)) - 1, "0").rstrip("0")
    return f"{whole}.{digits}" if digits else str(whole)


def _format_duration(nanoseconds: int) -> str:
    if nanoseconds == 0:
        return "0s"
    sign = "-" if nanoseconds < 0 else ""
    ns = abs(nanoseconds)
    if ns < 1_000:
        return f"{sign}{ns}ns"
    if ns < 1_000_000:
        return f"{sign}{_decimal(ns, 1_000)}µs"
    if ns < 1_000_000_000:
        return f"{sign}{_decimal(ns, 1_000_000)}ms"
    hours, rest = divmod(ns, 3_600_000_000_000)
    minutes, rest = divmod(rest, 60_000_000_000)
    text = ""
    if hours:
        text += f"{hours}h"
    if hours or minutes:
        text += f"{minutes}m"
    return f"{sign}{text}{_decimal(rest, 1_000_000_000)}s"


class RateLimitError(Exception):
    """The exchange refused the request because a rate limit was hit."""

    def __init__(self, response: CommonResponse) -> None:
        super().__init__(response.ret_msg)
        self.response = response

    @property
    def ret_msg(self) -> str:
        return self.response.ret_msg

    @property
    def rate_limit_reset_ms(self) -> int:
        return self.response.rate_limit_reset_ms

    def __str__(self) -> str:
        reset_ms = self.response.rate_limit_reset_ms
        seconds = abs(reset_ms) // 1000
        if reset_ms < 0:
            seconds = -seconds
        remaining = seconds * 1_000_000_000 - time.time_ns()
        return f"{self.response.ret_msg}, {_format_duration(remaining)}"


class PathNotFoundError(Exception):
    """The requested path does not exist."""

    def __init__(self, message: str = "path not found") -> None:
        super().__init__(message)


class AccessDeniedError(Exception):
    """The request was not allowed."""

    def __init__(self, message: str = "access denied") -> None:
        super().__init__(message)


def check_response_body(body: bytes | str) -> None:
    """Raise the error carried by an older-style reply, if any."""
    data = _load(body)
    common = CommonResponse.from_dict(data)
    if common.ret_code == _RATE_LIMITED:
        raise RateLimitError(CommonResponse.from_dict(data))
    if common.ret_code != 0:
        raise ErrorResponse(common.ret_code, common.ret_msg)


def check_v3_response_body(body: bytes | str) -> None:
    """Raise the error carried by a v3 reply, if any."""
    common = CommonV5Response.from_dict(_load(body))
    if common.ret_code != 0:
        raise ErrorResponse(common.ret_code, common.ret_msg)


def check_v5_response_body(body: bytes | str) -> None:
    """Raise the error carried by a v5 reply, if any."""
    data = _load(body)
    common = CommonV5Response.from_dict(data)
    if common.ret_code in _V5_RATE_LIMITED:
        raise RateLimitError(CommonResponse.from_dict(data))
    if common.ret_code != 0:
        raise ErrorResponse(common.ret_code, common.ret_msg)


def _join(values: Iterable[Any]) -> str:
    return ",".join(_text(value) for value in values)