"""Server time endpoint."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Protocol

from .response import CommonResponse, _decode_body, _wire, _WireModel, check_response_body


class _PublicClient(Protocol):
    def get_publicly(self, path: str, query: Mapping[str, str] | None) -> bytes | str: ...


@dataclass
class GetServerTimeResult(_WireModel):
    """Server time in seconds and nanoseconds, both as text."""

    time_second: str = _wire("timeSecond")
    time_nano: str = _wire("timeNano")


@dataclass
class GetServerTimeResponse(CommonResponse):
    """Reply of the server time endpoint."""

    result: GetServerTimeResult = _wire(
        "result", parse=GetServerTimeResult.from_dict, factory=GetServerTimeResult
    )


class TimeService:
    """Access to the exchange's clock."""

    def __init__(self, client: _PublicClient) -> None:
        self._client = client

    def get_server_time(self) -> GetServerTimeResponse:
        """Fetch the current server time."""
        body = self._client.get_publicly("/v3/public/time", None)
        return _decode_body(body, GetServerTimeResponse, check_response_body)