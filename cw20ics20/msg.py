"""Messages the contract accepts and the responses it returns."""

from __future__ import annotations

import json
from dataclasses import dataclass, field

from .amount import Amount
from .errors import ParseError
from .state import ChannelInfo

_TRANSFER_TYPE = "cw20_ics20::msg::TransferMsg"
_UINT64_MAX = 2**64 - 1


@dataclass(frozen=True)
class AllowMsg:
    contract: str
    gas_limit: int | None = None


@dataclass
class InitMsg:
    default_timeout: int
    gov_contract: str
    allowlist: list[AllowMsg] = field(default_factory=list)
    default_gas_limit: int | None = None


@dataclass(frozen=True)
class MigrateMsg:
    default_gas_limit: int | None = None


@dataclass(frozen=True)
class TransferMsg:
    """A transfer request, sent directly or wrapped in a cw20 receive message."""

    channel: str
    remote_address: str
    timeout: int | None = None
    memo: str | None = None

    def to_json(self) -> bytes:
        body = {
            "channel": self.channel,
            "remote_address": self.remote_address,
            "timeout": self.timeout,
            "memo": self.memo,
        }
        return json.dumps(body, separators=(",", ":"), ensure_ascii=False).encode("utf-8")

    @classmethod
    def from_json(cls, data: bytes | str) -> TransferMsg:
        try:
            raw = json.loads(data)
        except ValueError as exc:
            raise ParseError(_TRANSFER_TYPE, str(exc)) from exc
        if not isinstance(raw, dict):
            raise ParseError(_TRANSFER_TYPE, "expected a JSON object")
        known = {"channel", "remote_address", "timeout", "memo"}
        unknown = sorted(set(raw) - known)
        if unknown:
            raise ParseError(_TRANSFER_TYPE, f"unknown field `{unknown[0]}`")
        for name in ("channel", "remote_address"):
            if name not in raw:
                raise ParseError(_TRANSFER_TYPE, f"missing field `{name}`")
            if not isinstance(raw[name], str):
                raise ParseError(_TRANSFER_TYPE, f"invalid type for `{name}`, expected a string")
        timeout = raw.get("timeout")
        if timeout is not None and (
            isinstance(timeout, bool)
            or not isinstance(timeout, int)
            or not 0 <= timeout <= _UINT64_MAX
        ):
            raise ParseError(_TRANSFER_TYPE, "invalid value for `timeout`, expected u64")
        memo = raw.get("memo")
        if memo is not None and not isinstance(memo, str):
            raise ParseError(_TRANSFER_TYPE, "invalid type for `memo`, expected a string")
        return cls(raw["channel"], raw["remote_address"], timeout, memo)


@dataclass(frozen=True)
class Cw20ReceiveMsg:
    """Tokens handed over by a cw20 contract, with an encoded TransferMsg."""

    sender: str
    amount: int
    msg: bytes


@dataclass(frozen=True)
class UpdateAdminMsg:
    admin: str


@dataclass(frozen=True)
class PortQuery:
    """Ask for the port bound by this contract."""


@dataclass(frozen=True)
class ListChannelsQuery:
    """Ask for all connected channels."""


@dataclass(frozen=True)
class ChannelQuery:
    id: str


@dataclass(frozen=True)
class ConfigQuery:
    """Ask for the configuration."""


@dataclass(frozen=True)
class AdminQuery:
    """Ask for the current admin."""


@dataclass(frozen=True)
class AllowedQuery:
    contract: str


@dataclass(frozen=True)
class ListAllowedQuery:
    start_after: str | None = None
    limit: int | None = None


@dataclass
class ListChannelsResponse:
    channels: list[ChannelInfo]


@dataclass
class ChannelResponse:
    info: ChannelInfo
    balances: list[Amount]
    total_sent: list[Amount]


@dataclass(frozen=True)
class PortResponse:
    port_id: str


@dataclass(frozen=True)
class ConfigResponse:
    default_timeout: int
    default_gas_limit: int | None
    gov_contract: str


@dataclass(frozen=True)
class AllowedResponse:
    is_allowed: bool
    gas_limit: int | None


@dataclass(frozen=True)
class AllowedInfo:
    contract: str
    gas_limit: int | None


@dataclass
class ListAllowedResponse:
    allow: list[AllowedInfo]


@dataclass(frozen=True)
class AdminResponse:
    admin: str | None