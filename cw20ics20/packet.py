"""ICS20 packet and acknowledgement formats, and channel handshake checks."""

from __future__ import annotations

import base64
import binascii
import enum
import json
from dataclasses import dataclass, replace

from .errors import (
    AmountOverflow,
    FromOtherChannel,
    FromOtherPort,
    InvalidIbcVersion,
    NoForeignTokens,
    OnlyOrderedChannel,
    ParseError,
)
from .runtime import Response
from .state import ChannelInfo, ContractStorage, IbcEndpoint

ICS20_VERSION = "ics20-1"

RECEIVE_ID = 1337
ACK_FAILURE_ID = 0xFA17

_PACKET_TYPE = "cw20_ics20::ibc::Ics20Packet"
_ACK_TYPE = "cw20_ics20::ibc::Ics20Ack"
_UINT64_MAX = 2**64 - 1
_UINT128_MAX = 2**128 - 1


class ChannelOrder(enum.Enum):
    ORDERED = "ORDER_ORDERED"
    UNORDERED = "ORDER_UNORDERED"


ICS20_ORDERING = ChannelOrder.UNORDERED


@dataclass(frozen=True)
class IbcChannel:
    endpoint: IbcEndpoint
    counterparty_endpoint: IbcEndpoint
    order: ChannelOrder
    version: str
    connection_id: str


@dataclass(frozen=True)
class IbcPacket:
    data: bytes
    src: IbcEndpoint
    dest: IbcEndpoint
    sequence: int
    timeout: int  # timestamp in nanoseconds


@dataclass(frozen=True)
class Reply:
    """Outcome of a submessage: ``error`` is None when it succeeded."""

    id: int
    error: str | None = None


def _encode(body: dict) -> bytes:
    return json.dumps(body, separators=(",", ":"), ensure_ascii=False).encode("utf-8")


def _decode_object(data: bytes | str, type_name: str) -> dict:
    try:
        raw = json.loads(data)
    except ValueError as exc:
        raise ParseError(type_name, str(exc)) from exc
    if not isinstance(raw, dict):
        raise ParseError(type_name, "expected a JSON object")
    return raw


@dataclass(frozen=True)
class Ics20Packet:
    """The data of an ICS20 transfer packet, JSON-compatible with the SDK format."""

    amount: int
    denom: str
    sender: str
    receiver: str
    memo: str | None = None

    def __post_init__(self) -> None:
        if isinstance(self.amount, bool) or not isinstance(self.amount, int):
            raise ValueError(f"amount must be an integer, got {self.amount!r}")
        if not 0 <= self.amount <= _UINT128_MAX:
            raise ValueError(f"amount out of range: {self.amount}")

    def with_memo(self, memo: str | None) -> Ics20Packet:
        return replace(self, memo=memo)

    def validate(self) -> None:
        """Raise AmountOverflow if the amount does not fit in 64 bits."""
        if self.amount > _UINT64_MAX:
            raise AmountOverflow()

    def to_json(self) -> bytes:
        body: dict[str, str] = {
            "amount": str(self.amount),
            "denom": self.denom,
            "receiver": self.receiver,
            "sender": self.sender,
        }
        if self.memo is not None:
            body["memo"] = self.memo
        return _encode(body)

    @classmethod
    def from_json(cls, data: bytes | str) -> Ics20Packet:
        raw = _decode_object(data, _PACKET_TYPE)
        for name in ("amount", "denom", "receiver", "sender"):
            if name not in raw:
                raise ParseError(_PACKET_TYPE, f"missing field `{name}`")
            if not isinstance(raw[name], str):
                raise ParseError(_PACKET_TYPE, f"invalid type for `{name}`, expected a string")
        text = raw["amount"]
        if not (text.isascii() and text.isdigit()):
            raise ParseError(_PACKET_TYPE, f"invalid Uint128 '{text}'")
        amount = int(text)
        if amount > _UINT128_MAX:
            raise ParseError(_PACKET_TYPE, f"invalid Uint128 '{text}'")
        memo = raw.get("memo")
        if memo is not None and not isinstance(memo, str):
            raise ParseError(_PACKET_TYPE, "invalid type for `memo`, expected a string")
        return cls(
            amount=amount,
            denom=raw["denom"],
            sender=raw["sender"],
            receiver=raw["receiver"],
            memo=memo,
        )


@dataclass(frozen=True)
class Ics20Ack:
    """A generic ICS acknowledgement: either a result or an error message."""

    result: bytes | None = None
    error: str | None = None

    def __post_init__(self) -> None:
        if (self.result is None) == (self.error is None):
            raise ValueError("an acknowledgement holds exactly one of a result or an error")

    def to_json(self) -> bytes:
        if self.result is not None:
            return _encode({"result": base64.b64encode(self.result).decode("ascii")})
        return _encode({"error": self.error})

    @classmethod
    def from_json(cls, data: bytes | str) -> Ics20Ack:
        raw = _decode_object(data, _ACK_TYPE)
        if len(raw) != 1:
            raise ParseError(_ACK_TYPE, "expected an object with exactly one variant")
        (key, value), = raw.items()
        if key == "result":
            if not isinstance(value, str):
                raise ParseError(_ACK_TYPE, "invalid type for `result`, expected a string")
            try:
                decoded = base64.b64decode(value, validate=True)
            except (binascii.Error, ValueError) as exc:
                raise ParseError(_ACK_TYPE, f"invalid base64: {value}") from exc
            return cls(result=decoded)
        if key == "error":
            if not isinstance(value, str):
                raise ParseError(_ACK_TYPE, "invalid type for `error`, expected a string")
            return cls(error=value)
        raise ParseError(_ACK_TYPE, f"unknown variant `{key}`, expected `result` or `error`")


def _enforce_order_and_version(channel: IbcChannel, counterparty_version: str | None) -> None:
    if channel.version != ICS20_VERSION:
        raise InvalidIbcVersion(channel.version)
    if counterparty_version is not None and counterparty_version != ICS20_VERSION:
        raise InvalidIbcVersion(counterparty_version)
    if channel.order != ICS20_ORDERING:
        raise OnlyOrderedChannel()


def ibc_channel_open(channel: IbcChannel, counterparty_version: str | None = None) -> None:
    """Reject channels of the wrong version or ordering."""
    _enforce_order_and_version(channel, counterparty_version)


def ibc_channel_connect(
    storage: ContractStorage, channel: IbcChannel, counterparty_version: str | None = None
) -> Response:
    """Check the channel again and record it in storage."""
    _enforce_order_and_version(channel, counterparty_version)
    info = ChannelInfo(
        id=channel.endpoint.channel_id,
        counterparty_endpoint=channel.counterparty_endpoint,
        connection_id=channel.connection_id,
    )
    storage.channel_info[info.id] = info
    return Response()


def parse_voucher_denom(voucher_denom: str, remote_endpoint: IbcEndpoint) -> str:
    """Return the local denom of a voucher "port/channel/denom" from the expected endpoint."""
    parts = voucher_denom.split("/", 2)
    if len(parts) != 3:
        raise NoForeignTokens()
    port, channel, denom = parts
    if port != remote_endpoint.port_id:
        raise FromOtherPort(port)
    if channel != remote_endpoint.channel_id:
        raise FromOtherChannel(channel)
    return denom