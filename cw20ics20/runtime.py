"""Execution environment: blocks, messages, responses and a mock chain querier."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Iterable, Union

from .errors import StdError

NANOS_PER_SECOND = 1_000_000_000
MOCK_CONTRACT_ADDR = "cosmos2contract"

_MIN_ADDRESS_LEN = 3
_MAX_ADDRESS_LEN = 54


@dataclass(frozen=True)
class Coin:
    denom: str
    amount: int


@dataclass(frozen=True)
class BlockInfo:
    height: int
    time: int  # nanoseconds since the Unix epoch
    chain_id: str


@dataclass(frozen=True)
class Env:
    block: BlockInfo
    contract_address: str = MOCK_CONTRACT_ADDR


@dataclass(frozen=True)
class MessageInfo:
    sender: str
    funds: tuple[Coin, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "funds", tuple(self.funds))


def mock_env() -> Env:
    """Return the standard environment used by tests."""
    return Env(
        block=BlockInfo(
            height=12_345,
            time=1_571_797_419_879_305_533,
            chain_id="cosmos-testnet-14002",
        )
    )


def addr_validate(address: str) -> str:
    """Check that an address is well formed and normalised; return it."""
    if len(address) < _MIN_ADDRESS_LEN:
        raise StdError(
            "Invalid input: human address too short for this mock implementation (must be >= 3)."
        )
    if len(address) > _MAX_ADDRESS_LEN:
        raise StdError(
            "Invalid input: human address too long for this mock implementation (must be <= 54)."
        )
    if address != address.lower():
        raise StdError("Invalid input: address not normalized")
    return address


@dataclass(frozen=True)
class BankSend:
    to_address: str
    amount: tuple[Coin, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "amount", tuple(self.amount))


@dataclass(frozen=True)
class WasmExecute:
    contract_addr: str
    msg: bytes
    funds: tuple[Coin, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "funds", tuple(self.funds))


@dataclass(frozen=True)
class IbcSendPacket:
    channel_id: str
    data: bytes
    timeout: int  # timestamp in nanoseconds


CosmosMsg = Union[BankSend, WasmExecute, IbcSendPacket]


class ReplyOn(enum.Enum):
    ALWAYS = "always"
    ERROR = "error"
    SUCCESS = "success"
    NEVER = "never"


@dataclass
class SubMsg:
    msg: CosmosMsg
    id: int = 0
    gas_limit: int | None = None
    reply_on: ReplyOn = ReplyOn.NEVER

    @classmethod
    def reply_on_error(cls, msg: CosmosMsg, reply_id: int) -> SubMsg:
        return cls(msg=msg, id=reply_id, reply_on=ReplyOn.ERROR)


@dataclass
class Response:
    """Result of a handler: messages to dispatch, event attributes and data.

    For packet receipt the data holds the acknowledgement.
    """

    messages: list[SubMsg] = field(default_factory=list)
    attributes: list[tuple[str, str]] = field(default_factory=list)
    data: bytes | None = None

    def add_message(self, msg: CosmosMsg) -> Response:
        self.messages.append(SubMsg(msg))
        return self

    def add_submessage(self, msg: SubMsg) -> Response:
        self.messages.append(msg)
        return self

    def add_attribute(self, key: str, value: object) -> Response:
        self.attributes.append((key, str(value)))
        return self

    def set_data(self, data: bytes) -> Response:
        self.data = data
        return self


class Querier:
    """In-memory view of chain balances and the contract's IBC port."""

    def __init__(self, port_id: str = f"wasm.{MOCK_CONTRACT_ADDR}") -> None:
        self.port_id = port_id
        self._native: dict[str, dict[str, int]] = {}
        self._cw20: dict[tuple[str, str], int] = {}

    def update_balance(self, address: str, coins: Iterable[Coin]) -> None:
        """Replace all native balances held by an address."""
        self._native[address] = {coin.denom: coin.amount for coin in coins}

    def query_balance(self, address: str, denom: str) -> Coin:
        return Coin(denom, self._native.get(address, {}).get(denom, 0))

    def set_cw20_balance(self, token: str, address: str, amount: int) -> None:
        self._cw20[(token, address)] = amount

    def query_cw20_balance(self, token: str, address: str) -> int:
        return self._cw20.get((token, address), 0)