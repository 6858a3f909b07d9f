"""Persistent contract state and channel balance bookkeeping."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .errors import AdminError, InsufficientFunds

if TYPE_CHECKING:
    from .migrations import LegacyConfig


@dataclass(frozen=True)
class IbcEndpoint:
    port_id: str
    channel_id: str


@dataclass
class ChannelState:
    outstanding: int = 0
    total_sent: int = 0


@dataclass
class Config:
    default_timeout: int
    default_gas_limit: int | None = None


@dataclass(frozen=True)
class ChannelInfo:
    """Static information on one channel that does not change."""

    id: str
    counterparty_endpoint: IbcEndpoint
    connection_id: str


@dataclass(frozen=True)
class AllowInfo:
    gas_limit: int | None = None


@dataclass(frozen=True)
class ReplyArgs:
    """Information handed from packet receipt to the reply handler."""

    channel: str
    denom: str
    amount: int


@dataclass(frozen=True)
class ContractVersion:
    contract: str
    version: str


@dataclass
class Admin:
    """The single address allowed to run governance actions."""

    address: str | None = None

    def is_admin(self, sender: str) -> bool:
        return self.address is not None and self.address == sender

    def assert_admin(self, sender: str) -> None:
        if not self.is_admin(sender):
            raise AdminError()

    def update(self, sender: str, new_admin: str | None) -> None:
        self.assert_admin(sender)
        self.address = new_admin


@dataclass
class ContractStorage:
    """Everything the contract keeps between calls.

    Storage written by releases before 0.12 holds a LegacyConfig in ``config``.
    """

    config: Config | LegacyConfig | None = None
    admin: Admin = field(default_factory=Admin)
    reply_args: ReplyArgs | None = None
    channel_info: dict[str, ChannelInfo] = field(default_factory=dict)
    channel_state: dict[tuple[str, str], ChannelState] = field(default_factory=dict)
    allow_list: dict[str, AllowInfo] = field(default_factory=dict)
    contract_version: ContractVersion | None = None


def increase_channel_balance(
    storage: ContractStorage, channel: str, denom: str, amount: int
) -> None:
    state = storage.channel_state.setdefault((channel, denom), ChannelState())
    state.outstanding += amount
    state.total_sent += amount


def reduce_channel_balance(
    storage: ContractStorage, channel: str, denom: str, amount: int
) -> None:
    """Take amount off the outstanding balance; raise InsufficientFunds if it is not there."""
    state = storage.channel_state.get((channel, denom))
    if state is None or state.outstanding < amount:
        raise InsufficientFunds()
    state.outstanding -= amount


def undo_reduce_channel_balance(
    storage: ContractStorage, channel: str, denom: str, amount: int
) -> None:
    """Add amount back to the outstanding balance only, reversing reduce_channel_balance."""
    state = storage.channel_state.setdefault((channel, denom), ChannelState())
    state.outstanding += amount