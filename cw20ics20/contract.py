"""Contract entry points: instantiation, transfers, governance and migration."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Union

from .amount import Amount
from .errors import (
    PAYMENT_MULTIPLE_DENOMS,
    PAYMENT_NO_FUNDS,
    PAYMENT_NON_PAYABLE,
    CannotLowerGas,
    CannotMigrate,
    CannotMigrateVersion,
    NoFunds,
    NoSuchChannel,
    NotFound,
    NotOnAllowList,
    ParseError,
    PaymentError,
    StdError,
)
from .migrations import LegacyConfig, update_balances
from .msg import (
    AllowMsg,
    Cw20ReceiveMsg,
    InitMsg,
    MigrateMsg,
    TransferMsg,
    UpdateAdminMsg,
)
from .packet import Ics20Packet
from .runtime import (
    NANOS_PER_SECOND,
    Coin,
    Env,
    IbcSendPacket,
    MessageInfo,
    Querier,
    Response,
    addr_validate,
)
from .state import (
    AllowInfo,
    Config,
    ContractStorage,
    ContractVersion,
    increase_channel_balance,
)

__all__ = [
    "CONTRACT_NAME",
    "CONTRACT_VERSION",
    "instantiate",
    "execute",
    "execute_receive",
    "execute_transfer",
    "execute_allow",
    "migrate",
]

CONTRACT_NAME = "crates.io:cw20-ics20"
CONTRACT_VERSION = "1.0.1"

MIGRATE_MIN_VERSION = "0.11.1"
MIGRATE_VERSION_2 = "0.12.0-alpha1"
# The last release whose balances still need the v2 -> v3 conversion.
MIGRATE_VERSION_3 = "0.13.0"

ExecuteMsg = Union[Cw20ReceiveMsg, TransferMsg, AllowMsg, UpdateAdminMsg]

_SEMVER = re.compile(
    r"^(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)"
    r"(?:-([0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?"
    r"(?:\+([0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?$"
)


@dataclass(frozen=True, order=True)
class _Version:
    key: tuple

    @classmethod
    def parse(cls, text: str) -> _Version:
        match = _SEMVER.match(text)
        if match is None:
            raise StdError(f"Semver: unexpected version string {text!r}")
        major, minor, patch, pre, _build = match.groups()
        if pre is None:
            pre_key: tuple = (1,)
        else:
            pre_key = (
                0,
                tuple((0, int(part)) if part.isdigit() else (1, part) for part in pre.split(".")),
            )
        return cls((int(major), int(minor), int(patch), pre_key))


def _load_config(storage: ContractStorage) -> Config:
    if not isinstance(storage.config, Config):
        raise NotFound("cw20_ics20::state::Config")
    return storage.config


def _one_coin(info: MessageInfo) -> Coin:
    if not info.funds:
        raise PaymentError(PAYMENT_NO_FUNDS)
    if len(info.funds) > 1:
        raise PaymentError(PAYMENT_MULTIPLE_DENOMS)
    coin = info.funds[0]
    if coin.amount == 0:
        raise PaymentError(PAYMENT_NO_FUNDS)
    return coin


def _nonpayable(info: MessageInfo) -> None:
    if info.funds:
        raise PaymentError(PAYMENT_NON_PAYABLE)


def instantiate(storage: ContractStorage, info: MessageInfo, msg: InitMsg) -> Response:
    """Set up configuration, admin and the initial allow list."""
    storage.contract_version = ContractVersion(CONTRACT_NAME, CONTRACT_VERSION)
    storage.config = Config(
        default_timeout=msg.default_timeout,
        default_gas_limit=msg.default_gas_limit,
    )
    storage.admin.address = addr_validate(msg.gov_contract)
    for allowed in msg.allowlist:
        contract = addr_validate(allowed.contract)
        storage.allow_list[contract] = AllowInfo(gas_limit=allowed.gas_limit)
    return Response()


def execute(storage: ContractStorage, env: Env, info: MessageInfo, msg: ExecuteMsg) -> Response:
    """Dispatch an execute message to its handler."""
    match msg:
        case Cw20ReceiveMsg():
            return execute_receive(storage, env, info, msg)
        case TransferMsg():
            coin = _one_coin(info)
            return execute_transfer(
                storage, env, msg, Amount.native(coin.amount, coin.denom), info.sender
            )
        case AllowMsg():
            return execute_allow(storage, info, msg)
        case UpdateAdminMsg():
            admin = addr_validate(msg.admin)
            storage.admin.update(info.sender, admin)
            return (
                Response()
                .add_attribute("action", "update_admin")
                .add_attribute("admin", admin)
                .add_attribute("sender", info.sender)
            )
    raise TypeError(f"unsupported execute message: {msg!r}")


def execute_receive(
    storage: ContractStorage, env: Env, info: MessageInfo, wrapper: Cw20ReceiveMsg
) -> Response:
    """Send cw20 tokens handed over by a token contract."""
    _nonpayable(info)
    msg = TransferMsg.from_json(wrapper.msg)
    amount = Amount.cw20(wrapper.amount, info.sender)
    return execute_transfer(storage, env, msg, amount, addr_validate(wrapper.sender))


def execute_transfer(
    storage: ContractStorage, env: Env, msg: TransferMsg, amount: Amount, sender: str
) -> Response:
    """Build and send an ICS20 packet, raising the channel balance optimistically."""
    if amount.is_empty():
        raise NoFunds()
    if msg.channel not in storage.channel_info:
        raise NoSuchChannel(msg.channel)
    config = _load_config(storage)

    if amount.cw20_address is not None:
        addr = addr_validate(amount.cw20_address)
        # With a default gas limit any cw20 token may be sent.
        if config.default_gas_limit is None and addr not in storage.allow_list:
            raise NotOnAllowList()

    timeout_delta = msg.timeout if msg.timeout is not None else config.default_timeout
    timeout = env.block.time + timeout_delta * NANOS_PER_SECOND

    packet = Ics20Packet(
        amount=amount.amount,
        denom=amount.denom(),
        sender=sender,
        receiver=msg.remote_address,
    ).with_memo(msg.memo)
    packet.validate()

    # Failed acks and timeouts take this back off again.
    increase_channel_balance(storage, msg.channel, amount.denom(), amount.amount)

    send = IbcSendPacket(channel_id=msg.channel, data=packet.to_json(), timeout=timeout)
    return (
        Response()
        .add_message(send)
        .add_attribute("action", "transfer")
        .add_attribute("sender", packet.sender)
        .add_attribute("receiver", packet.receiver)
        .add_attribute("denom", packet.denom)
        .add_attribute("amount", packet.amount)
    )


def execute_allow(storage: ContractStorage, info: MessageInfo, allow: AllowMsg) -> Response:
    """Let governance allow a contract or raise its gas limit; limits can never be lowered."""
    storage.admin.assert_admin(info.sender)

    contract = addr_validate(allow.contract)
    old = storage.allow_list.get(contract)
    if old is not None:
        old_limit, new_limit = old.gas_limit, allow.gas_limit
        if new_limit is not None and (old_limit is None or new_limit < old_limit):
            raise CannotLowerGas()
    storage.allow_list[contract] = AllowInfo(gas_limit=allow.gas_limit)

    gas = str(allow.gas_limit) if allow.gas_limit is not None else "None"
    return (
        Response()
        .add_attribute("action", "allow")
        .add_attribute("contract", allow.contract)
        .add_attribute("gas_limit", gas)
    )


def migrate(storage: ContractStorage, querier: Querier, env: Env, msg: MigrateMsg) -> Response:
    """Upgrade storage written by an equal or older release of this contract."""
    version = _Version.parse(CONTRACT_VERSION)
    stored = storage.contract_version
    if stored is None:
        raise NotFound("cw2::ContractVersion")
    storage_version = _Version.parse(stored.version)

    if stored.contract != CONTRACT_NAME:
        raise CannotMigrate(stored.contract)
    if storage_version > version:
        raise CannotMigrateVersion(stored.version)
    if storage_version < _Version.parse(MIGRATE_MIN_VERSION):
        raise CannotMigrateVersion(stored.version)

    if storage_version <= _Version.parse(MIGRATE_VERSION_2):
        old_config = storage.config
        if old_config is None:
            raise NotFound("cw20_ics20::migrations::v1::Config")
        if not isinstance(old_config, LegacyConfig):
            raise ParseError("cw20_ics20::migrations::v1::Config", "missing field `gov_contract`")
        storage.admin.address = old_config.gov_contract
        storage.config = Config(default_timeout=old_config.default_timeout, default_gas_limit=None)

    if storage_version <= _Version.parse(MIGRATE_VERSION_3):
        update_balances(storage, querier, env)

    # The default gas limit may be set on any migration, even to the same version.
    if msg.default_gas_limit is not None:
        _load_config(storage).default_gas_limit = msg.default_gas_limit

    if storage_version < version:
        storage.contract_version = ContractVersion(CONTRACT_NAME, CONTRACT_VERSION)

    return Response()