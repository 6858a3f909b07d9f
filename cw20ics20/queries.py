"""Read-only queries on the contract state."""

from __future__ import annotations

from typing import Union

from .amount import Amount
from .errors import NotFound
from .msg import (
    AdminQuery,
    AdminResponse,
    AllowedInfo,
    AllowedQuery,
    AllowedResponse,
    ChannelQuery,
    ChannelResponse,
    ConfigQuery,
    ConfigResponse,
    ListAllowedQuery,
    ListAllowedResponse,
    ListChannelsQuery,
    ListChannelsResponse,
    PortQuery,
    PortResponse,
)
from .runtime import Querier, addr_validate
from .state import Config, ContractStorage

__all__ = [
    "MAX_LIMIT",
    "DEFAULT_LIMIT",
    "query",
    "query_port",
    "query_list",
    "query_channel",
    "query_config",
    "query_allowed",
    "list_allowed",
]

# Pagination settings.
MAX_LIMIT = 30
DEFAULT_LIMIT = 10

QueryMsg = Union[
    PortQuery,
    ListChannelsQuery,
    ChannelQuery,
    ConfigQuery,
    AdminQuery,
    AllowedQuery,
    ListAllowedQuery,
]


def _raw_key(text: str) -> bytes:
    return text.encode("utf-8")


def query(storage: ContractStorage, querier: Querier, msg: QueryMsg) -> object:
    """Answer a query message with the matching response."""
    match msg:
        case PortQuery():
            return query_port(querier)
        case ListChannelsQuery():
            return query_list(storage)
        case ChannelQuery():
            return query_channel(storage, msg.id)
        case ConfigQuery():
            return query_config(storage)
        case AllowedQuery():
            return query_allowed(storage, msg.contract)
        case ListAllowedQuery():
            return list_allowed(storage, msg.start_after, msg.limit)
        case AdminQuery():
            return AdminResponse(admin=storage.admin.address)
    raise TypeError(f"unsupported query message: {msg!r}")


def query_port(querier: Querier) -> PortResponse:
    return PortResponse(port_id=querier.port_id)


def query_list(storage: ContractStorage) -> ListChannelsResponse:
    """List every connected channel in ascending key order."""
    channels = [storage.channel_info[key] for key in sorted(storage.channel_info, key=_raw_key)]
    return ListChannelsResponse(channels=channels)


def query_channel(storage: ContractStorage, channel_id: str) -> ChannelResponse:
    """Return a channel's info with its outstanding balances and totals sent."""
    info = storage.channel_info.get(channel_id)
    if info is None:
        raise NotFound("cw20_ics20::state::ChannelInfo")
    states = sorted(
        (
            (denom, state)
            for (chan, denom), state in storage.channel_state.items()
            if chan == channel_id
        ),
        key=lambda item: _raw_key(item[0]),
    )
    balances = [Amount.from_parts(denom, state.outstanding) for denom, state in states]
    total_sent = [Amount.from_parts(denom, state.total_sent) for denom, state in states]
    return ChannelResponse(info=info, balances=balances, total_sent=total_sent)


def query_config(storage: ContractStorage) -> ConfigResponse:
    cfg = storage.config
    if not isinstance(cfg, Config):
        raise NotFound("cw20_ics20::state::Config")
    admin = storage.admin.address
    return ConfigResponse(
        default_timeout=cfg.default_timeout,
        default_gas_limit=cfg.default_gas_limit,
        gov_contract=admin if admin is not None else "",
    )


def query_allowed(storage: ContractStorage, contract: str) -> AllowedResponse:
    addr = addr_validate(contract)
    info = storage.allow_list.get(addr)
    if info is None:
        return AllowedResponse(is_allowed=False, gas_limit=None)
    return AllowedResponse(is_allowed=True, gas_limit=info.gas_limit)


def list_allowed(
    storage: ContractStorage, start_after: str | None = None, limit: int | None = None
) -> ListAllowedResponse:
    """Page through the allow list in ascending order, starting after the given address."""
    count = min(DEFAULT_LIMIT if limit is None else limit, MAX_LIMIT)
    keys = sorted(storage.allow_list, key=_raw_key)
    if start_after is not None:
        start = _raw_key(addr_validate(start_after))
        keys = [key for key in keys if _raw_key(key) > start]
    allow = [
        AllowedInfo(contract=key, gas_limit=storage.allow_list[key].gas_limit)
        for key in keys[:count]
    ]
    return ListAllowedResponse(allow=allow)