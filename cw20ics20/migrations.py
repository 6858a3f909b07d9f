"""Storage layouts of earlier releases and the conversions from them."""

from __future__ import annotations

from dataclasses import dataclass

from .amount import Amount
from .errors import CannotMigrate, StdError
from .runtime import Env, Querier
from .state import ChannelState, ContractStorage


@dataclass(frozen=True)
class LegacyConfig:
    """Configuration as stored by releases older than 0.12.0."""

    default_timeout: int
    gov_contract: str


def update_balances(storage: ContractStorage, querier: Querier, env: Env) -> None:
    """Count in-flight tokens into the channel balances.

    Older releases only updated balances on a success acknowledgement; this
    adds whatever the contract holds beyond the recorded balance.
    Only a single open channel can be migrated.
    """
    channels = sorted(storage.channel_info, key=str.encode)
    if not channels:
        return
    if len(channels) > 1:
        raise CannotMigrate("multiple channels open")
    channel = channels[0]
    states = sorted(
        (
            (denom, state)
            for (chan, denom), state in storage.channel_state.items()
            if chan == channel
        ),
        key=lambda item: item[0].encode(),
    )
    for denom, state in states:
        _update_denom(storage, querier, env.contract_address, channel, denom, state)


def _update_denom(
    storage: ContractStorage,
    querier: Querier,
    contract: str,
    channel: str,
    denom: str,
    state: ChannelState,
) -> None:
    amount = Amount.from_parts(denom, state.outstanding)
    if amount.cw20_address is not None:
        balance = querier.query_cw20_balance(amount.cw20_address, contract)
    else:
        balance = querier.query_balance(contract, denom).amount

    if balance < state.outstanding:
        raise StdError(f"Cannot Sub with {balance} and {state.outstanding}")
    diff = balance - state.outstanding
    if diff:
        storage.channel_state[(channel, denom)] = ChannelState(
            outstanding=state.outstanding + diff,
            total_sent=state.total_sent + diff,
        )