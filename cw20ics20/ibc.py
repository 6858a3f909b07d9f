"""Packet receipt, acknowledgement, timeout and reply handling for ICS20 transfers."""

from __future__ import annotations

import json

from .amount import Amount
from .errors import ContractError, NotFound, NotOnAllowList, UnknownReplyId
from .packet import ACK_FAILURE_ID, RECEIVE_ID, Ics20Ack, Ics20Packet, IbcPacket, Reply, parse_voucher_denom
from .runtime import BankSend, Coin, CosmosMsg, Response, SubMsg, WasmExecute, addr_validate
from .state import (
    Config,
    ContractStorage,
    ReplyArgs,
    reduce_channel_balance,
    undo_reduce_channel_balance,
)

__all__ = [
    "reply",
    "ibc_packet_receive",
    "check_gas_limit",
    "send_amount",
    "ibc_packet_ack",
    "ibc_packet_timeout",
]


def _ack_success() -> bytes:
    return Ics20Ack(result=b"1").to_json()


def _ack_fail(err: str) -> bytes:
    return Ics20Ack(error=err).to_json()


def _load_config(storage: ContractStorage) -> Config:
    if not isinstance(storage.config, Config):
        raise NotFound("cw20_ics20::state::Config")
    return storage.config


def reply(storage: ContractStorage, reply: Reply) -> Response:
    """Handle the outcome of a token transfer submessage.

    A failed send after a packet receipt restores the channel balance and
    replaces the acknowledgement with an error.
    """
    if reply.id == RECEIVE_ID:
        if reply.error is None:
            return Response()
        args = storage.reply_args
        if args is None:
            raise NotFound("cw20_ics20::state::ReplyArgs")
        undo_reduce_channel_balance(storage, args.channel, args.denom, args.amount)
        return Response().set_data(_ack_fail(reply.error))
    if reply.id == ACK_FAILURE_ID:
        if reply.error is None:
            return Response()
        return Response().set_data(_ack_fail(reply.error))
    raise UnknownReplyId(reply.id)


def ibc_packet_receive(storage: ContractStorage, packet: IbcPacket) -> Response:
    """Redeem a returning voucher; failures become an error acknowledgement, never an exception."""
    try:
        return _do_ibc_packet_receive(storage, packet)
    except ContractError as err:
        message = str(err)
        return (
            Response()
            .set_data(_ack_fail(message))
            .add_attribute("action", "receive")
            .add_attribute("success", "false")
            .add_attribute("error", message)
        )


def _do_ibc_packet_receive(storage: ContractStorage, packet: IbcPacket) -> Response:
    msg = Ics20Packet.from_json(packet.data)
    channel = packet.dest.channel_id

    # Tokens that originated here come back as "port/channel/denom".
    denom = parse_voucher_denom(msg.denom, packet.src)

    reduce_channel_balance(storage, channel, denom, msg.amount)
    storage.reply_args = ReplyArgs(channel=channel, denom=denom, amount=msg.amount)

    to_send = Amount.from_parts(denom, msg.amount)
    gas_limit = check_gas_limit(storage, to_send)
    submsg = SubMsg.reply_on_error(send_amount(to_send, msg.receiver), RECEIVE_ID)
    submsg.gas_limit = gas_limit

    return (
        Response()
        .set_data(_ack_success())
        .add_submessage(submsg)
        .add_attribute("action", "receive")
        .add_attribute("sender", msg.sender)
        .add_attribute("receiver", msg.receiver)
        .add_attribute("denom", denom)
        .add_attribute("amount", msg.amount)
        .add_attribute("success", "true")
    )


def check_gas_limit(storage: ContractStorage, amount: Amount) -> int | None:
    """Return the gas limit for sending the amount.

    Cw20 tokens use their allow-list limit, or the default limit if set;
    otherwise they are refused. Native coins have no limit.
    """
    if amount.cw20_address is None:
        return None
    addr = addr_validate(amount.cw20_address)
    allowed = storage.allow_list.get(addr)
    if allowed is not None:
        return allowed.gas_limit
    default = _load_config(storage).default_gas_limit
    if default is None:
        raise NotOnAllowList()
    return default


def send_amount(amount: Amount, recipient: str) -> CosmosMsg:
    """Build the message that moves the amount to the recipient."""
    if amount.cw20_address is None:
        return BankSend(to_address=recipient, amount=(Coin(amount.native_denom, amount.amount),))
    transfer = {"transfer": {"recipient": recipient, "amount": str(amount.amount)}}
    body = json.dumps(transfer, separators=(",", ":"), ensure_ascii=False).encode("utf-8")
    return WasmExecute(contract_addr=amount.cw20_address, msg=body, funds=())


def ibc_packet_ack(
    storage: ContractStorage, acknowledgement: bytes, original_packet: IbcPacket
) -> Response:
    """Handle an acknowledgement: record success, or refund the sender on error."""
    ack = Ics20Ack.from_json(acknowledgement)
    if ack.result is not None:
        return _on_packet_success(original_packet)
    return _on_packet_failure(storage, original_packet, ack.error)


def ibc_packet_timeout(storage: ContractStorage, packet: IbcPacket) -> Response:
    """Refund the sender of a packet that timed out."""
    return _on_packet_failure(storage, packet, "timeout")


def _on_packet_success(packet: IbcPacket) -> Response:
    msg = Ics20Packet.from_json(packet.data)
    return (
        Response()
        .add_attribute("action", "acknowledge")
        .add_attribute("sender", msg.sender)
        .add_attribute("receiver", msg.receiver)
        .add_attribute("denom", msg.denom)
        .add_attribute("amount", msg.amount)
        .add_attribute("success", "true")
    )


def _on_packet_failure(storage: ContractStorage, packet: IbcPacket, err: str) -> Response:
    msg = Ics20Packet.from_json(packet.data)

    # The balance was raised when sending; take it back off.
    reduce_channel_balance(storage, packet.src.channel_id, msg.denom, msg.amount)

    to_send = Amount.from_parts(msg.denom, msg.amount)
    gas_limit = check_gas_limit(storage, to_send)
    submsg = SubMsg.reply_on_error(send_amount(to_send, msg.sender), ACK_FAILURE_ID)
    submsg.gas_limit = gas_limit

    return (
        Response()
        .add_submessage(submsg)
        .add_attribute("action", "acknowledge")
        .add_attribute("sender", msg.sender)
        .add_attribute("receiver", msg.receiver)
        .add_attribute("denom", msg.denom)
        .add_attribute("amount", msg.amount)
        .add_attribute("success", "false")
        .add_attribute("error", err)
    )