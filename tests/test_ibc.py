import pytest

from cw20ics20.amount import Amount
from cw20ics20.errors import (
    InsufficientFunds,
    NoForeignTokens,
    NotFound,
    NotOnAllowList,
    UnknownReplyId,
)
from cw20ics20.ibc import (
    check_gas_limit,
    ibc_packet_ack,
    ibc_packet_receive,
    ibc_packet_timeout,
    reply,
    send_amount,
)
from cw20ics20.packet import (
    ACK_FAILURE_ID,
    ICS20_ORDERING,
    ICS20_VERSION,
    RECEIVE_ID,
    IbcChannel,
    IbcPacket,
    Ics20Ack,
    Ics20Packet,
    Reply,
    ibc_channel_connect,
    ibc_channel_open,
)
from cw20ics20.runtime import BankSend, Coin, ReplyOn, SubMsg, WasmExecute
from cw20ics20.state import (
    Admin,
    AllowInfo,
    ChannelState,
    Config,
    ContractStorage,
    IbcEndpoint,
    increase_channel_balance,
)

DEFAULT_TIMEOUT = 3600
CONTRACT_PORT = "ibc:wasm1234567890abcdef"
REMOTE_PORT = "transfer"
CONNECTION_ID = "connection-2"


def mock_channel(channel_id):
    return IbcChannel(
        endpoint=IbcEndpoint(CONTRACT_PORT, channel_id),
        counterparty_endpoint=IbcEndpoint(REMOTE_PORT, f"{channel_id}5"),
        order=ICS20_ORDERING,
        version=ICS20_VERSION,
        connection_id=CONNECTION_ID,
    )


def setup(channels, allow):
    storage = ContractStorage(
        config=Config(default_timeout=DEFAULT_TIMEOUT, default_gas_limit=None),
        admin=Admin("gov"),
        allow_list={contract: AllowInfo(gas) for contract, gas in allow},
    )
    for channel_id in channels:
        channel = mock_channel(channel_id)
        ibc_channel_open(channel)
        ibc_channel_connect(storage, channel, ICS20_VERSION)
    return storage


def mock_receive_packet(my_channel, amount, denom, receiver):
    data = Ics20Packet(
        denom=f"{REMOTE_PORT}/channel-1234/{denom}",
        amount=amount,
        sender="remote-sender",
        receiver=receiver,
    )
    return IbcPacket(
        data=data.to_json(),
        src=IbcEndpoint(REMOTE_PORT, "channel-1234"),
        dest=IbcEndpoint(CONTRACT_PORT, my_channel),
        sequence=3,
        timeout=1665321069 * 10**9,
    )


def mock_sent_packet(my_channel, amount, denom, sender):
    data = Ics20Packet(amount=amount, denom=denom, sender=sender, receiver="remote-rcpt")
    return IbcPacket(
        data=data.to_json(),
        src=IbcEndpoint(CONTRACT_PORT, my_channel),
        dest=IbcEndpoint(REMOTE_PORT, "channel-1234"),
        sequence=2,
        timeout=1665321069 * 10**9,
    )


def cw20_payment(amount, address, recipient, gas_limit, reply_id=RECEIVE_ID):
    body = f'{{"transfer":{{"recipient":"{recipient}","amount":"{amount}"}}}}'.encode()
    return SubMsg(
        msg=WasmExecute(contract_addr=address, msg=body, funds=()),
        id=reply_id,
        gas_limit=gas_limit,
        reply_on=ReplyOn.ERROR,
    )


def native_payment(amount, denom, recipient, reply_id=RECEIVE_ID):
    return SubMsg(
        msg=BankSend(to_address=recipient, amount=(Coin(denom, amount),)),
        id=reply_id,
        reply_on=ReplyOn.ERROR,
    )


NO_FUNDS = Ics20Ack(error=str(InsufficientFunds()))


def test_send_receive_cw20():
    send_channel = "channel-9"
    cw20_addr = "token-addr"
    cw20_denom = "cw20:token-addr"
    gas_limit = 1234567
    storage = setup(["channel-1", "channel-7", send_channel], [(cw20_addr, gas_limit)])

    recv_packet = mock_receive_packet(send_channel, 876543210, cw20_denom, "local-rcpt")
    recv_high_packet = mock_receive_packet(send_channel, 1876543210, cw20_denom, "local-rcpt")

    res = ibc_packet_receive(storage, recv_packet)
    assert res.messages == []
    assert Ics20Ack.from_json(res.data) == NO_FUNDS

    increase_channel_balance(storage, send_channel, cw20_denom, 987654321)

    res = ibc_packet_receive(storage, recv_high_packet)
    assert res.messages == []
    assert Ics20Ack.from_json(res.data) == NO_FUNDS

    res = ibc_packet_receive(storage, recv_packet)
    assert res.messages == [cw20_payment(876543210, cw20_addr, "local-rcpt", gas_limit)]
    assert Ics20Ack.from_json(res.data).result is not None

    assert storage.channel_state[(send_channel, cw20_denom)] == ChannelState(
        outstanding=111111111, total_sent=987654321
    )


def test_send_receive_native():
    send_channel = "channel-9"
    storage = setup(["channel-1", "channel-7", send_channel], [])
    denom = "uatom"

    recv_packet = mock_receive_packet(send_channel, 876543210, denom, "local-rcpt")
    recv_high_packet = mock_receive_packet(send_channel, 1876543210, denom, "local-rcpt")

    res = ibc_packet_receive(storage, recv_packet)
    assert res.messages == []
    assert Ics20Ack.from_json(res.data) == NO_FUNDS

    increase_channel_balance(storage, send_channel, denom, 987654321)

    res = ibc_packet_receive(storage, recv_high_packet)
    assert res.messages == []
    assert Ics20Ack.from_json(res.data) == NO_FUNDS

    res = ibc_packet_receive(storage, recv_packet)
    assert res.messages == [native_payment(876543210, denom, "local-rcpt")]
    assert Ics20Ack.from_json(res.data) == Ics20Ack(result=b"1")
    assert ("success", "true") in res.attributes
    assert ("denom", denom) in res.attributes

    assert storage.channel_state[(send_channel, denom)] == ChannelState(
        outstanding=111111111, total_sent=987654321
    )


def test_check_gas_limit_handles_all_cases():
    allowed = "foobar"
    allowed_gas = 777666
    storage = setup(["channel-9"], [(allowed, allowed_gas)])

    assert check_gas_limit(storage, Amount.cw20(500, allowed)) == allowed_gas

    random = "tokenz"
    with pytest.raises(NotOnAllowList):
        check_gas_limit(storage, Amount.cw20(500, random))

    storage.config.default_gas_limit = 54321
    assert check_gas_limit(storage, Amount.cw20(500, allowed)) == allowed_gas
    assert check_gas_limit(storage, Amount.cw20(500, random)) == 54321


def test_check_gas_limit_native_has_none():
    storage = setup([], [])
    assert check_gas_limit(storage, Amount.native(500, "ucosm")) is None


def test_send_amount_native_and_cw20():
    assert send_amount(Amount.native(10, "ucosm"), "rcpt") == BankSend(
        to_address="rcpt", amount=(Coin("ucosm", 10),)
    )
    assert send_amount(Amount.cw20(42, "token-addr"), "rcpt") == WasmExecute(
        contract_addr="token-addr",
        msg=b'{"transfer":{"recipient":"rcpt","amount":"42"}}',
        funds=(),
    )


def test_receive_foreign_token_fails_with_ack():
    storage = setup(["channel-9"], [])
    data = Ics20Packet(amount=5, denom="uatom", sender="remote-sender", receiver="local-rcpt")
    packet = IbcPacket(
        data=data.to_json(),
        src=IbcEndpoint(REMOTE_PORT, "channel-1234"),
        dest=IbcEndpoint(CONTRACT_PORT, "channel-9"),
        sequence=1,
        timeout=0,
    )
    res = ibc_packet_receive(storage, packet)
    assert Ics20Ack.from_json(res.data) == Ics20Ack(error=str(NoForeignTokens()))
    assert ("success", "false") in res.attributes


def test_receive_bad_data_fails_with_ack():
    storage = setup(["channel-9"], [])
    packet = IbcPacket(
        data=b"not json",
        src=IbcEndpoint(REMOTE_PORT, "channel-1234"),
        dest=IbcEndpoint(CONTRACT_PORT, "channel-9"),
        sequence=1,
        timeout=0,
    )
    res = ibc_packet_receive(storage, packet)
    ack = Ics20Ack.from_json(res.data)
    assert ack.error.startswith("Error parsing into type")
    assert res.messages == []


def test_reply_error_undoes_receive():
    send_channel = "channel-9"
    denom = "uatom"
    storage = setup([send_channel], [])
    increase_channel_balance(storage, send_channel, denom, 1000)
    ibc_packet_receive(storage, mock_receive_packet(send_channel, 400, denom, "local-rcpt"))
    assert storage.channel_state[(send_channel, denom)].outstanding == 600

    res = reply(storage, Reply(id=RECEIVE_ID, error="send failed"))
    assert Ics20Ack.from_json(res.data) == Ics20Ack(error="send failed")
    assert storage.channel_state[(send_channel, denom)] == ChannelState(1000, 1000)


def test_reply_success_is_empty():
    storage = setup([], [])
    res = reply(storage, Reply(id=RECEIVE_ID))
    assert res.data is None and res.messages == []
    res = reply(storage, Reply(id=ACK_FAILURE_ID))
    assert res.data is None


def test_reply_ack_failure_error_sets_data():
    storage = setup([], [])
    res = reply(storage, Reply(id=ACK_FAILURE_ID, error="oops"))
    assert Ics20Ack.from_json(res.data) == Ics20Ack(error="oops")


def test_reply_without_args_fails():
    storage = setup([], [])
    with pytest.raises(NotFound):
        reply(storage, Reply(id=RECEIVE_ID, error="boom"))


def test_reply_unknown_id():
    storage = setup([], [])
    with pytest.raises(UnknownReplyId) as info:
        reply(storage, Reply(id=7))
    assert info.value == UnknownReplyId(7)


def test_ack_success_keeps_balance():
    send_channel = "channel-9"
    storage = setup([send_channel], [])
    increase_channel_balance(storage, send_channel, "ucosm", 300)
    packet = mock_sent_packet(send_channel, 300, "ucosm", "local-sender")
    res = ibc_packet_ack(storage, Ics20Ack(result=b"1").to_json(), packet)
    assert res.messages == []
    assert ("success", "true") in res.attributes
    assert storage.channel_state[(send_channel, "ucosm")] == ChannelState(300, 300)


def test_ack_error_refunds_sender():
    send_channel = "channel-9"
    storage = setup([send_channel], [])
    increase_channel_balance(storage, send_channel, "ucosm", 300)
    packet = mock_sent_packet(send_channel, 300, "ucosm", "local-sender")
    res = ibc_packet_ack(storage, Ics20Ack(error="bad coin").to_json(), packet)
    assert res.messages == [native_payment(300, "ucosm", "local-sender", ACK_FAILURE_ID)]
    assert ("error", "bad coin") in res.attributes
    assert storage.channel_state[(send_channel, "ucosm")] == ChannelState(0, 300)


def test_timeout_refunds_cw20_sender():
    send_channel = "channel-9"
    storage = setup([send_channel], [("token-addr", 5000)])
    increase_channel_balance(storage, send_channel, "cw20:token-addr", 80)
    packet = mock_sent_packet(send_channel, 80, "cw20:token-addr", "local-sender")
    res = ibc_packet_timeout(storage, packet)
    assert res.messages == [
        cw20_payment(80, "token-addr", "local-sender", 5000, ACK_FAILURE_ID)
    ]
    assert ("error", "timeout") in res.attributes
    assert storage.channel_state[(send_channel, "cw20:token-addr")].outstanding == 0


def test_timeout_without_balance_raises():
    storage = setup(["channel-9"], [])
    packet = mock_sent_packet("channel-9", 80, "ucosm", "local-sender")
    with pytest.raises(InsufficientFunds):
        ibc_packet_timeout(storage, packet)