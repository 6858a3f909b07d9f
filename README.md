# cw20ics20

Contract logic for sending tokens from one chain to another over the ICS20
transfer protocol. It handles both native coins and cw20 tokens, keeps a
per-channel record of outstanding and total-sent balances, and only lets
previously sent tokens be redeemed. It does not mint tokens that came from
the remote chain: such packets get an error acknowledgement.

## Installation

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## Overview

- `cw20ics20.contract` sets up, runs and migrates the contract:
  `instantiate`, `execute`, `execute_receive`, `execute_transfer`,
  `execute_allow` and `migrate`. `execute` accepts a `TransferMsg`
  (exactly one native coin attached), a `Cw20ReceiveMsg` (tokens handed
  over by a cw20 contract, with an encoded `TransferMsg`), an `AllowMsg`
  (admin only; gas limits can be raised but never lowered) or an
  `UpdateAdminMsg`.
- `cw20ics20.queries` answers queries: `query` dispatches `PortQuery`,
  `ListChannelsQuery`, `ChannelQuery`, `ConfigQuery`, `AdminQuery`,
  `AllowedQuery` and `ListAllowedQuery`; the individual functions are
  `query_port`, `query_list`, `query_channel`, `query_config`,
  `query_allowed` and `list_allowed` (10 entries per page by default,
  at most 30).
- `cw20ics20.packet` holds the wire formats `Ics20Packet` and `Ics20Ack`
  (both with `to_json` / `from_json`) and the channel handshake checks:
  `ibc_channel_open`, `ibc_channel_connect` and `parse_voucher_denom`.
  Only unordered channels of version `ics20-1` are accepted.
- `cw20ics20.ibc` handles the packet lifecycle: `ibc_packet_receive`,
  `ibc_packet_ack`, `ibc_packet_timeout` and `reply`, plus
  `check_gas_limit` and `send_amount`.
- `cw20ics20.state` holds the stored data in `ContractStorage`, the
  `Admin` record, and the channel balance helpers
  `increase_channel_balance`, `reduce_channel_balance` and
  `undo_reduce_channel_balance`.
- `cw20ics20.migrations` converts storage written by older releases
  (`LegacyConfig`, `update_balances`); `contract.migrate` runs it.
- `cw20ics20.msg` defines the message and response dataclasses.
- `cw20ics20.runtime` supplies the execution environment: `Env`,
  `BlockInfo`, `MessageInfo`, `Coin`, the outgoing messages `BankSend`,
  `WasmExecute` and `IbcSendPacket`, `SubMsg`, `Response`, `mock_env`,
  `addr_validate` and an in-memory `Querier` for balances.
- `cw20ics20.amount.Amount` is a native coin or a cw20 amount. A cw20
  denom is written `cw20:<address>`.
- `cw20ics20.errors` defines `ContractError` and its subclasses. Every
  failure is raised as one of these.

## Example

```python
from cw20ics20.contract import instantiate, execute
from cw20ics20.msg import InitMsg, TransferMsg
from cw20ics20.packet import ChannelOrder, IbcChannel, ibc_channel_open, ibc_channel_connect
from cw20ics20.queries import query_channel
from cw20ics20.runtime import Coin, MessageInfo, mock_env
from cw20ics20.state import ContractStorage, IbcEndpoint

storage = ContractStorage()
instantiate(
    storage,
    MessageInfo(sender="anyone", funds=[]),
    InitMsg(default_timeout=3600, gov_contract="gov", allowlist=[], default_gas_limit=None),
)

channel = IbcChannel(
    endpoint=IbcEndpoint(port_id="ibc:wasm1234567890abcdef", channel_id="channel-9"),
    counterparty_endpoint=IbcEndpoint(port_id="transfer", channel_id="channel-95"),
    order=ChannelOrder.UNORDERED,
    version="ics20-1",
    connection_id="connection-2",
)
ibc_channel_open(channel, None)
ibc_channel_connect(storage, channel, "ics20-1")

response = execute(
    storage,
    mock_env(),
    MessageInfo(sender="local-sender", funds=[Coin(denom="uatom", amount=1000)]),
    TransferMsg(channel="channel-9", remote_address="remote-rcpt"),
)

print(query_channel(storage, "channel-9").balances)
```

Transfers raise the balance on a channel right away. A failed
acknowledgement or a timeout lowers it again and returns the funds to the
sender. An incoming packet can only redeem up to the outstanding balance
for its denom on that channel.

## What it does not do

- There is no chain and no relayer. Handlers return a `Response` listing
  the messages to dispatch; nothing sends them. Submessage outcomes are
  fed back by calling `ibc.reply` yourself.
- State lives only in the `ContractStorage` object you pass in; nothing
  is written to disk.
- Closing a channel is not handled.
- There is no command-line tool and no schema generator.