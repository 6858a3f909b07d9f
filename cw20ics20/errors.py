"""Errors raised by the contract."""

from __future__ import annotations

PAYMENT_NO_FUNDS = "No funds sent"
PAYMENT_MULTIPLE_DENOMS = "Sent more than one denomination"
PAYMENT_NON_PAYABLE = "This message does no accept funds"


class ContractError(Exception):
    """Base class of every error the contract raises.

    Two errors are equal when they are of the same class and carry the same text.
    """

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ContractError):
            return NotImplemented
        return type(self) is type(other) and self.args == other.args

    def __hash__(self) -> int:
        return hash((type(self), self.args))


class StdError(ContractError):
    """A generic failure of the execution environment."""

    def __init__(self, msg: str) -> None:
        self.msg = msg
        super().__init__(f"Generic error: {msg}")


class NotFound(StdError):
    """A stored item that was required is missing."""

    def __init__(self, kind: str) -> None:
        self.kind = kind
        self.msg = f"{kind} not found"
        ContractError.__init__(self, self.msg)


class ParseError(StdError):
    """Data could not be decoded into the expected type."""

    def __init__(self, target_type: str, msg: str) -> None:
        self.target_type = target_type
        self.msg = msg
        ContractError.__init__(self, f"Error parsing into type {target_type}: {msg}")


class PaymentError(ContractError):
    """The funds attached to a message are not acceptable."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(reason)


class AdminError(ContractError):
    """The caller is not the admin."""

    def __init__(self) -> None:
        super().__init__("Caller is not admin")


class NoSuchChannel(ContractError):
    def __init__(self, id: str) -> None:
        self.id = id
        super().__init__(f"Channel doesn't exist: {id}")


class NoFunds(ContractError):
    def __init__(self) -> None:
        super().__init__("Didn't send any funds")


class AmountOverflow(ContractError):
    def __init__(self) -> None:
        super().__init__("Amount larger than 2**64, not supported by ics20 packets")


class InvalidIbcVersion(ContractError):
    def __init__(self, version: str) -> None:
        self.version = version
        super().__init__(f"Only supports channel with ibc version ics20-1, got {version}")


class OnlyOrderedChannel(ContractError):
    def __init__(self) -> None:
        super().__init__("Only supports unordered channel")


class InsufficientFunds(ContractError):
    def __init__(self) -> None:
        super().__init__("Insufficient funds to redeem voucher on channel")


class NoForeignTokens(ContractError):
    def __init__(self) -> None:
        super().__init__(
            "Only accepts tokens that originate on this chain, not native tokens of remote chain"
        )


class FromOtherPort(ContractError):
    def __init__(self, port: str) -> None:
        self.port = port
        super().__init__(f"Parsed port from denom ({port}) doesn't match packet")


class FromOtherChannel(ContractError):
    def __init__(self, channel: str) -> None:
        self.channel = channel
        super().__init__(f"Parsed channel from denom ({channel}) doesn't match packet")


class CannotMigrate(ContractError):
    def __init__(self, previous_contract: str) -> None:
        self.previous_contract = previous_contract
        super().__init__(f"Cannot migrate from different contract type: {previous_contract}")


class CannotMigrateVersion(ContractError):
    def __init__(self, previous_version: str) -> None:
        self.previous_version = previous_version
        super().__init__(f"Cannot migrate from unsupported version: {previous_version}")


class UnknownReplyId(ContractError):
    def __init__(self, id: int) -> None:
        self.id = id
        super().__init__(f"Got a submessage reply with unknown id: {id}")


class CannotLowerGas(ContractError):
    def __init__(self) -> None:
        super().__init__("You cannot lower the gas limit for a contract on the allow list")


class Unauthorized(ContractError):
    def __init__(self) -> None:
        super().__init__("Only the governance contract can do this")


class NotOnAllowList(ContractError):
    def __init__(self) -> None:
        super().__init__(
            "You can only send cw20 tokens that have been explicitly allowed by governance"
        )