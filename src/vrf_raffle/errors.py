from __future__ import annotations


class RaffleError(Exception):
    """Base class for every rejected raffle call."""


class AlreadyInSession(RaffleError):
    def __init__(self, owner: str) -> None:
        super().__init__(f"Raffle already in session (owner={owner})")
        self.owner = owner


class NotOpen(RaffleError):
    def __init__(self) -> None:
        super().__init__("Raffle is not open")


class OwnerCannotEnter(RaffleError):
    def __init__(self, owner: str) -> None:
        super().__init__(f"Owner {owner} cannot enter their own raffle")
        self.owner = owner


class InsufficientFee(RaffleError):
    def __init__(self, required: int, paid: int) -> None:
        super().__init__(f"Insufficient fee: required={required} paid={paid}")
        self.required = required
        self.paid = paid


class NotOwner(RaffleError):
    def __init__(self, sender: str) -> None:
        super().__init__(f"{sender} is not the raffle owner")
        self.sender = sender


class TransferFailed(RaffleError):
    def __init__(self, recipient: str, amount: int) -> None:
        super().__init__(f"Transfer of {amount} wei to {recipient} failed")
        self.recipient = recipient
        self.amount = amount


class OnlyCoordinatorCanFulfill(RaffleError):
    def __init__(self, have: str, want: str) -> None:
        super().__init__(f"Only coordinator {want} can fulfill (called by {have})")
        self.have = have
        self.want = want


class UnknownRequest(RaffleError):
    def __init__(self, request_id: int, pending: int | None) -> None:
        super().__init__(
            f"Request {request_id} does not match pending request {pending}"
        )
        self.request_id = request_id
        self.pending = pending


class InvalidRequest(Exception):
    """Raised by a coordinator for an unknown or already fulfilled request."""

    def __init__(self, request_id: int) -> None:
        super().__init__(f"Nonexistent or fulfilled request: {request_id}")
        self.request_id = request_id


class InsufficientBalance(Exception):
    def __init__(self, address: str, balance: int, amount: int) -> None:
        super().__init__(
            f"{address} has {balance} wei, cannot move {amount} wei"
        )
        self.address = address
        self.balance = balance
        self.amount = amount
