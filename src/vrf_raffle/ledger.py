from __future__ import annotations

from collections import defaultdict
from typing import Dict, Set

from .errors import InsufficientBalance


class Ledger:
    """
    Balances of every simulated address, including the raffle itself.

    `send` mirrors a low-level value call: it returns False instead of raising
    when the recipient refuses the payment (see `reject`).
    """

    def __init__(self) -> None:
        self._balances: Dict[str, int] = defaultdict(int)
        self._rejecting: Set[str] = set()

    def balance_of(self, address: str) -> int:
        return self._balances.get(address, 0)

    def fund(self, address: str, amount: int) -> None:
        if amount < 0:
            raise ValueError("Cannot fund a negative amount.")
        self._balances[address] += amount

    def reject(self, address: str, rejecting: bool = True) -> None:
        if rejecting:
            self._rejecting.add(address)
        else:
            self._rejecting.discard(address)

    def debit_into(self, sender: str, recipient: str, amount: int) -> None:
        """Moves value that the sender attached to a call. Never refused."""
        self._move(sender, recipient, amount)

    def send(self, sender: str, recipient: str, amount: int) -> bool:
        if recipient in self._rejecting:
            return False
        self._move(sender, recipient, amount)
        return True

    def claw_back(self, holder: str, recipient: str, amount: int) -> None:
        """Compensating transfer that undoes an earlier `send`."""
        self._move(holder, recipient, amount)

    def _move(self, sender: str, recipient: str, amount: int) -> None:
        balance = self.balance_of(sender)
        if amount > balance:
            raise InsufficientBalance(sender, balance, amount)
        self._balances[sender] = balance - amount
        self._balances[recipient] += amount

    def snapshot(self) -> Dict[str, int]:
        return dict(self._balances)
