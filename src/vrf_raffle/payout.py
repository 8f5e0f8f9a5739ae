from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from .draw import split_pot
from .errors import TransferFailed
from .ledger import Ledger

log = logging.getLogger("payout")


class PayoutPolicy(Enum):
    # Both transfers land or neither does.
    ATOMIC = "atomic"
    # A failed winner transfer leaves the owner fee paid.
    PARTIAL_COMMIT = "partial-commit"


@dataclass(frozen=True)
class Payout:
    owner: str
    winner: str
    owner_fee: int
    winner_prize: int


class PayoutEngine:
    def __init__(
        self,
        ledger: Ledger,
        raffle_address: str,
        policy: PayoutPolicy = PayoutPolicy.ATOMIC,
    ) -> None:
        self.ledger = ledger
        self.raffle_address = raffle_address
        self.policy = policy

    def distribute(self, total_balance: int, owner: str, winner: str) -> Payout:
        """
        Pays the owner fee, then whatever the raffle still holds to the winner.

        The winner amount is read back from the ledger after the fee transfer,
        not derived from `total_balance`.
        """
        owner_fee, _ = split_pot(total_balance)

        if not self.ledger.send(self.raffle_address, owner, owner_fee):
            log.warning("Owner fee transfer to %s refused", owner)
            raise TransferFailed(owner, owner_fee)

        remaining = self.ledger.balance_of(self.raffle_address)
        if not self.ledger.send(self.raffle_address, winner, remaining):
            if self.policy is PayoutPolicy.ATOMIC:
                self.ledger.claw_back(owner, self.raffle_address, owner_fee)
                log.warning(
                    "Prize transfer to %s refused; owner fee %d returned to raffle",
                    winner,
                    owner_fee,
                )
            else:
                log.error(
                    "Prize transfer to %s refused; owner fee %d already paid to %s",
                    winner,
                    owner_fee,
                    owner,
                )
            raise TransferFailed(winner, remaining)

        log.info(
            "Paid owner fee %d to %s and prize %d to %s",
            owner_fee,
            owner,
            remaining,
            winner,
        )
        return Payout(owner, winner, owner_fee, remaining)
