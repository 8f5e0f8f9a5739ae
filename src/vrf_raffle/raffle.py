from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field, replace
from enum import IntEnum
from typing import List, Optional, Sequence, Tuple

from . import events
from .draw import pick_winner_index
from .errors import (
    AlreadyInSession,
    InsufficientFee,
    NotOpen,
    NotOwner,
    OnlyCoordinatorCanFulfill,
    OwnerCannotEnter,
    UnknownRequest,
)
from .events import EventLog
from .ledger import Ledger
from .oracle import RandomnessCoordinator, RandomWordsRequest
from .payout import Payout, PayoutEngine, PayoutPolicy
from .project_constants import (
    DEFAULT_CALLBACK_GAS_LIMIT,
    DEFAULT_KEY_HASH,
    DEFAULT_SUBSCRIPTION_ID,
    NATIVE_PAYMENT,
    NUM_WORDS,
    RAFFLE_ADDRESS,
    REQUEST_CONFIRMATIONS,
)

log = logging.getLogger("raffle")


class RaffleState(IntEnum):
    CLOSED = 0
    OPEN = 1


@dataclass
class RaffleStorage:
    owner: Optional[str] = None
    previous_owner: Optional[str] = None
    entrance_fee: int = 0
    state: RaffleState = RaffleState.CLOSED
    players: List[str] = field(default_factory=list)
    # Attached value per entry, parallel to `players`
    payments: List[int] = field(default_factory=list)
    previous_session_players: List[str] = field(default_factory=list)
    recent_winner: Optional[str] = None
    pending_request_id: Optional[int] = None

    def copy(self) -> "RaffleStorage":
        return replace(
            self,
            players=list(self.players),
            payments=list(self.payments),
            previous_session_players=list(self.previous_session_players),
        )


@dataclass(frozen=True)
class SessionRecord:
    """Everything needed to re-derive a finished session's outcome."""

    request_id: int
    random_word: int
    owner: str
    entrance_fee: int
    players: Tuple[str, ...]
    payments: Tuple[int, ...]
    winner_index: int
    winner: str
    total_pot: int
    owner_fee: int
    winner_prize: int


class Raffle:
    """
    Single-session raffle settled through a randomness coordinator.

    Every public method takes the calling address as `sender`. Calls are
    serialized per instance; a rejected call leaves storage, ledger and event
    log as they were.
    """

    def __init__(
        self,
        coordinator: RandomnessCoordinator,
        ledger: Ledger | None = None,
        event_log: EventLog | None = None,
        address: str = RAFFLE_ADDRESS,
        key_hash: str = DEFAULT_KEY_HASH,
        subscription_id: int = DEFAULT_SUBSCRIPTION_ID,
        callback_gas_limit: int = DEFAULT_CALLBACK_GAS_LIMIT,
        payout_policy: PayoutPolicy = PayoutPolicy.ATOMIC,
    ) -> None:
        self.coordinator = coordinator
        self.ledger = ledger if ledger is not None else Ledger()
        self.events = event_log if event_log is not None else EventLog()
        self.address = address
        self.key_hash = key_hash
        self.subscription_id = subscription_id
        self.callback_gas_limit = callback_gas_limit
        self.payout_engine = PayoutEngine(self.ledger, address, payout_policy)

        self._storage = RaffleStorage()
        self._previous_session: Optional[SessionRecord] = None
        self._lock = threading.RLock()

    # ---- lifecycle -------------------------------------------------------

    def open_raffle(self, sender: str, fee: int) -> None:
        with self._lock:
            s = self._storage
            if s.owner is not None:
                raise AlreadyInSession(s.owner)
            if fee < 0:
                raise ValueError("Entrance fee cannot be negative.")

            s.owner = sender
            s.state = RaffleState.OPEN
            s.entrance_fee = fee
            self.events.emit(events.RAFFLE_OPENED, owner=sender, fee=fee)

    def enter_raffle(self, sender: str, value: int) -> None:
        with self._lock:
            s = self._storage
            if sender == s.owner:
                raise OwnerCannotEnter(sender)
            if s.state != RaffleState.OPEN:
                raise NotOpen()
            if value < s.entrance_fee:
                raise InsufficientFee(s.entrance_fee, value)

            # Overpayment stays in the pot.
            self.ledger.debit_into(sender, self.address, value)
            s.players.append(sender)
            s.payments.append(value)
            self.events.emit(events.RAFFLE_ENTERED, player=sender)

    def end_raffle(self, sender: str) -> Optional[int]:
        with self._lock:
            s = self._storage
            if sender != s.owner:
                raise NotOwner(sender)

            if not s.players:
                s.state = RaffleState.CLOSED
                log.info("Raffle by %s ended without players", s.owner)
                s.owner = None
                s.entrance_fee = 0
                return None

            request = RandomWordsRequest(
                key_hash=self.key_hash,
                subscription_id=self.subscription_id,
                request_confirmations=REQUEST_CONFIRMATIONS,
                callback_gas_limit=self.callback_gas_limit,
                num_words=NUM_WORDS,
                native_payment=NATIVE_PAYMENT,
            )
            request_id = self.coordinator.request_random_words(request, self)
            s.state = RaffleState.CLOSED
            s.pending_request_id = request_id
            self.events.emit(events.REQUESTED_RAFFLE_WINNER, request_id=request_id)
            return request_id

    def raw_fulfill_random_words(
        self, sender: str, request_id: int, random_words: Sequence[int]
    ) -> None:
        if sender != self.coordinator.address:
            raise OnlyCoordinatorCanFulfill(sender, self.coordinator.address)
        self._fulfill_random_words(request_id, random_words)

    def _fulfill_random_words(self, request_id: int, random_words: Sequence[int]) -> None:
        with self._lock:
            s = self._storage
            if s.pending_request_id is None or request_id != s.pending_request_id:
                raise UnknownRequest(request_id, s.pending_request_id)

            saved = s.copy()
            checkpoint = self.events.checkpoint()
            try:
                self._select_winner_and_pay(request_id, random_words)
            except Exception:
                self._storage = saved
                self.events.rollback(checkpoint)
                raise

    def _select_winner_and_pay(self, request_id: int, random_words: Sequence[int]) -> None:
        s = self._storage
        winner_index = pick_winner_index(random_words, len(s.players))
        winner = s.players[winner_index]

        s.recent_winner = winner
        s.previous_session_players = list(s.players)
        payments = tuple(s.payments)
        s.players = []
        s.payments = []
        self.events.emit(events.RAFFLE_WINNER_PICKED, winner=winner)

        total_pot = self.ledger.balance_of(self.address)
        payout: Payout = self.payout_engine.distribute(total_pot, s.owner, winner)

        self._previous_session = SessionRecord(
            request_id=request_id,
            random_word=int(random_words[0]),
            owner=s.owner,
            entrance_fee=s.entrance_fee,
            players=tuple(s.previous_session_players),
            payments=payments,
            winner_index=winner_index,
            winner=winner,
            total_pot=total_pot,
            owner_fee=payout.owner_fee,
            winner_prize=payout.winner_prize,
        )
        s.previous_owner = s.owner
        s.owner = None
        s.entrance_fee = 0
        s.pending_request_id = None
        log.info("Session settled: winner %s (index %d)", winner, winner_index)

    # ---- views -----------------------------------------------------------

    def get_raffle_owner(self) -> Optional[str]:
        return self._storage.owner

    def get_raffle_previous_owner(self) -> Optional[str]:
        return self._storage.previous_owner

    def get_entrance_fee(self) -> int:
        return self._storage.entrance_fee

    def get_raffle_state(self) -> RaffleState:
        return self._storage.state

    def get_player(self, index: int) -> str:
        return _at(self._storage.players, index)

    def get_player_from_previous_session(self, index: int) -> str:
        return _at(self._storage.previous_session_players, index)

    def get_players_count(self) -> int:
        return len(self._storage.players)

    def get_recent_winner(self) -> Optional[str]:
        return self._storage.recent_winner

    def get_pending_request_id(self) -> Optional[int]:
        return self._storage.pending_request_id

    def get_balance(self) -> int:
        return self.ledger.balance_of(self.address)

    def get_previous_session(self) -> Optional[SessionRecord]:
        return self._previous_session


def _at(items: List[str], index: int) -> str:
    # No negative indexing.
    if index < 0 or index >= len(items):
        raise IndexError(f"Index {index} out of range (size {len(items)})")
    return items[index]
