from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, List, Protocol, Sequence

from .draw import derive_random_words
from .errors import InvalidRequest
from .project_constants import MOCK_COORDINATOR_ADDRESS

log = logging.getLogger("oracle")


class RandomnessConsumer(Protocol):
    def raw_fulfill_random_words(
        self, sender: str, request_id: int, random_words: Sequence[int]
    ) -> None: ...


@dataclass(frozen=True)
class RandomWordsRequest:
    key_hash: str
    subscription_id: int
    request_confirmations: int
    callback_gas_limit: int
    num_words: int
    native_payment: bool


class RandomnessCoordinator(ABC):
    """
    Fire-and-forget randomness source.

    `request_random_words` returns a request id immediately; the words arrive
    later through exactly one `consumer.raw_fulfill_random_words` call made with
    `self.address` as sender.
    """

    address: str

    @abstractmethod
    def request_random_words(
        self, request: RandomWordsRequest, consumer: RandomnessConsumer
    ) -> int: ...


class MockVrfCoordinator(RandomnessCoordinator):
    """Synchronous test double: nothing is delivered until a test asks for it."""

    def __init__(
        self, address: str = MOCK_COORDINATOR_ADDRESS, seed: str = "vrf-raffle"
    ) -> None:
        self.address = address
        self.seed = seed
        self._next_id = 1
        self._pending: Dict[int, tuple[RandomWordsRequest, RandomnessConsumer]] = {}
        self.last_request_id: int | None = None
        self.requests: List[RandomWordsRequest] = []

    def request_random_words(
        self, request: RandomWordsRequest, consumer: RandomnessConsumer
    ) -> int:
        if request.num_words < 1:
            raise ValueError("num_words must be at least 1")
        request_id = self._next_id
        self._next_id += 1
        self._pending[request_id] = (request, consumer)
        self.requests.append(request)
        self.last_request_id = request_id
        log.debug("Accepted randomness request %d", request_id)
        return request_id

    @property
    def pending(self) -> List[int]:
        return sorted(self._pending)

    def fulfill_random_words(
        self, request_id: int, random_words: Sequence[int] | None = None
    ) -> List[int]:
        if request_id not in self._pending:
            raise InvalidRequest(request_id)
        request, consumer = self._pending[request_id]

        if random_words is None:
            words = derive_random_words(f"{self.seed}:{request_id}", request.num_words)
        else:
            words = [int(w) for w in random_words]
            if not words:
                raise ValueError("random_words must not be empty")
        del self._pending[request_id]

        log.debug("Fulfilling request %d with %d word(s)", request_id, len(words))
        consumer.raw_fulfill_random_words(self.address, request_id, words)
        return words

    def fulfill_pending(self) -> int:
        count = 0
        for request_id in self.pending:
            self.fulfill_random_words(request_id)
            count += 1
        return count
