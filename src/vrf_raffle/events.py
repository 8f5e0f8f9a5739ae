from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List

log = logging.getLogger("events")

RAFFLE_OPENED = "RaffleOpened"
RAFFLE_ENTERED = "RaffleEntered"
RAFFLE_WINNER_PICKED = "RaffleWinnerPicked"
REQUESTED_RAFFLE_WINNER = "RequestedRaffleWinner"


@dataclass(frozen=True)
class Event:
    name: str
    args: Dict[str, Any]


class EventLog:
    """Append-only record of lifecycle events, in emission order."""

    def __init__(self) -> None:
        self._events: List[Event] = []

    def emit(self, name: str, **args: Any) -> Event:
        event = Event(name, dict(args))
        self._events.append(event)
        log.info("%s %s", name, args)
        return event

    def checkpoint(self) -> int:
        return len(self._events)

    def rollback(self, checkpoint: int) -> None:
        # A rejected call leaves no events behind.
        dropped = self._events[checkpoint:]
        del self._events[checkpoint:]
        for event in dropped:
            log.debug("Dropped %s (call rolled back)", event.name)

    def named(self, name: str) -> List[Event]:
        return [e for e in self._events if e.name == name]

    def last(self) -> Event | None:
        return self._events[-1] if self._events else None

    def __iter__(self) -> Iterator[Event]:
        return iter(list(self._events))

    def __len__(self) -> int:
        return len(self._events)
