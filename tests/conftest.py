import pytest

from vrf_raffle.events import EventLog
from vrf_raffle.ledger import Ledger
from vrf_raffle.oracle import MockVrfCoordinator
from vrf_raffle.project_constants import ONE_ETHER
from vrf_raffle.raffle import Raffle

OWNER = "0xA000000000000000000000000000000000000001"
ALICE = "0xB000000000000000000000000000000000000002"
BOB = "0xC000000000000000000000000000000000000003"
CAROL = "0xD000000000000000000000000000000000000004"
STRANGER = "0xE000000000000000000000000000000000000005"


@pytest.fixture
def ledger():
    ledger = Ledger()
    for address in (ALICE, BOB, CAROL, STRANGER):
        ledger.fund(address, 100 * ONE_ETHER)
    return ledger


@pytest.fixture
def coordinator():
    return MockVrfCoordinator(seed="tests")


@pytest.fixture
def event_log():
    return EventLog()


@pytest.fixture
def raffle(coordinator, ledger, event_log):
    return Raffle(coordinator, ledger=ledger, event_log=event_log)


@pytest.fixture
def open_raffle(raffle):
    raffle.open_raffle(OWNER, ONE_ETHER)
    return raffle
