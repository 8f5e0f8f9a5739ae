import pytest

from conftest import ALICE, BOB, OWNER
from vrf_raffle import events
from vrf_raffle.draw import split_pot
from vrf_raffle.errors import TransferFailed
from vrf_raffle.ledger import Ledger
from vrf_raffle.oracle import MockVrfCoordinator
from vrf_raffle.payout import PayoutEngine, PayoutPolicy
from vrf_raffle.project_constants import ONE_ETHER, RAFFLE_ADDRESS
from vrf_raffle.raffle import Raffle, RaffleState


@pytest.fixture
def pot():
    ledger = Ledger()
    ledger.fund(RAFFLE_ADDRESS, 1_000_001)
    return ledger


def test_split_pot_truncates_fee():
    assert split_pot(1_000_001) == (100_000, 900_001)
    assert split_pot(9) == (0, 9)
    assert split_pot(0) == (0, 0)


def test_distribute_pays_fee_then_remaining_balance(pot):
    engine = PayoutEngine(pot, RAFFLE_ADDRESS)
    payout = engine.distribute(1_000_001, OWNER, ALICE)

    assert payout.owner_fee == 100_000
    assert payout.winner_prize == 900_001
    assert pot.balance_of(OWNER) == 100_000
    assert pot.balance_of(ALICE) == 900_001
    assert pot.balance_of(RAFFLE_ADDRESS) == 0


def test_winner_gets_whole_remaining_balance(pot):
    # Fee is computed from the passed total, prize from what is actually left.
    engine = PayoutEngine(pot, RAFFLE_ADDRESS)
    payout = engine.distribute(1_000, OWNER, ALICE)

    assert payout.owner_fee == 100
    assert payout.winner_prize == 1_000_001 - 100


def test_refused_owner_fee_moves_nothing(pot):
    pot.reject(OWNER)
    engine = PayoutEngine(pot, RAFFLE_ADDRESS)

    with pytest.raises(TransferFailed) as exc:
        engine.distribute(1_000_001, OWNER, ALICE)

    assert exc.value.recipient == OWNER
    assert exc.value.amount == 100_000
    assert pot.balance_of(RAFFLE_ADDRESS) == 1_000_001


def test_refused_prize_is_atomic_by_default(pot):
    pot.reject(ALICE)
    engine = PayoutEngine(pot, RAFFLE_ADDRESS)

    with pytest.raises(TransferFailed) as exc:
        engine.distribute(1_000_001, OWNER, ALICE)

    assert exc.value.recipient == ALICE
    assert exc.value.amount == 900_001
    assert pot.balance_of(OWNER) == 0
    assert pot.balance_of(RAFFLE_ADDRESS) == 1_000_001


def test_refused_prize_under_partial_commit_keeps_owner_fee(pot):
    pot.reject(ALICE)
    engine = PayoutEngine(pot, RAFFLE_ADDRESS, PayoutPolicy.PARTIAL_COMMIT)

    with pytest.raises(TransferFailed):
        engine.distribute(1_000_001, OWNER, ALICE)

    assert pot.balance_of(OWNER) == 100_000
    assert pot.balance_of(RAFFLE_ADDRESS) == 900_001


def _pending_raffle(policy):
    ledger = Ledger()
    ledger.fund(ALICE, 10 * ONE_ETHER)
    ledger.fund(BOB, 10 * ONE_ETHER)
    coordinator = MockVrfCoordinator()
    raffle = Raffle(coordinator, ledger=ledger, payout_policy=policy)
    raffle.open_raffle(OWNER, ONE_ETHER)
    raffle.enter_raffle(ALICE, ONE_ETHER)
    raffle.enter_raffle(BOB, ONE_ETHER)
    request_id = raffle.end_raffle(OWNER)
    return raffle, coordinator, ledger, request_id


@pytest.mark.parametrize("policy", list(PayoutPolicy))
def test_failed_fulfill_rolls_back_raffle_state(policy):
    raffle, coordinator, ledger, request_id = _pending_raffle(policy)
    ledger.reject(OWNER)
    events_before = len(raffle.events)

    with pytest.raises(TransferFailed):
        coordinator.fulfill_random_words(request_id, [0])

    assert raffle.get_players_count() == 2
    assert raffle.get_recent_winner() is None
    assert raffle.get_raffle_owner() == OWNER
    assert raffle.get_entrance_fee() == ONE_ETHER
    assert raffle.get_pending_request_id() == request_id
    assert raffle.get_raffle_state() == RaffleState.CLOSED
    assert raffle.get_previous_session() is None
    assert raffle.get_balance() == 2 * ONE_ETHER
    assert len(raffle.events) == events_before
    assert raffle.events.named(events.RAFFLE_WINNER_PICKED) == []


def test_refused_prize_in_atomic_raffle_restores_everything():
    raffle, coordinator, ledger, request_id = _pending_raffle(PayoutPolicy.ATOMIC)
    ledger.reject(ALICE)

    with pytest.raises(TransferFailed):
        coordinator.fulfill_random_words(request_id, [0])

    assert ledger.balance_of(OWNER) == 0
    assert raffle.get_balance() == 2 * ONE_ETHER
    assert raffle.get_players_count() == 2


def test_refused_prize_in_partial_commit_raffle_leaves_fee_paid():
    raffle, coordinator, ledger, request_id = _pending_raffle(
        PayoutPolicy.PARTIAL_COMMIT
    )
    ledger.reject(ALICE)

    with pytest.raises(TransferFailed):
        coordinator.fulfill_random_words(request_id, [0])

    assert ledger.balance_of(OWNER) == 2 * ONE_ETHER // 10
    assert raffle.get_balance() == 2 * ONE_ETHER - 2 * ONE_ETHER // 10
    assert raffle.get_players_count() == 2
    assert raffle.get_raffle_owner() == OWNER
