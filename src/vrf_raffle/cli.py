from __future__ import annotations

import argparse
import json
import logging
from typing import List, Tuple

from .config import Settings
from .draw import parse_ether, to_ether
from .errors import TransferFailed
from .ledger import Ledger
from .oracle import MockVrfCoordinator
from .payout import PayoutPolicy
from .raffle import Raffle
from .rpc import RpcVrfCoordinator
from .verify import build_audit, verify_audit


def setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")


def parse_entry(raw: str) -> Tuple[str, int]:
    address, sep, amount = raw.rpartition(":")
    if not sep or not address:
        raise argparse.ArgumentTypeError(f"Expected ADDRESS:ETHER, got {raw!r}")
    try:
        return address, parse_ether(amount)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e))


def cmd_simulate(args: argparse.Namespace) -> int:
    settings = Settings.from_env(rpc_url_override=args.rpc_url)
    log = logging.getLogger("simulate")

    entries: List[Tuple[str, int]] = args.entry or []
    fee = parse_ether(args.fee)

    ledger = Ledger()
    for address, amount in entries:
        ledger.fund(address, amount)
    for address in args.reject or []:
        ledger.reject(address)

    coordinator = MockVrfCoordinator(address=settings.coordinator, seed=args.seed)
    raffle = Raffle(
        coordinator,
        ledger=ledger,
        key_hash=settings.key_hash,
        subscription_id=settings.subscription_id,
        callback_gas_limit=settings.callback_gas_limit,
        payout_policy=PayoutPolicy(args.policy),
    )

    raffle.open_raffle(args.owner, fee)
    for address, amount in entries:
        raffle.enter_raffle(address, amount)

    request_id = raffle.end_raffle(args.owner)
    if request_id is None:
        print("Raffle ended with no entrants; nothing to draw.")
        return 0

    log.info("Pot before draw   : %s ETH", to_ether(raffle.get_balance()))
    try:
        words = coordinator.fulfill_random_words(request_id)
    except TransferFailed as e:
        raise SystemExit(f"❌ PAYOUT FAILED: {e}")
    session = raffle.get_previous_session()

    audit = build_audit(raffle)
    with open(args.out, "w", encoding="utf-8") as f:
        json.dump(audit, f, indent=2)

    print("========================================")
    print("🎟  VRF RAFFLE SESSION")
    print("========================================")
    print(f"Owner         : {session.owner}")
    print(f"Entrance fee  : {to_ether(session.entrance_fee)} ETH")
    print(f"Entrants      : {len(session.players)}")
    print(f"Request id    : {request_id}")
    print(f"Random word   : {words[0]}")
    print("----------------------------------------")
    print("🏆 WINNER")
    print(f"Address       : {session.winner}")
    print(f"Prize         : {to_ether(session.winner_prize)} ETH")
    print(f"Owner fee     : {to_ether(session.owner_fee)} ETH")
    print("----------------------------------------")
    print(f"🧾 Wrote audit: {args.out}")
    return 0


def cmd_verify(args: argparse.Namespace) -> int:
    try:
        result = verify_audit(args.audit)
    except RuntimeError as e:
        raise SystemExit(f"❌ AUDIT FAILED: {e}")
    print("✅ AUDIT VERIFIED")
    print(f"Winner        : {result['winner']}")
    print(f"Winner index  : {result['winner_index']} of {result['entrants']}")
    print(f"Prize         : {to_ether(result['winner_prize'])} ETH")
    print(f"Owner fee     : {to_ether(result['owner_fee'])} ETH")
    return 0


def cmd_status(args: argparse.Namespace) -> int:
    settings = Settings.from_env(rpc_url_override=args.rpc_url)
    coordinator = RpcVrfCoordinator(
        settings.require_rpc_url(), settings.coordinator, timeout_s=args.timeout
    )
    try:
        status = coordinator.get_request_status(args.request_id)
    finally:
        coordinator.close()

    print(f"Request       : {args.request_id}")
    print(f"Fulfilled     : {status['fulfilled']}")
    for i, word in enumerate(status["randomWords"]):
        print(f"Word[{i}]       : {word}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="vrf-raffle",
        description="Simulate and audit a VRF-settled raffle.",
    )
    p.add_argument("--verbose", action="store_true", help="Enable debug logging.")
    p.add_argument("--rpc-url", default=None, help="Override VRF RPC URL (else use env).")
    p.add_argument("--timeout", type=float, default=60.0, help="RPC timeout seconds.")

    sub = p.add_subparsers(dest="cmd", required=True)

    s = sub.add_parser(
        "simulate", help="Run one session against the mock coordinator."
    )
    s.add_argument("--owner", required=True, help="Address opening the raffle.")
    s.add_argument("--fee", default="0", help="Entrance fee in ETH.")
    s.add_argument(
        "--entry",
        action="append",
        type=parse_entry,
        help="ADDRESS:ETHER payment; repeat per entry, in order.",
    )
    s.add_argument("--seed", default="vrf-raffle", help="Mock randomness seed.")
    s.add_argument(
        "--policy",
        choices=[policy.value for policy in PayoutPolicy],
        default=PayoutPolicy.ATOMIC.value,
        help="What a refused prize transfer does to the owner fee.",
    )
    s.add_argument(
        "--reject",
        action="append",
        help="Address that refuses incoming transfers (repeatable).",
    )
    s.add_argument("--out", default="audit.json", help="Audit output JSON path.")
    s.set_defaults(func=cmd_simulate)

    v = sub.add_parser("verify", help="Verify an existing audit.json.")
    v.add_argument("--audit", required=True, help="Path to audit.json.")
    v.set_defaults(func=cmd_verify)

    st = sub.add_parser("status", help="Poll a request on the VRF gateway.")
    st.add_argument("--request-id", required=True, type=int)
    st.set_defaults(func=cmd_status)

    return p


def main() -> None:
    parser = build_parser()
    args = parser.parse_args()
    setup_logging(args.verbose)
    raise SystemExit(args.func(args))
