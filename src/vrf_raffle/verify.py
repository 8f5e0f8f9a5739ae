from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any, Dict

from .draw import pick_winner_index, split_pot
from .project_constants import OWNER_FEE_PERCENT
from .raffle import Raffle


def build_audit(raffle: Raffle) -> Dict[str, Any]:
    session = raffle.get_previous_session()
    if session is None:
        raise RuntimeError("No settled session to audit.")

    return {
        "metadata": {
            "tool": "vrf-raffle",
            "version": "1.0.0",
            "generated_at_utc": datetime.now(timezone.utc).isoformat(),
            "raffle_address": raffle.address,
            "coordinator": raffle.coordinator.address,
            "request_id": session.request_id,
            # 256-bit; store as string for safety
            "random_word": str(session.random_word),
            "owner": session.owner,
            "entrance_fee": str(session.entrance_fee),
            "owner_fee_percent": OWNER_FEE_PERCENT,
            "total_pot": str(session.total_pot),
            "owner_fee": str(session.owner_fee),
            "winner_index": session.winner_index,
        },
        "winner": {
            "address": session.winner,
            "prize": str(session.winner_prize),
        },
        # Entry order decides the winner; keep it as is.
        "all_entrants": [
            {"address": address, "paid": str(paid)}
            for address, paid in zip(session.players, session.payments)
        ],
    }


def verify_audit(audit_path: str) -> Dict[str, Any]:
    try:
        with open(audit_path, "r", encoding="utf-8") as f:
            audit = json.load(f)
        return _verify(audit)
    except (KeyError, TypeError, ValueError) as e:
        raise RuntimeError(f"Malformed audit: {e!r}")


def _verify(audit: Dict[str, Any]) -> Dict[str, Any]:
    meta = audit["metadata"]
    entries = audit["all_entrants"]
    if not entries:
        raise RuntimeError("Audit lists no entrants.")

    # Recreate the pot from the stored entries (deterministic)
    entrants = [e["address"] for e in entries]
    total_pot = int(meta["total_pot"])
    total2 = sum(int(e["paid"]) for e in entries)
    if total2 != total_pot:
        raise RuntimeError(
            f"Total pot mismatch: audit={total_pot} recomputed={total2}"
        )

    if int(meta.get("owner_fee_percent", OWNER_FEE_PERCENT)) != OWNER_FEE_PERCENT:
        raise RuntimeError(
            f"Fee percent mismatch: audit={meta['owner_fee_percent']} rules={OWNER_FEE_PERCENT}"
        )

    random_word = int(meta["random_word"])
    index = pick_winner_index([random_word], len(entrants))
    if index != int(meta["winner_index"]):
        raise RuntimeError(
            f"Winner index mismatch: audit={meta['winner_index']} recomputed={index}"
        )

    winner_expected = audit["winner"]["address"]
    if entrants[index] != winner_expected:
        raise RuntimeError(
            f"Winner mismatch: audit={winner_expected} recomputed={entrants[index]}"
        )

    owner_fee, prize = split_pot(total_pot)
    if owner_fee != int(meta["owner_fee"]):
        raise RuntimeError(
            f"Owner fee mismatch: audit={meta['owner_fee']} recomputed={owner_fee}"
        )
    if prize != int(audit["winner"]["prize"]):
        raise RuntimeError(
            f"Prize mismatch: audit={audit['winner']['prize']} recomputed={prize}"
        )

    return {
        "ok": True,
        "winner": entrants[index],
        "winner_index": index,
        "entrants": len(entrants),
        "owner_fee": owner_fee,
        "winner_prize": prize,
    }
