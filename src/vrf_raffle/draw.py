from __future__ import annotations

import hashlib
from decimal import Decimal, InvalidOperation
from typing import List, Sequence, Tuple

from .project_constants import ETHER_DECIMALS, OWNER_FEE_PERCENT


def to_ether(wei: int) -> float:
    return round(wei / (10**ETHER_DECIMALS), 6)


def parse_ether(amount: str) -> int:
    try:
        wei = Decimal(amount) * (10**ETHER_DECIMALS)
    except InvalidOperation:
        raise ValueError(f"Not a valid ether amount: {amount}")
    if not wei.is_finite() or wei != wei.to_integral_value() or wei < 0:
        raise ValueError(f"Not a valid ether amount: {amount}")
    return int(wei)


def derive_random_words(seed: str, num_words: int) -> List[int]:
    """Deterministic 256-bit words: sha256(seed), sha256(seed:1), ..."""
    words: List[int] = []
    for i in range(num_words):
        material = seed if i == 0 else f"{seed}:{i}"
        words.append(int(hashlib.sha256(material.encode("utf-8")).hexdigest(), 16))
    return words


def pick_winner_index(random_words: Sequence[int], player_count: int) -> int:
    if not random_words:
        raise ValueError("At least one random word is required.")
    if player_count <= 0:
        raise ValueError("Cannot pick a winner without players.")
    return random_words[0] % player_count


def split_pot(total_balance: int) -> Tuple[int, int]:
    """Returns (owner_fee, winner_prize) for a pot, fee truncated."""
    owner_fee = total_balance * OWNER_FEE_PERCENT // 100
    return owner_fee, total_balance - owner_fee
