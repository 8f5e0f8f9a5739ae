from __future__ import annotations

import os
from dataclasses import dataclass
from dotenv import load_dotenv

from .project_constants import (
    DEFAULT_CALLBACK_GAS_LIMIT,
    DEFAULT_KEY_HASH,
    DEFAULT_SUBSCRIPTION_ID,
    MOCK_COORDINATOR_ADDRESS,
)


@dataclass(frozen=True)
class Settings:
    rpc_url: str | None
    coordinator: str
    key_hash: str
    subscription_id: int
    callback_gas_limit: int

    @staticmethod
    def from_env(rpc_url_override: str | None = None) -> "Settings":
        load_dotenv()

        # If user provides --rpc-url, trust it.
        rpc_url = rpc_url_override or os.getenv("VRF_RPC_URL", "").strip() or None

        return Settings(
            rpc_url=rpc_url,
            coordinator=os.getenv("VRF_COORDINATOR", "").strip()
            or MOCK_COORDINATOR_ADDRESS,
            key_hash=os.getenv("VRF_KEY_HASH", "").strip() or DEFAULT_KEY_HASH,
            subscription_id=int(
                os.getenv("VRF_SUBSCRIPTION_ID", "").strip() or DEFAULT_SUBSCRIPTION_ID
            ),
            callback_gas_limit=int(
                os.getenv("VRF_CALLBACK_GAS_LIMIT", "").strip()
                or DEFAULT_CALLBACK_GAS_LIMIT
            ),
        )

    def require_rpc_url(self) -> str:
        if not self.rpc_url:
            raise RuntimeError(
                "Missing VRF_RPC_URL. Put it in .env, export it or pass --rpc-url."
            )
        return self.rpc_url
