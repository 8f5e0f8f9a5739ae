from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx

from .oracle import RandomnessConsumer, RandomnessCoordinator, RandomWordsRequest

log = logging.getLogger("rpc")


class RpcVrfCoordinator(RandomnessCoordinator):
    """
    Network-backed coordinator speaking JSON-RPC to a VRF gateway.

    Requests are issued with `vrf_requestRandomWords`; fulfillments are pulled
    with `poll`, which hands the words to the consumer exactly once.
    """

    def __init__(
        self,
        rpc_url: str,
        address: str,
        timeout_s: float = 60.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.rpc_url = rpc_url
        self.address = address
        self.client = httpx.Client(timeout=timeout_s, transport=transport)
        self._consumers: Dict[int, RandomnessConsumer] = {}
        self._next_rpc_id = 1

    def close(self) -> None:
        self.client.close()

    def _post(self, method: str, params: List[Any]) -> Dict[str, Any]:
        payload = {
            "jsonrpc": "2.0",
            "id": self._next_rpc_id,
            "method": method,
            "params": params,
        }
        self._next_rpc_id += 1
        resp = self.client.post(self.rpc_url, json=payload)
        resp.raise_for_status()
        data = resp.json()
        if "error" in data:
            raise RuntimeError(f"RPC error: {data['error']}")
        return data

    def request_random_words(
        self, request: RandomWordsRequest, consumer: RandomnessConsumer
    ) -> int:
        data = self._post(
            "vrf_requestRandomWords",
            [
                {
                    "coordinator": self.address,
                    "keyHash": request.key_hash,
                    "subId": str(request.subscription_id),
                    "requestConfirmations": request.request_confirmations,
                    "callbackGasLimit": request.callback_gas_limit,
                    "numWords": request.num_words,
                    "extraArgs": {"nativePayment": request.native_payment},
                }
            ],
        )
        request_id = _to_int(data.get("result"))
        self._consumers[request_id] = consumer
        log.info("Randomness request %d submitted", request_id)
        return request_id

    def get_request_status(self, request_id: int) -> Dict[str, Any]:
        """
        Returns {"fulfilled": bool, "randomWords": [int, ...]}.
        Words may come back as decimal ints or 0x-prefixed hex strings.
        """
        data = self._post("vrf_getRequestStatus", [str(request_id)])
        result = data.get("result")
        if not isinstance(result, dict):
            raise RuntimeError(f"Request {request_id}: no status returned.")
        words = [_to_int(w) for w in result.get("randomWords") or []]
        return {"fulfilled": bool(result.get("fulfilled")), "randomWords": words}

    def poll(self, request_id: int) -> bool:
        consumer = self._consumers.get(request_id)
        if consumer is None:
            raise RuntimeError(f"Request {request_id} was not issued by this client.")

        status = self.get_request_status(request_id)
        if not status["fulfilled"]:
            log.debug("Request %d still pending", request_id)
            return False
        if not status["randomWords"]:
            raise RuntimeError(f"Request {request_id}: fulfilled without words.")

        # Deliver once, even if the consumer rejects the callback.
        del self._consumers[request_id]
        consumer.raw_fulfill_random_words(
            self.address, request_id, status["randomWords"]
        )
        return True


def _to_int(value: Any) -> int:
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        return int(value, 16) if value.startswith("0x") else int(value)
    raise RuntimeError(f"Unexpected RPC value: {value!r}")
