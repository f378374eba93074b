"""
Ledger boundary for contract skills.

Signing and view-call encoding are supplied by the caller through a
LedgerBackend; this module only adds transaction-result polling on top of
the node's HTTP API.
"""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Protocol, runtime_checkable

import httpx

from .logging import log_json

TX_POLL_INTERVAL_SECONDS = 1.0
TX_POLL_MAX_RETRIES = 10


@runtime_checkable
class LedgerBackend(Protocol):
    """Signing wallet plus contract call encoding for one identity."""

    address: str

    async def send_contract_call(
        self, rpc_url: str, contract_address: str, method: str, args: Dict[str, Any]
    ) -> str:
        """Broadcast a state-changing call and return its transaction id."""
        ...

    async def call_view(
        self, rpc_url: str, contract_address: str, method: str, args: Dict[str, Any]
    ) -> Any:
        ...


@dataclass
class LedgerClient:
    """Polls a node for transaction results until they are mined."""

    rpc_url: str
    timeout_seconds: float = 10.0
    poll_interval_seconds: float = TX_POLL_INTERVAL_SECONDS
    max_retries: int = TX_POLL_MAX_RETRIES
    transport: Optional[httpx.AsyncBaseTransport] = None

    async def get_tx_result(self, client: httpx.AsyncClient, transaction_id: str) -> Dict[str, Any]:
        resp = await client.get(
            f"{self.rpc_url.rstrip('/')}/api/blockChain/transactionResult",
            params={"transactionId": transaction_id},
        )
        resp.raise_for_status()
        body = resp.json()
        if not isinstance(body, dict):
            raise RuntimeError("Cannot get transaction result.")
        return body

    async def wait_for_transaction(self, transaction_id: str) -> Dict[str, Any]:
        async with httpx.AsyncClient(timeout=self.timeout_seconds, transport=self.transport) as client:
            for attempt in range(self.max_retries + 1):
                tx_result = await self.get_tx_result(client, transaction_id)
                status = str(tx_result.get("Status") or "").lower()
                # Nodes report NOTEXISTED until the transaction is indexed.
                if status in {"pending", "notexisted"}:
                    log_json(
                        logging.DEBUG,
                        "tx_pending",
                        transaction_id=transaction_id,
                        attempt=attempt,
                        status=status,
                    )
                    if attempt < self.max_retries:
                        await asyncio.sleep(self.poll_interval_seconds)
                    continue
                if status == "mined":
                    return tx_result
                raise RuntimeError(
                    f'Transaction failed with status "{tx_result.get("Status")}". '
                    f"TransactionId: {transaction_id}. Error: {json.dumps(tx_result.get('Error') or '')}"
                )
        raise RuntimeError(f"Transaction polling timeout. TransactionId: {transaction_id}")


__all__ = [
    "LedgerBackend",
    "LedgerClient",
    "TX_POLL_INTERVAL_SECONDS",
    "TX_POLL_MAX_RETRIES",
]
