"""Web3-backed payload submitter for authorized transactions.

Dependencies: approval.types
Wired in: approval/submission.py → SubmissionGate (as a PayloadSubmitter)
"""

from __future__ import annotations

import logging
import os
from typing import Any

from web3 import Web3
from web3.exceptions import Web3Exception

from quorumgate.approval.types import ConfigError, TransportError

_log = logging.getLogger(__name__)

_DEFAULT_RPC_URL = "http://127.0.0.1:8545"
_DEFAULT_GAS = 2_000_000
_DEFAULT_GAS_PRICE_GWEI = 10
_DEFAULT_RECEIPT_TIMEOUT_SECONDS = 120


class Web3PayloadSubmitter:
    """Sign and send a legacy transaction from a single sender account."""

    def __init__(
        self,
        w3: Web3,
        *,
        private_key: str,
        sender: str | None = None,
        gas: int = _DEFAULT_GAS,
        gas_price_gwei: int = _DEFAULT_GAS_PRICE_GWEI,
        chain_id: int | None = None,
        wait_for_receipt: bool = False,
        receipt_timeout_seconds: int = _DEFAULT_RECEIPT_TIMEOUT_SECONDS,
    ) -> None:
        self._w3 = w3
        self._private_key = private_key
        address = sender or w3.eth.account.from_key(private_key).address
        self._sender = Web3.to_checksum_address(address)
        self._gas = gas
        self._gas_price_gwei = gas_price_gwei
        self._chain_id = chain_id
        self._wait_for_receipt = wait_for_receipt
        self._receipt_timeout_seconds = receipt_timeout_seconds

    @classmethod
    def from_env(cls) -> Web3PayloadSubmitter:
        private_key = os.getenv("ETH_PRIVATE_KEY")
        if not private_key:
            raise ConfigError("invalid_config", "ETH_PRIVATE_KEY must be set to submit payloads.")
        w3 = Web3(Web3.HTTPProvider(os.getenv("RPC_URL", _DEFAULT_RPC_URL)))
        chain_id_raw = os.getenv("CHAIN_ID")
        return cls(
            w3,
            private_key=private_key,
            sender=os.getenv("ETH_SENDER") or None,
            gas=_read_positive_int("TX_GAS", _DEFAULT_GAS),
            gas_price_gwei=_read_positive_int("TX_GAS_PRICE_GWEI", _DEFAULT_GAS_PRICE_GWEI),
            chain_id=_read_positive_int("CHAIN_ID", 1) if chain_id_raw else None,
            wait_for_receipt=os.getenv("TX_WAIT_FOR_RECEIPT", "false").lower()
            in ("1", "true", "yes"),
        )

    @property
    def sender(self) -> str:
        return self._sender

    def build_transaction(self, destination: str, value: int, data: bytes) -> dict[str, Any]:
        tx: dict[str, Any] = {
            "to": Web3.to_checksum_address(destination),
            "value": value,
            "data": Web3.to_hex(data),
            "nonce": self._w3.eth.get_transaction_count(self._sender),
            "gas": self._gas,
            "gasPrice": self._w3.to_wei(self._gas_price_gwei, "gwei"),
        }
        if self._chain_id is not None:
            tx["chainId"] = self._chain_id
        return tx

    def submit_payload(self, destination: str, value: int, data: bytes) -> str:
        try:
            tx = self.build_transaction(destination, value, data)
            signed = self._w3.eth.account.sign_transaction(tx, private_key=self._private_key)
            tx_hash = self._w3.eth.send_raw_transaction(signed.raw_transaction)
            receipt = (
                self._w3.eth.wait_for_transaction_receipt(
                    tx_hash, timeout=self._receipt_timeout_seconds
                )
                if self._wait_for_receipt
                else None
            )
        except (Web3Exception, OSError, ValueError) as exc:
            raise TransportError(f"Transaction submission failed: {exc}") from exc
        tx_id = Web3.to_hex(tx_hash)
        if receipt is not None and receipt["status"] != 1:
            raise TransportError(f"Transaction {tx_id} reverted.")
        _log.info("Submitted transaction %s from %s", tx_id, self._sender)
        return tx_id


def _read_positive_int(name: str, default: int) -> int:
    raw = os.getenv(name, str(default))
    try:
        value = int(raw)
    except ValueError as exc:
        raise ConfigError("invalid_config", f"{name} must be an integer.") from exc
    if value <= 0:
        raise ConfigError("invalid_config", f"{name} must be > 0.")
    return value
