"""
Transaction signing and submission.

The executor talks to a Signer: anything that has an address, can submit a
transaction request, and can wait for its receipt. LocalAccountSigner is the
private-key implementation backed by eth_account and AsyncWeb3.
"""

import logging
from typing import Optional, Protocol, runtime_checkable

from eth_account import Account
from eth_account.signers.local import LocalAccount
from hexbytes import HexBytes
from web3.exceptions import TimeExhausted

from ..context import ChainContext
from ..core.errors import (
    DeadlineExceeded,
    ErrorClassifier,
    NetworkError,
    SignerError,
    SwapEngineError,
)
from ..core.types import TransactionOutcome, TransactionRequest


@runtime_checkable
class Signer(Protocol):
    """Account provider used by the swap executor."""

    @property
    def address(self) -> Optional[str]:
        """Connected account address, or None when no account is connected."""
        ...

    async def send_transaction(self, request: TransactionRequest) -> HexBytes:
        """Sign and submit, returning the transaction hash."""
        ...

    async def wait_for_receipt(
        self, tx_hash: HexBytes, timeout: float, step: Optional[str] = None
    ) -> TransactionOutcome:
        """Wait until the transaction is mined, raising DeadlineExceeded after `timeout` seconds."""
        ...


class LocalAccountSigner:
    """
    Signs locally with a private key and submits through the chain context.

    Nonce, chain ID, gas limit and EIP-1559 fees are filled in from the node
    for every transaction.
    """

    # Gas estimate headroom, as a ratio
    GAS_MULTIPLIER_NUMERATOR = 12
    GAS_MULTIPLIER_DENOMINATOR = 10

    def __init__(
        self,
        context: ChainContext,
        private_key: str,
        poll_interval: float = 1.0,
    ):
        self.context = context
        self.poll_interval = poll_interval
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")
        self.error_handler = ErrorClassifier(self.logger)
        try:
            self._account: LocalAccount = Account.from_key(private_key)
        except Exception:
            # Never echo the key
            raise SignerError("Invalid private key", step="connect") from None

    @property
    def address(self) -> Optional[str]:
        return self._account.address

    async def _fill_fees(self, tx: dict) -> None:
        w3 = self.context.w3
        block = await w3.eth.get_block("latest")
        base_fee = block.get("baseFeePerGas")
        if base_fee is None:
            tx["gasPrice"] = await w3.eth.gas_price
            return
        priority_fee = await w3.eth.max_priority_fee
        tx["maxPriorityFeePerGas"] = priority_fee
        tx["maxFeePerGas"] = base_fee * 2 + priority_fee

    async def _build(self, request: TransactionRequest) -> dict:
        w3 = self.context.w3
        tx = request.to_dict()
        tx["from"] = self.address
        tx["chainId"] = self.context.chain_id
        tx["nonce"] = await w3.eth.get_transaction_count(self.address, "pending")
        await self._fill_fees(tx)
        if "gas" not in tx:
            estimate = await w3.eth.estimate_gas(tx)
            tx["gas"] = estimate * self.GAS_MULTIPLIER_NUMERATOR // self.GAS_MULTIPLIER_DENOMINATOR
        return tx

    async def send_transaction(self, request: TransactionRequest) -> HexBytes:
        """
        Build, sign and submit a transaction.

        Args:
            request: Unsigned transaction

        Returns:
            Transaction hash

        Raises:
            TransactionReverted: If gas estimation shows the call would revert
            SignerError: If signing fails
            NetworkError: If the node rejects or cannot receive the transaction
        """
        step = request.step or "transaction"
        try:
            tx = await self._build(request)
        except SwapEngineError:
            raise
        except Exception as e:
            error = self.error_handler.to_submission_error(e, step)
            self.error_handler.log_error(e, {"step": step, "to": request.to})
            raise error from e

        try:
            signed = self._account.sign_transaction(tx)
        except Exception as e:
            raise SignerError(f"Failed to sign {step} transaction: {e}", step=step, cause=e) from e

        try:
            tx_hash = await self.context.w3.eth.send_raw_transaction(signed.raw_transaction)
        except Exception as e:
            error = self.error_handler.to_submission_error(e, step)
            self.error_handler.log_error(e, {"step": step, "to": request.to, "nonce": tx["nonce"]})
            raise error from e

        tx_hash = HexBytes(tx_hash)
        self.logger.info(f"Submitted {step} tx {tx_hash.hex()} (nonce {tx['nonce']}, gas {tx['gas']})")
        return tx_hash

    async def wait_for_receipt(
        self, tx_hash: HexBytes, timeout: float, step: Optional[str] = None
    ) -> TransactionOutcome:
        """
        Wait for a transaction receipt.

        Raises:
            DeadlineExceeded: If no receipt arrived within `timeout` seconds
            NetworkError: If polling failed
        """
        tx_hash = HexBytes(tx_hash)
        try:
            receipt = await self.context.w3.eth.wait_for_transaction_receipt(
                tx_hash, timeout=timeout, poll_latency=self.poll_interval
            )
        except TimeExhausted as e:
            raise DeadlineExceeded(
                f"No receipt for {step or 'transaction'} tx {tx_hash.hex()} after {timeout:.0f}s",
                step=step,
                cause=e,
                tx_hash=tx_hash.hex(),
            ) from e
        except Exception as e:
            raise NetworkError(
                f"Failed waiting for receipt of {tx_hash.hex()}: {e}", step=step, cause=e
            ) from e

        outcome = TransactionOutcome.from_receipt(receipt, step=step)
        self.logger.info(
            f"Receipt for {step or 'transaction'} tx {tx_hash.hex()}: {outcome.status.value} "
            f"in block {outcome.block_number}, gas used {outcome.gas_used}"
        )
        return outcome
