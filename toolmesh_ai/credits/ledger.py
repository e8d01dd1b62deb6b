"""Credit ledger contract and in-memory reference implementation.

Usage pattern::

    tx_id = await ledger.reserve(user_id, amount, "tool:image.upscale")
    try:
        await do_work()
    except Exception:
        await ledger.rollback(tx_id)
        raise
    await ledger.commit(tx_id)

``reserve`` deducts up front. ``commit`` settles the deduction and
``rollback`` refunds it; both are idempotent and ignore unknown transaction
ids. Pending transactions older than ``stale_after_seconds`` are rolled back
by ``sweep_stale``, which ``start_sweeper`` runs periodically.
"""

from __future__ import annotations

import asyncio
import time
import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, Dict, List, Mapping, Optional, Protocol, runtime_checkable

from toolmesh_ai.core.logging_config import get_logger

from .errors import InsufficientCreditsError

logger = get_logger(__name__)


class TransactionStatus(str, Enum):
    pending = "pending"
    committed = "committed"
    rolled_back = "rolled-back"


@dataclass
class CreditTransaction:
    tx_id: str
    user_id: str
    amount: float
    reason: str
    created_at: float
    status: TransactionStatus = TransactionStatus.pending


@runtime_checkable
class CreditLedger(Protocol):
    """External credit store used for metering."""

    async def reserve(self, user_id: str, amount: float, reason: str) -> str:
        """Deduct ``amount`` and return a transaction id; raise ``InsufficientCreditsError`` otherwise."""
        ...

    async def commit(self, tx_id: str) -> None:
        ...

    async def rollback(self, tx_id: str) -> None:
        ...

    async def balance(self, user_id: str) -> float:
        ...


class InMemoryCreditLedger:
    """Process-local ledger.

    Check-and-decrement in ``reserve`` runs without yielding to the event
    loop, so concurrent reservations against one balance cannot overdraw it.
    """

    def __init__(
        self,
        balances: Optional[Mapping[str, float]] = None,
        *,
        stale_after_seconds: float = 600.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._balances: Dict[str, float] = dict(balances or {})
        self._transactions: Dict[str, CreditTransaction] = {}
        self._stale_after = stale_after_seconds
        self._clock = clock
        self._sweeper: Optional[asyncio.Task[None]] = None

    def deposit(self, user_id: str, amount: float) -> float:
        self._balances[user_id] = self._balances.get(user_id, 0.0) + amount
        return self._balances[user_id]

    def transaction(self, tx_id: str) -> Optional[CreditTransaction]:
        return self._transactions.get(tx_id)

    async def balance(self, user_id: str) -> float:
        return self._balances.get(user_id, 0.0)

    async def reserve(self, user_id: str, amount: float, reason: str) -> str:
        available = self._balances.get(user_id, 0.0)
        if amount > available:
            logger.info(
                "Credit reservation rejected",
                extra={"user_id": user_id, "required": amount, "available": available, "reason": reason},
            )
            raise InsufficientCreditsError(required=amount, available=available)
        self._balances[user_id] = available - amount

        tx_id = f"ctx_{uuid.uuid4().hex}"
        self._transactions[tx_id] = CreditTransaction(
            tx_id=tx_id, user_id=user_id, amount=amount, reason=reason, created_at=self._clock()
        )
        logger.debug("Credit transaction begun", extra={"tx_id": tx_id, "user_id": user_id, "amount": amount})
        return tx_id

    async def commit(self, tx_id: str) -> None:
        tx = self._transactions.get(tx_id)
        if tx is None:
            logger.warning("Commit called for unknown transaction", extra={"tx_id": tx_id})
            return
        if tx.status is not TransactionStatus.pending:
            return
        tx.status = TransactionStatus.committed
        logger.debug("Credit transaction committed", extra={"tx_id": tx_id, "user_id": tx.user_id})

    async def rollback(self, tx_id: str) -> None:
        tx = self._transactions.get(tx_id)
        if tx is None:
            logger.warning("Rollback called for unknown transaction", extra={"tx_id": tx_id})
            return
        if tx.status is not TransactionStatus.pending:
            return
        tx.status = TransactionStatus.rolled_back
        self._balances[tx.user_id] = self._balances.get(tx.user_id, 0.0) + tx.amount
        logger.info(
            "Credit transaction rolled back", extra={"tx_id": tx_id, "user_id": tx.user_id, "amount": tx.amount}
        )

    async def sweep_stale(self) -> List[str]:
        """Roll back pending transactions older than the stale window; return their ids."""
        now = self._clock()
        stale = [
            tx.tx_id
            for tx in self._transactions.values()
            if tx.status is TransactionStatus.pending and now - tx.created_at > self._stale_after
        ]
        for tx_id in stale:
            tx = self._transactions[tx_id]
            logger.warning(
                "Auto-rolling-back stale credit transaction",
                extra={"tx_id": tx_id, "user_id": tx.user_id, "amount": tx.amount},
            )
            await self.rollback(tx_id)
        return stale

    def start_sweeper(
        self,
        interval_seconds: float = 300.0,
        *,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        if self._sweeper is not None and not self._sweeper.done():
            return

        async def _loop() -> None:
            while True:
                await sleep(interval_seconds)
                try:
                    await self.sweep_stale()
                except Exception as exc:
                    logger.error("Credit sweep failed: %s", exc, exc_info=True)

        self._sweeper = asyncio.get_running_loop().create_task(_loop(), name="credit-ledger-sweeper")

    async def stop_sweeper(self) -> None:
        if self._sweeper is None:
            return
        self._sweeper.cancel()
        try:
            await self._sweeper
        except asyncio.CancelledError:
            pass
        self._sweeper = None
