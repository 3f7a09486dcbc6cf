from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from typing import Callable, Iterator, Optional

from distributor import processor, registry, tracker
from distributor.models import (
    ClaimReceipt,
    ClaimRequest,
    Claimed,
    Config,
    EthereumAddress,
    Event,
    Hash32,
    NewDistribution,
    Swept,
)
from distributor.models.DB import DB
from distributor.store import Store
from distributor.transfers import Ledger, TransferService

logger = logging.getLogger(__name__)

Subscriber = Callable[[Event], None]


class MerkleDistributor:
    """
    Entry point for every call against the distributor.

    Calls run one at a time and are all-or-nothing: the store and the ledger are
    snapshotted on entry and restored if anything raises. Notifications raised by
    a call are held back until it commits, then persisted and published.
    """

    def __init__(
        self,
        config: Config,
        transfers: TransferService,
        store: Optional[Store] = None,
        db: Optional[DB] = None,
    ):
        self.config = config
        self.transfers = transfers
        self.db = db
        if store is None:
            store = db.load_store() if db is not None else Store()
        self.store = store
        self._lock = threading.RLock()
        self._pending: list[Event] = []
        self._subscribers: list[Subscriber] = []

    @classmethod
    def from_config(
        cls, config: Config, transfers: Optional[TransferService] = None
    ) -> MerkleDistributor:
        """
        Uses a DB if `db_path` is set. Without `transfers` the in-memory ledger is
        reloaded from that DB, or starts empty.
        """
        db = DB(config.db_path) if config.db_path else None
        if transfers is None and db is not None:
            transfers = db.load_ledger(config.custody)
        return cls(config, transfers or Ledger(config.custody), db=db)

    def subscribe(self, subscriber: Subscriber) -> None:
        self._subscribers.append(subscriber)

    @contextmanager
    def atomic(self) -> Iterator[None]:
        with self._lock:
            store_snapshot = self.store.snapshot()
            ledger_snapshot = self.transfers.snapshot()
            self._pending = []
            try:
                yield
                if self.db is not None:
                    ledger = self.transfers if isinstance(self.transfers, Ledger) else None
                    self.db.commit(self.store, self._pending, ledger)
            except Exception as e:
                self.store.restore(store_snapshot)
                self.transfers.restore(ledger_snapshot)
                self._pending = []
                logger.warning("Rolled back call: %s: %s", type(e).__name__, e)
                raise

            events, self._pending = self._pending, []

        for event in events:
            self._publish(event)

    def _emit(self, event: Event) -> None:
        self._pending.append(event)

    def _publish(self, event: Event) -> None:
        logger.info("%s %s", event.name, event.model_dump())
        for subscriber in self._subscribers:
            # the call has committed, subscriber failures are only logged
            try:
                subscriber(event)
            except Exception:
                logger.exception("Subscriber %r failed on %s", subscriber, event.name)

    # mutations

    def create_distribution(
        self, caller: EthereumAddress, token: EthereumAddress, root: Hash32, amount: int
    ) -> NewDistribution:
        with self.atomic():
            event = registry.create_distribution(
                self.store, self.transfers, caller, token, root, amount
            )
            self._emit(event)
        return event

    def claim_multiple(
        self,
        caller: EthereumAddress,
        claims: list[ClaimRequest],
        tokens: list[EthereumAddress],
    ) -> ClaimReceipt:
        with self.atomic():
            receipt = processor.claim_multiple(
                self.store,
                self.transfers,
                caller,
                claims,
                tokens,
                bits_per_word=self.config.bits_per_word,
                policy=self.config.commit_policy,
            )
            for payout in receipt.payouts:
                self._emit(Claimed(**payout.model_dump()))
        return receipt

    def claim(
        self,
        caller: EthereumAddress,
        token: EthereumAddress,
        batch_number: int,
        amount: int,
        proof: list[Hash32],
    ) -> ClaimReceipt:
        request = ClaimRequest(
            batchNumber=batch_number, amount=amount, tokenIndex=0, proof=proof
        )
        return self.claim_multiple(caller, [request], [token])

    def sweep(self, tokens: list[EthereumAddress]) -> list[Swept]:
        with self.atomic():
            swept = registry.sweep(
                self.store, self.transfers, tokens, self.config.operator
            )
            for event in swept:
                self._emit(event)
        return swept

    # queries

    def remaining(self, token: EthereumAddress) -> int:
        return registry.get_remaining(self.store, token)

    def next_batch_number(self, token: EthereumAddress) -> int:
        return registry.get_next_batch_number(self.store, token)

    def root(self, token: EthereumAddress, batch_number: int) -> Hash32:
        return registry.get_root(self.store, token, batch_number)

    def is_claimed(
        self, token: EthereumAddress, claimer: EthereumAddress, batch_number: int
    ) -> bool:
        return tracker.is_claimed(
            self.store, token, claimer, batch_number, self.config.bits_per_word
        )
