from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections import defaultdict
from copy import deepcopy
from typing import Any

from distributor.errors import TransferFailed
from distributor.models import EthereumAddress, checksum

logger = logging.getLogger(__name__)


class TransferService(ABC):
    """
    The ledger that actually holds tokens. The distributor only ever moves
    tokens between its custody address and callers through this interface.
    Any failure must raise `TransferFailed`.

    `snapshot` and `restore` let the distributor roll transfers back
    together with its own state when a call fails part way.
    """

    custody: EthereumAddress

    @abstractmethod
    def transfer_in(
        self, token: EthereumAddress, sender: EthereumAddress, amount: int
    ) -> None:
        ...

    @abstractmethod
    def transfer_out(
        self, token: EthereumAddress, recipient: EthereumAddress, amount: int
    ) -> None:
        ...

    @abstractmethod
    def balance_of(self, token: EthereumAddress, holder: EthereumAddress) -> int:
        ...

    @abstractmethod
    def snapshot(self) -> Any:
        ...

    @abstractmethod
    def restore(self, snapshot: Any) -> None:
        ...


class Ledger(TransferService):
    """In-memory token balances, keyed by token then holder"""

    def __init__(self, custody: EthereumAddress):
        self.custody = checksum(custody)
        self.balances: defaultdict[str, defaultdict[str, int]] = defaultdict(
            lambda: defaultdict(int)
        )

    def mint(self, token: EthereumAddress, holder: EthereumAddress, amount: int):
        self.balances[checksum(token)][checksum(holder)] += amount

    def balance_of(self, token: EthereumAddress, holder: EthereumAddress) -> int:
        return self.balances[checksum(token)][checksum(holder)]

    def _move(
        self,
        token: EthereumAddress,
        sender: EthereumAddress,
        recipient: EthereumAddress,
        amount: int,
    ) -> None:
        token, sender, recipient = checksum(token), checksum(sender), checksum(recipient)
        if amount < 0:
            raise TransferFailed(f"Negative transfer of {amount} {token}")

        held = self.balances[token][sender]
        if held < amount:
            raise TransferFailed(
                f"{sender} holds {held} of {token}, cannot transfer {amount}"
            )
        self.balances[token][sender] = held - amount
        self.balances[token][recipient] += amount
        logger.debug("Moved %d of %s from %s to %s", amount, token, sender, recipient)

    def transfer_in(
        self, token: EthereumAddress, sender: EthereumAddress, amount: int
    ) -> None:
        self._move(token, sender, self.custody, amount)

    def transfer_out(
        self, token: EthereumAddress, recipient: EthereumAddress, amount: int
    ) -> None:
        self._move(token, self.custody, recipient, amount)

    def snapshot(self) -> dict[str, dict[str, int]]:
        return deepcopy({token: dict(held) for token, held in self.balances.items()})

    def restore(self, snapshot: dict[str, dict[str, int]]) -> None:
        self.balances = defaultdict(lambda: defaultdict(int))
        for token, held in snapshot.items():
            self.balances[token].update(held)
