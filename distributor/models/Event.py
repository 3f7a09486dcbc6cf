from __future__ import annotations

from typing import Union

from pydantic import BaseModel

from distributor.models.types import EthereumAddress, EventName, Hash32


class Event(BaseModel):
    """Base class for notifications published after a call commits"""

    @property
    def name(self) -> EventName:
        return type(self).__name__  # type: ignore


class NewDistribution(Event):
    """
    A new batch was funded. Indexers use this to know which root
    to build and serve claimer proofs for.
    """

    token: EthereumAddress
    batchNumber: int
    root: Hash32
    amount: int


class Claimed(Event):
    token: EthereumAddress
    claimer: EthereumAddress
    batchNumber: int
    amount: int


class Swept(Event):
    token: EthereumAddress
    recipient: EthereumAddress
    amount: int


AnyEvent = Union[NewDistribution, Claimed, Swept]
