from __future__ import annotations

from pydantic import BaseModel

from distributor.models import Distribution, EthereumAddress, checksum


class Store(BaseModel):
    """
    All distributor state, keyed by token address.
    A single instance is owned by the service and passed explicitly to every operation.
    """

    distributions: dict[EthereumAddress, Distribution] = {}

    def distribution(self, token: EthereumAddress) -> Distribution:
        """Tokens get an empty distribution the first time they are referenced"""
        token = checksum(token)
        if token not in self.distributions:
            self.distributions[token] = Distribution()
        return self.distributions[token]

    def snapshot(self) -> Store:
        return self.model_copy(deep=True)

    def restore(self, snapshot: Store) -> None:
        self.distributions = snapshot.model_copy(deep=True).distributions
