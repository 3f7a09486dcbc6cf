import os
from typing import Optional
from tinydb import TinyDB, where

from distributor.errors import BadConfigException, MissingDBException
from distributor.models.Event import Event
from distributor.models.types import EthereumAddress, EventName, checksum
from distributor.store import Store
from distributor.transfers import Ledger


class DB(TinyDB):
    """
    Persists the distributor between runs.
    `state` holds one document per token, `events` the notifications in publish order
    and `ledger` the in-memory balances, when the distributor runs on a `Ledger`.
    """

    path: str

    def __init__(self, path: str, drop=False, **kwargs):
        self.path = path

        # check if the directory exists
        create_dirs = self.exists(path) == False
        super().__init__(
            path,
            indent=4,
            create_dirs=create_dirs,
            **kwargs,
        )

        if drop:
            self.drop_tables()

    @staticmethod
    def exists(path: str):
        return os.path.exists(path)

    @classmethod
    def open_existing(cls, path: str) -> "DB":
        if not cls.exists(path):
            raise MissingDBException(f"Missing DB at {path}")
        return cls(path)

    @staticmethod
    def _state_documents(store: Store) -> list[dict]:
        return [
            {"token": token, **distribution.model_dump()}
            for token, distribution in store.distributions.items()
        ]

    def save_store(self, store: Store) -> None:
        state = self.table("state")
        state.truncate()
        state.insert_multiple(self._state_documents(store))

    def commit(
        self, store: Store, events: list[Event], ledger: Optional[Ledger] = None
    ) -> None:
        """
        Write the store, the new notifications and the ledger balances in one storage write,
        so a failure leaves the file as it was before the call.
        """
        data = self.storage.read() or {}

        data["state"] = {
            str(doc_id): doc
            for doc_id, doc in enumerate(self._state_documents(store), start=1)
        }

        history = data.setdefault("events", {})
        next_id = max(map(int, history), default=0) + 1
        for doc_id, event in enumerate(events, start=next_id):
            history[str(doc_id)] = {"event": event.name, **event.model_dump()}

        if ledger is not None:
            data["ledger"] = {
                "1": {"custody": ledger.custody, "balances": ledger.snapshot()}
            }

        self.storage.write(data)

        # tables cache query results and their next document id
        self._tables.clear()

    def load_store(self) -> Store:
        documents = self.table("state").all()
        return Store.model_validate(
            {
                "distributions": {
                    doc["token"]: {k: v for k, v in doc.items() if k != "token"}
                    for doc in documents
                }
            }
        )

    def load_ledger(self, custody: EthereumAddress) -> Optional[Ledger]:
        """The persisted balances, or None if nothing has been committed through a `Ledger`"""
        documents = self.table("ledger").all()
        if not documents:
            return None

        saved = documents[0]
        if checksum(saved["custody"]) != checksum(custody):
            raise BadConfigException(
                f"DB at {self.path} holds balances for custody {saved['custody']}, not {custody}"
            )
        ledger = Ledger(saved["custody"])
        ledger.restore(saved["balances"])
        return ledger

    def events(self, name: Optional[EventName] = None) -> list[dict]:
        table = self.table("events")
        if name is None:
            return table.all()
        return table.search(where("event") == name)
