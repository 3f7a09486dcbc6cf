from distributor.service import MerkleDistributor
from distributor.store import Store
from distributor.transfers import Ledger, TransferService
