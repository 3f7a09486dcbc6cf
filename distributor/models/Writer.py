import json, csv
from pathlib import Path
from dataclasses import dataclass
from typing import Any

from distributor.models.Claim import MerkleDistribution


@dataclass
class Writer:
    """Writes proof artifacts under `{base}/{token}/batch-{n}`"""

    base: str
    token: str
    batch_number: int

    @property
    def path(self) -> str:
        return f"{self.base}/{self.token}/batch-{self.batch_number}"

    @property
    def csv_path(self) -> str:
        return f"{self.path}/csv"

    @property
    def json_path(self) -> str:
        return f"{self.path}/json"

    @staticmethod
    def flatten_json(y):
        out = {}

        def flatten(x, name=""):
            if type(x) is dict:
                for a in x:
                    flatten(x[a], name + a + "_")

            # proofs are kept as a single column
            elif type(x) is list:
                out[name[:-1]] = " ".join(str(a) for a in x)
            else:
                out[name[:-1]] = x

        flatten(y)
        return out

    @staticmethod
    def write_csv(data: list[dict[str, Any]], path: str, fieldnames) -> None:
        with open(path, "w+", newline="") as f:
            writer = csv.DictWriter(
                f, delimiter=",", fieldnames=fieldnames, extrasaction="ignore"
            )
            writer.writeheader()
            writer.writerows(data)

    # create the directory for csv and json if it doesn't exist
    def _create_dir(self) -> None:
        Path(self.path).mkdir(parents=True, exist_ok=True)
        Path(self.csv_path).mkdir(parents=True, exist_ok=True)
        Path(self.json_path).mkdir(parents=True, exist_ok=True)

    def to_csv(self, data, name: str, fieldnames) -> None:
        self._create_dir()
        self.write_csv(data, f"{self.csv_path}/{name}.csv", fieldnames)

    def to_json(self, data, name: str) -> None:
        self._create_dir()
        with open(f"{self.json_path}/{name}.json", "w") as f:
            json.dump(data, f, indent=4)

    def write_distribution(self, distribution: MerkleDistribution) -> None:
        """
        The JSON holds the whole tree, the CSV one row per claimer
        so it can be eyeballed before the root is funded.
        """
        self.to_json(distribution.model_dump(), "distribution")
        rows = [
            self.flatten_json({"address": address, **claim.model_dump()})
            for address, claim in distribution.claims.items()
        ]
        self.to_csv(rows, "claims", ["address", "amount", "proof"])
