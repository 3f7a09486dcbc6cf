from distributor.builder import build_distribution, load_rewards
from distributor.models import MerkleDistribution, Writer
from distributor.models.DB import DB
from distributor.utils import yes_or_no


def build(base: str, token: str, batch_number: int, rewards_path: str) -> MerkleDistribution:
    """Builds the tree for the next batch and writes the proofs claimers will need"""
    rewards = load_rewards(rewards_path)
    distribution = build_distribution(token, rewards)

    writer = Writer(base, distribution.token, batch_number)
    writer.write_distribution(distribution)

    print(f"🌳 Built tree for {len(distribution.claims)} claimers of {distribution.token}")
    print(f"🌳 Root {distribution.root}, fund with {distribution.total}")
    print(f"🚀 Proofs written to {writer.path}")
    return distribution


def report(db_path: str) -> None:
    """Prints the persisted state of every token"""
    store = DB.open_existing(db_path).load_store()
    for token, distribution in store.distributions.items():
        print(
            f"🪙 {token}: batch {distribution.next_batch_number - 1}, "
            f"{distribution.remaining} remaining, "
            f"{len(distribution.claims)} claimers"
        )


def main() -> None:
    token = input("🪙 Token address ")
    rewards_path = input("🤑 Path to the rewards JSON file ")
    batch_number = int(input("#️⃣ Batch number this tree will be funded as "))
    base = input("📁 Output directory [distributions] ") or "distributions"

    build(base, token, batch_number, rewards_path)

    db_path = input("🗄 Path to the distributor DB (blank to skip) ")
    if db_path and yes_or_no("Print the current distributor state?"):
        report(db_path)


if __name__ == "__main__":
    main()
