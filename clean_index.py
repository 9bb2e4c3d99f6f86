"""Clean the knowledge store by deleting every reference document."""

import argparse

from dotenv import load_dotenv

from config import require_env
from retrieval import KnowledgeStore


def main() -> None:
    load_dotenv()

    parser = argparse.ArgumentParser(description="Delete all reference documents from the knowledge store")
    parser.add_argument("--prefix", type=str, default="doc:", help="Document key prefix (default: doc:)")
    parser.add_argument("--confirm", action="store_true", help="Skip confirmation prompt")
    args = parser.parse_args()
    index_url = require_env("KNOWLEDGE_INDEX_URL")

    if not args.confirm:
        resp = input(f"Delete all '{args.prefix}*' keys from {index_url}? (yes/no): ")
        if resp.lower() != "yes":
            print("Cancelled.")
            return

    store = KnowledgeStore(index_url, prefix=args.prefix)
    removed = store.delete_all()
    print(f"Removed {removed} documents")


if __name__ == "__main__":
    main()
