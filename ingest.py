"""Load reference documents into the knowledge store with checkpointing."""

import argparse
from pathlib import Path
from typing import Iterator, List, Tuple

import pandas as pd
from dotenv import load_dotenv
from tqdm import tqdm

from config import require_env
from retrieval import KnowledgeStore, ReferenceDocument


def load_progress(path: Path) -> set[str]:
    """Read processed document ids from a checkpoint file."""
    if not path.exists():
        return set()
    with open(path, "r", encoding="utf-8") as f:
        return {line.strip() for line in f if line.strip()}


def append_progress(path: Path, doc_id: str) -> None:
    """Append a processed document id to the checkpoint file."""
    with open(path, "a", encoding="utf-8") as f:
        f.write(f"{doc_id}\n")


def load_dataset(path: Path) -> pd.DataFrame:
    """Load documents from a CSV or JSON Lines file into a DataFrame."""
    if not path.exists():
        raise FileNotFoundError(f"Dataset not found at {path}")
    if path.suffix in {".jsonl", ".ndjson"}:
        df = pd.read_json(path, lines=True)
    else:
        df = pd.read_csv(path)
    missing = {"title", "content"} - set(df.columns)
    if missing:
        raise ValueError(f"Dataset is missing required columns: {', '.join(sorted(missing))}")
    return df


def parse_keywords(raw) -> List[str]:
    """Accept a list or a comma-separated string of keywords."""
    if isinstance(raw, list):
        return [str(k).strip() for k in raw if str(k).strip()]
    if not isinstance(raw, str):
        return []
    return [k.strip() for k in raw.split(",") if k.strip()]


def iter_documents(df: pd.DataFrame) -> Iterator[Tuple[str, ReferenceDocument]]:
    """Yield (doc_id, document) pairs, skipping rows without a title or content."""
    for idx, row in df.iterrows():
        title = row.get("title")
        content = row.get("content")
        if not isinstance(title, str) or not title.strip():
            continue
        if not isinstance(content, str) or not content.strip():
            continue
        raw_id = row.get("doc_id")
        doc_id = str(raw_id) if pd.notna(raw_id) else str(idx)
        yield doc_id, ReferenceDocument(
            title=title.strip(),
            content=content.strip(),
            keywords=parse_keywords(row.get("keywords")),
        )


def main() -> None:
    """CLI entry point to load reference documents into the knowledge store.

    Reruns skip ids already listed in the progress file.
    """
    load_dotenv()
    parser = argparse.ArgumentParser(description="Load reference documents into the knowledge store")
    parser.add_argument("--dataset", type=Path, default=Path("data/knowledge.csv"))
    parser.add_argument("--limit", type=int, default=None, help="Limit number of documents")
    parser.add_argument("--dry-run", action="store_true", help="Parse only, do not write to the store")
    parser.add_argument(
        "--progress-file",
        type=Path,
        default=Path("ingest_progress.txt"),
        help="Checkpoint file to skip already loaded documents",
    )
    args = parser.parse_args()
    index_url = None if args.dry_run else require_env("KNOWLEDGE_INDEX_URL")

    print("Loading dataset...")
    df = load_dataset(args.dataset)
    print(f"Loaded {len(df)} rows from {args.dataset}")

    processed = load_progress(args.progress_file)
    if processed:
        print(f"Found {len(processed)} loaded documents in {args.progress_file}; they will be skipped")

    rows = df if args.limit is None else df.head(args.limit)
    store = KnowledgeStore(index_url) if index_url else None

    written = 0
    prepared = 0
    for doc_id, doc in tqdm(iter_documents(rows), total=len(rows), desc="Documents"):
        if doc_id in processed:
            continue
        prepared += 1
        if store is None:
            continue
        store.put(doc_id, doc)
        append_progress(args.progress_file, doc_id)
        written += 1

    if args.dry_run:
        print(f"Dry run complete; prepared {prepared} documents.")
        return

    print(f"Ingestion complete. Documents written: {written}")


if __name__ == "__main__":
    main()
