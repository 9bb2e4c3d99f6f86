"""
Tests for knowledge-store ingestion helpers.
"""
import json
from unittest.mock import patch

import pandas as pd
import pytest

import ingest
from retrieval import ReferenceDocument


class TestLoadDataset:

    def test_csv(self, tmp_path):
        path = tmp_path / "docs.csv"
        pd.DataFrame([{"title": "UMAP", "content": "Embedding", "keywords": "viz, dims"}]).to_csv(path, index=False)

        df = ingest.load_dataset(path)

        assert list(df["title"]) == ["UMAP"]

    def test_jsonl(self, tmp_path):
        path = tmp_path / "docs.jsonl"
        path.write_text(json.dumps({"title": "t", "content": "c", "keywords": ["k"]}) + "\n", encoding="utf-8")

        df = ingest.load_dataset(path)

        assert df.iloc[0]["keywords"] == ["k"]

    def test_missing_columns(self, tmp_path):
        path = tmp_path / "docs.csv"
        pd.DataFrame([{"title": "only"}]).to_csv(path, index=False)

        with pytest.raises(ValueError, match="content"):
            ingest.load_dataset(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            ingest.load_dataset(tmp_path / "absent.csv")


class TestIterDocuments:

    def test_builds_documents_and_skips_blank_rows(self):
        df = pd.DataFrame(
            [
                {"doc_id": "a1", "title": " Scanpy ", "content": "Python toolkit", "keywords": "python, anndata"},
                {"doc_id": "a2", "title": "", "content": "no title"},
                {"doc_id": None, "title": "Seurat", "content": "R toolkit", "keywords": None},
            ]
        )

        docs = list(ingest.iter_documents(df))

        assert docs == [
            ("a1", ReferenceDocument("Scanpy", "Python toolkit", ["python", "anndata"])),
            ("2", ReferenceDocument("Seurat", "R toolkit", [])),
        ]

    def test_parse_keywords(self):
        assert ingest.parse_keywords(["a", " b ", ""]) == ["a", "b"]
        assert ingest.parse_keywords("a,,b") == ["a", "b"]
        assert ingest.parse_keywords(float("nan")) == []


class TestProgress:

    def test_round_trip(self, tmp_path):
        path = tmp_path / "progress.txt"
        assert ingest.load_progress(path) == set()

        ingest.append_progress(path, "a1")
        ingest.append_progress(path, "a2")

        assert ingest.load_progress(path) == {"a1", "a2"}


class TestMain:

    def _dataset(self, tmp_path):
        path = tmp_path / "docs.csv"
        pd.DataFrame(
            [
                {"doc_id": "a1", "title": "Scanpy", "content": "Python toolkit"},
                {"doc_id": "a2", "title": "Seurat", "content": "R toolkit"},
            ]
        ).to_csv(path, index=False)
        return path

    @patch("ingest.KnowledgeStore")
    def test_dry_run_writes_nothing(self, mock_store, tmp_path, monkeypatch):
        monkeypatch.delenv("KNOWLEDGE_INDEX_URL", raising=False)
        dataset = self._dataset(tmp_path)
        progress = tmp_path / "progress.txt"
        monkeypatch.setattr(
            "sys.argv",
            ["ingest.py", "--dataset", str(dataset), "--dry-run", "--progress-file", str(progress)],
        )

        ingest.main()

        mock_store.assert_not_called()
        assert not progress.exists()

    @patch("ingest.KnowledgeStore")
    def test_skips_already_loaded(self, mock_store, tmp_path, monkeypatch):
        dataset = self._dataset(tmp_path)
        progress = tmp_path / "progress.txt"
        progress.write_text("a1\n", encoding="utf-8")
        monkeypatch.setenv("KNOWLEDGE_INDEX_URL", "redis://kb:6379/1")
        monkeypatch.setattr("sys.argv", ["ingest.py", "--dataset", str(dataset), "--progress-file", str(progress)])

        ingest.main()

        mock_store.assert_called_once_with("redis://kb:6379/1")
        store = mock_store.return_value
        store.put.assert_called_once_with("a2", ReferenceDocument("Seurat", "R toolkit", []))
        assert ingest.load_progress(progress) == {"a1", "a2"}

    @patch("ingest.KnowledgeStore")
    def test_write_requires_index_url(self, mock_store, tmp_path, monkeypatch):
        dataset = self._dataset(tmp_path)
        progress = tmp_path / "progress.txt"
        monkeypatch.delenv("KNOWLEDGE_INDEX_URL", raising=False)
        monkeypatch.setattr("sys.argv", ["ingest.py", "--dataset", str(dataset), "--progress-file", str(progress)])

        with pytest.raises(RuntimeError, match="Missing required env var: KNOWLEDGE_INDEX_URL"):
            ingest.main()

        mock_store.assert_not_called()
        assert not progress.exists()
