"""
Semantic memory lab: store short texts with their embeddings and search them.

Embeddings come from any service exposing `generate_embeddings(texts)` (the
Semantic Kernel Azure embedding connector in the labs, a fake in tests).
Similarity is cosine similarity computed with numpy.
"""
import json
import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

import numpy as np

from .errors import MemoryStoreError
from .models import new_id


@dataclass
class MemoryRecord:
    collection: str
    text: str
    embedding: np.ndarray
    id: str = field(default_factory=new_id)
    description: str = ""
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self, include_embedding: bool = False) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "collection": self.collection,
            "text": self.text,
            "description": self.description,
            "metadata": self.metadata,
        }
        if include_embedding:
            data["embedding"] = [float(x) for x in self.embedding]
        return data


@dataclass
class MemorySearchResult:
    record: MemoryRecord
    relevance: float


class SemanticMemoryStore:
    """Collections of `MemoryRecord`s kept in process memory."""

    def __init__(self, embedding_service: Any):
        self._embedding_service = embedding_service
        self._collections: Dict[str, Dict[str, MemoryRecord]] = {}
        self._dimension: Optional[int] = None

    async def _embed(self, texts: Sequence[str]) -> np.ndarray:
        try:
            vectors = await self._embedding_service.generate_embeddings(list(texts))
        except Exception as e:
            raise MemoryStoreError(f"Embedding service failed: {e}") from e
        matrix = np.asarray(vectors, dtype=np.float32)
        if matrix.ndim != 2 or matrix.shape[0] != len(texts):
            raise MemoryStoreError(f"Embedding service returned shape {matrix.shape} for {len(texts)} texts")
        if self._dimension is None:
            self._dimension = matrix.shape[1]
        elif matrix.shape[1] != self._dimension:
            raise MemoryStoreError(
                f"Embedding dimension changed from {self._dimension} to {matrix.shape[1]}"
            )
        return matrix

    async def save(
        self,
        collection: str,
        text: str,
        *,
        id: Optional[str] = None,
        description: str = "",
        metadata: Optional[Dict[str, Any]] = None,
    ) -> MemoryRecord:
        """Embed `text` and store it. Saving an existing id replaces the record."""
        records = await self.save_many(collection, [text], ids=[id] if id else None)
        record = records[0]
        record.description = description
        record.metadata = dict(metadata or {})
        return record

    async def save_many(self, collection: str, texts: Sequence[str], ids: Optional[Sequence[str]] = None) -> List[MemoryRecord]:
        if not collection:
            raise MemoryStoreError("Collection name must not be empty")
        texts = [t.strip() for t in texts]
        if not texts or any(not t for t in texts):
            raise MemoryStoreError("Cannot store empty text")
        if ids is not None and len(ids) != len(texts):
            raise MemoryStoreError("ids and texts must have the same length")

        matrix = await self._embed(texts)
        bucket = self._collections.setdefault(collection, {})
        saved = []
        for i, text in enumerate(texts):
            kwargs = {"id": ids[i]} if ids is not None else {}
            record = MemoryRecord(collection=collection, text=text, embedding=matrix[i], **kwargs)
            bucket[record.id] = record
            saved.append(record)
        return saved

    def _bucket(self, collection: str) -> Dict[str, MemoryRecord]:
        try:
            return self._collections[collection]
        except KeyError:
            raise MemoryStoreError(f"Unknown collection: {collection}")

    def get(self, collection: str, id: str) -> Optional[MemoryRecord]:
        return self._bucket(collection).get(id)

    def remove(self, collection: str, id: str) -> bool:
        return self._bucket(collection).pop(id, None) is not None

    def collections(self) -> List[str]:
        return sorted(self._collections)

    def count(self, collection: Optional[str] = None) -> int:
        if collection is not None:
            return len(self._collections.get(collection, {}))
        return sum(len(b) for b in self._collections.values())

    async def search(self, collection: str, query: str, limit: int = 3, min_relevance: float = 0.0) -> List[MemorySearchResult]:
        """Return up to `limit` records ranked by cosine similarity to `query`."""
        records = list(self._collections.get(collection, {}).values())
        if not records or limit <= 0:
            return []

        query_vec = (await self._embed([query]))[0]
        matrix = np.vstack([r.embedding for r in records])
        sims = matrix @ query_vec
        norms = np.linalg.norm(matrix, axis=1) * np.linalg.norm(query_vec)
        sims = sims / np.clip(norms, 1e-12, None)

        order = (-sims).argsort(kind="stable")
        results = []
        for idx in order:
            score = float(sims[idx])
            if score < min_relevance:
                continue
            results.append(MemorySearchResult(record=records[idx], relevance=score))
            if len(results) >= limit:
                break
        return results

    def export_json(self, path: str, include_embeddings: bool = False) -> str:
        data = {
            name: [r.to_dict(include_embedding=include_embeddings) for r in bucket.values()]
            for name, bucket in self._collections.items()
        }
        os.makedirs(os.path.dirname(os.path.abspath(path)), exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=2)
        return path
