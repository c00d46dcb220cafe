"""Copying embeddings from one store to another and checking the copy."""

from __future__ import annotations

import dataclasses
import threading
from dataclasses import dataclass
from typing import Callable

from codetect.chunker import Chunk
from codetect.store import EmbeddingStore

DEFAULT_BATCH_SIZE = 1000
_COMPARE_VALUES = 10
_TOLERANCE = 0.0001


class MigrationError(Exception):
    """Raised when a migration or its validation fails."""


class MigrationCancelled(MigrationError):
    """Raised when a migration is stopped through its cancel event."""


@dataclass
class MigrationOptions:
    """How a migration behaves."""

    batch_size: int = DEFAULT_BATCH_SIZE
    skip_existing: bool = True
    drop_target: bool = False
    dry_run: bool = False


@dataclass
class MigrationProgress:
    """Counters reported while a migration runs."""

    total_embeddings: int = 0
    migrated_embeddings: int = 0
    skipped_embeddings: int = 0
    failed_embeddings: int = 0
    current_file: str = ""


MigrationCallback = Callable[[MigrationProgress], None]


def _report(callback: MigrationCallback | None, progress: MigrationProgress) -> None:
    if callback is not None:
        callback(dataclasses.replace(progress))


def migrate_database(
    source: EmbeddingStore,
    target: EmbeddingStore,
    options: MigrationOptions | None = None,
    callback: MigrationCallback | None = None,
    cancel: threading.Event | None = None,
) -> MigrationProgress:
    """Copy every embedding of ``source`` into ``target`` in batches.

    ``callback`` receives a snapshot of the progress after each batch. When
    ``cancel`` is set, the migration stops after the batch in flight and
    :class:`MigrationCancelled` is raised. Returns the final progress.
    """
    options = options or MigrationOptions()
    batch_size = options.batch_size if options.batch_size > 0 else DEFAULT_BATCH_SIZE

    if options.drop_target and not options.dry_run:
        try:
            target.delete_all()
        except Exception as exc:
            raise MigrationError(f"clearing target database: {exc}") from exc

    try:
        total = source.count()
    except Exception as exc:
        raise MigrationError(f"counting source embeddings: {exc}") from exc

    progress = MigrationProgress(total_embeddings=total)

    if options.dry_run:
        _report(callback, progress)
        return progress

    try:
        records = source.get_all()
    except Exception as exc:
        raise MigrationError(f"fetching source embeddings: {exc}") from exc

    for offset in range(0, len(records), batch_size):
        batch = records[offset : offset + batch_size]

        model = next((r.model for r in batch if r.model), "")
        pairs = [
            (
                Chunk(path=r.path, start_line=r.start_line, end_line=r.end_line),
                r.embedding,
            )
            for r in batch
        ]
        if batch:
            progress.current_file = batch[-1].path

        if options.skip_existing:
            kept = []
            for chunk, vector in pairs:
                try:
                    exists = target.has_embedding(chunk, model)
                except Exception as exc:
                    raise MigrationError(
                        f"checking existing embedding: {exc}"
                    ) from exc
                if exists:
                    progress.skipped_embeddings += 1
                else:
                    kept.append((chunk, vector))
            pairs = kept

        if pairs:
            chunks = [chunk for chunk, _ in pairs]
            vectors = [vector for _, vector in pairs]
            try:
                target.save_batch(chunks, vectors, model)
            except Exception as exc:
                progress.failed_embeddings += len(pairs)
                raise MigrationError(f"saving batch to target: {exc}") from exc
            progress.migrated_embeddings += len(pairs)

        _report(callback, progress)

        if cancel is not None and cancel.is_set():
            raise MigrationCancelled("migration cancelled")

    return progress


def validate_migration(
    source: EmbeddingStore, target: EmbeddingStore, sample_size: int = 10
) -> None:
    """Check counts match and that sampled embeddings exist alike in ``target``.

    Raises :class:`MigrationError` on the first difference found.
    """
    try:
        source_count = source.count()
    except Exception as exc:
        raise MigrationError(f"counting source embeddings: {exc}") from exc
    try:
        target_count = target.count()
    except Exception as exc:
        raise MigrationError(f"counting target embeddings: {exc}") from exc

    if source_count != target_count:
        raise MigrationError(
            f"embedding count mismatch: source={source_count}, target={target_count}"
        )

    try:
        records = source.get_all()
    except Exception as exc:
        raise MigrationError(f"fetching source embeddings: {exc}") from exc
    if not records:
        return
    if sample_size <= 0:
        raise ValueError("sample_size must be positive")

    step = max(len(records) // sample_size, 1)
    for src in records[::step]:
        where = f"{src.path}:{src.start_line}-{src.end_line}"
        try:
            candidates = target.get_by_path(src.path)
        except Exception as exc:
            raise MigrationError(
                f"fetching target embeddings for {src.path}: {exc}"
            ) from exc

        match = next(
            (
                t
                for t in candidates
                if t.start_line == src.start_line
                and t.end_line == src.end_line
                and t.model == src.model
            ),
            None,
        )
        if match is None:
            raise MigrationError(f"embedding not found in target: {where}")

        if len(match.embedding) != len(src.embedding):
            raise MigrationError(f"embedding dimension mismatch for {where}")

        for index, (a, b) in enumerate(
            zip(src.embedding[:_COMPARE_VALUES], match.embedding)
        ):
            if abs(a - b) > _TOLERANCE:
                raise MigrationError(
                    f"embedding value mismatch for {where} at index {index}"
                )