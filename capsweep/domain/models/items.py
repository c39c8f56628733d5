"""Items walked by a run and the statistics accumulated over them.

Parents (videos) are fetched page by page; children (caption tracks) are
fetched lazily for one parent at a time and never cached across parents.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence, TypeVar

from capsweep.domain.models.common import ItemId, LanguageTag

T = TypeVar("T")


@dataclass(frozen=True)
class ParentItem:
    """Top-level resource being enumerated (a video)."""
    item_id: ItemId
    label: str = ""

    def display_name(self) -> str:
        return f"{self.item_id} ({self.label})" if self.label else str(self.item_id)


@dataclass(frozen=True)
class ChildItem:
    """Per-parent sub-resource subject to deletion (a caption track)."""
    parent_id: ItemId
    language: LanguageTag


@dataclass(frozen=True)
class PageEnvelope:
    """One page of the parent collection.

    `current_page` starts at 1. `total_pages` is only trusted on the first
    page; see `PaginatedCollector`.
    """
    items: Sequence[ParentItem]
    current_page: int
    total_pages: int


@dataclass(frozen=True)
class ConcurrencyPolicy:
    """How a parent's children are split into concurrently deleted chunks.

    Up to `all_at_once_threshold` children go out as a single chunk; larger
    sets are split into chunks of `chunk_size`.
    """
    all_at_once_threshold: int = 10
    chunk_size: int = 5

    def __post_init__(self) -> None:
        if self.chunk_size < 1:
            raise ValueError(f"chunk_size must be >= 1, got {self.chunk_size}")
        if self.all_at_once_threshold < 0:
            raise ValueError(f"all_at_once_threshold must be >= 0, got {self.all_at_once_threshold}")

    def chunk_size_for(self, count: int) -> int:
        if count <= self.all_at_once_threshold:
            return max(count, 1)
        return self.chunk_size

    def split(self, items: Sequence[T]) -> List[List[T]]:
        size = self.chunk_size_for(len(items))
        return [list(items[i:i + size]) for i in range(0, len(items), size)]


@dataclass
class ParentResult:
    """What happened to a single parent during the run."""
    parent: ParentItem
    languages: List[LanguageTag] = field(default_factory=list)
    children_deleted: int = 0
    failed: bool = False
    error: Optional[str] = None
    interrupted: bool = False

    @property
    def children_found(self) -> int:
        return len(self.languages)

    @property
    def complete(self) -> bool:
        return not self.failed and self.children_deleted >= self.children_found


@dataclass
class RunStats:
    """Authoritative counts for one run.

    Owned by the orchestrator and updated once per completed parent.
    `incomplete` keeps the parents that still have children afterwards
    (every parent with children in check mode).
    """
    parents_total: int = 0
    parents_processed: int = 0
    parents_with_children: int = 0
    children_found: int = 0
    children_deleted: int = 0
    parents_failed: int = 0
    stopped_early: bool = False
    elapsed_seconds: float = 0.0
    incomplete: List[ParentResult] = field(default_factory=list)

    def record(self, result: ParentResult) -> None:
        self.parents_processed += 1
        if result.children_found > 0:
            self.parents_with_children += 1
        self.children_found += result.children_found
        self.children_deleted += result.children_deleted
        if result.failed:
            self.parents_failed += 1
        if result.failed or result.children_deleted < result.children_found:
            self.incomplete.append(result)

    @property
    def deletion_rate_per_minute(self) -> float:
        if self.elapsed_seconds <= 0:
            return 0.0
        return self.children_deleted / (self.elapsed_seconds / 60)
