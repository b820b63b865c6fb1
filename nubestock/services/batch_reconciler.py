"""
Batch reconciler for bulk uploads.

Takes validated candidates keyed by a natural key (SKU, material code,
RUC), splits them into inserts and updates with a single existence lookup,
and applies both inside one store transaction. Every submitted record ends
up with exactly one outcome, so callers can resubmit only what failed.

With the default ``InsertPolicy.BATCH`` the insert set is written with one
batched statement and fails as a unit. Each update runs on its own and
fails alone. When the transaction itself fails nothing of the batch
persisted, so records already written are reported as failed too.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import (
    Any,
    AsyncContextManager,
    Dict,
    Iterable,
    List,
    NamedTuple,
    Optional,
    Protocol,
    Sequence,
    Set,
    Tuple,
)

from nubestock.errors import StoreError, StorePhase

logger = logging.getLogger(__name__)

DUPLICATE_KEY_REASON = "duplicate key in batch"


class InsertPolicy(str, Enum):
    """How failures spread across the insert set."""

    BATCH = "batch"  # one statement, all-or-nothing
    PER_RECORD = "per_record"  # one statement per record, failures isolated


class OutcomeAction(str, Enum):
    CREATED = "created"
    UPDATED = "updated"
    FAILED = "failed"


@dataclass
class UpsertCandidate:
    """
    One validated record of a bulk submission.

    ``values`` is what an update writes; ``insert_values`` (defaults to
    ``values``) is what an insert writes. Insert rows of one batch must
    share the same columns.
    """

    origin_index: int
    key: str
    values: Dict[str, Any]
    name: Optional[str] = None
    secondary_key: Optional[str] = None
    insert_values: Optional[Dict[str, Any]] = None

    def row_for_insert(self) -> Dict[str, Any]:
        return dict(self.insert_values if self.insert_values is not None else self.values)


@dataclass
class ReconciliationOutcome:
    action: OutcomeAction
    origin_index: int
    key: str
    name: Optional[str] = None
    record: Optional[Dict[str, Any]] = None
    reason: Optional[str] = None

    @classmethod
    def created(cls, candidate: UpsertCandidate, record: Dict[str, Any]) -> "ReconciliationOutcome":
        return cls(OutcomeAction.CREATED, candidate.origin_index, candidate.key, candidate.name, record=record)

    @classmethod
    def updated(cls, candidate: UpsertCandidate, record: Dict[str, Any]) -> "ReconciliationOutcome":
        return cls(OutcomeAction.UPDATED, candidate.origin_index, candidate.key, candidate.name, record=record)

    @classmethod
    def failed(
        cls,
        origin_index: int,
        key: str,
        reason: str,
        name: Optional[str] = None,
    ) -> "ReconciliationOutcome":
        return cls(OutcomeAction.FAILED, origin_index, key, name, reason=reason)

    @classmethod
    def failed_candidate(cls, candidate: UpsertCandidate, reason: str) -> "ReconciliationOutcome":
        return cls.failed(candidate.origin_index, candidate.key, reason, candidate.name)

    @property
    def succeeded(self) -> bool:
        return self.action is not OutcomeAction.FAILED


@dataclass
class BatchFailure:
    index: int  # 1-based
    key: str
    name: str
    error: str


@dataclass
class BatchResult:
    """All outcomes of one bulk submission, ordered by origin index."""

    outcomes: List[ReconciliationOutcome] = field(default_factory=list)

    @classmethod
    def from_outcomes(cls, outcomes: Iterable[ReconciliationOutcome]) -> "BatchResult":
        ordered = sorted(outcomes, key=lambda outcome: outcome.origin_index)
        return cls(outcomes=ordered)

    @property
    def total(self) -> int:
        return len(self.outcomes)

    @property
    def created(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.action is OutcomeAction.CREATED)

    @property
    def updated(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.action is OutcomeAction.UPDATED)

    @property
    def failed(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.action is OutcomeAction.FAILED)

    @property
    def records(self) -> List[Dict[str, Any]]:
        """Written rows tagged with the action that produced them."""
        return [
            {**(outcome.record or {}), "action": outcome.action.value}
            for outcome in self.outcomes
            if outcome.succeeded
        ]

    @property
    def errors(self) -> List[BatchFailure]:
        return [
            BatchFailure(
                index=outcome.origin_index + 1,
                key=outcome.key or "N/A",
                name=outcome.name or "N/A",
                error=outcome.reason or "Unknown error",
            )
            for outcome in self.outcomes
            if not outcome.succeeded
        ]

    def written_records(self) -> List[Dict[str, Any]]:
        return [outcome.record for outcome in self.outcomes if outcome.succeeded and outcome.record]


class ExistingRow(NamedTuple):
    identity: Any
    key: str
    secondary_key: Optional[str] = None


class UpsertStore(Protocol):
    """Store handle the reconciler writes through.

    Every method raises ``StoreError`` tagged with its phase.
    """

    key_column: str

    def transaction(self) -> AsyncContextManager[None]: ...

    async def fetch_existing(
        self,
        keys: Sequence[str],
        secondary_keys: Sequence[str] = (),
    ) -> List[ExistingRow]: ...

    async def insert_many(self, rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]: ...

    async def update_one(self, identity: Any, values: Dict[str, Any]) -> Optional[Dict[str, Any]]: ...


class BatchReconciler:
    """Apply a bulk submission as one insert batch plus per-record updates."""

    def __init__(
        self,
        store: UpsertStore,
        *,
        entity_label: str = "record",
        insert_policy: InsertPolicy = InsertPolicy.BATCH,
    ):
        self.store = store
        self.entity_label = entity_label
        self.insert_policy = insert_policy

    async def reconcile(
        self,
        candidates: Sequence[UpsertCandidate],
        rejected: Sequence[ReconciliationOutcome] = (),
    ) -> BatchResult:
        """
        Reconcile ``candidates`` against the store.

        ``rejected`` carries records that already failed upstream (validation);
        they are merged into the result so it covers the whole submission.
        """
        outcomes: Dict[int, ReconciliationOutcome] = {
            outcome.origin_index: outcome for outcome in rejected
        }
        survivors = self._drop_duplicates(candidates, outcomes)

        if survivors:
            try:
                async with self.store.transaction():
                    await self._apply(survivors, outcomes)
            except StoreError as exc:
                logger.error("Bulk %s transaction failed: %s", self.entity_label, exc)
                self._fail_rolled_back(survivors, outcomes, str(exc))

        result = BatchResult.from_outcomes(outcomes.values())
        logger.info(
            "Bulk %s reconciled: total=%s created=%s updated=%s failed=%s",
            self.entity_label,
            result.total,
            result.created,
            result.updated,
            result.failed,
        )
        return result

    def _drop_duplicates(
        self,
        candidates: Sequence[UpsertCandidate],
        outcomes: Dict[int, ReconciliationOutcome],
    ) -> List[UpsertCandidate]:
        # First occurrence of a key wins; later ones fail without touching the store.
        seen: Set[str] = set()
        survivors: List[UpsertCandidate] = []
        for candidate in candidates:
            if candidate.key in seen:
                outcomes[candidate.origin_index] = ReconciliationOutcome.failed_candidate(
                    candidate, DUPLICATE_KEY_REASON
                )
                continue
            seen.add(candidate.key)
            survivors.append(candidate)
        return survivors

    async def _apply(
        self,
        survivors: List[UpsertCandidate],
        outcomes: Dict[int, ReconciliationOutcome],
    ) -> None:
        keys = [candidate.key for candidate in survivors]
        secondary_keys = [candidate.secondary_key for candidate in survivors if candidate.secondary_key]

        try:
            existing = await self.store.fetch_existing(keys, secondary_keys)
        except StoreError as exc:
            logger.error("Bulk %s lookup failed: %s", self.entity_label, exc)
            for candidate in survivors:
                outcomes[candidate.origin_index] = ReconciliationOutcome.failed_candidate(candidate, str(exc))
            return

        inserts, updates = self._partition(survivors, existing)

        if inserts and self.insert_policy is InsertPolicy.PER_RECORD:
            for candidate in inserts:
                await self._insert([candidate], outcomes)
        elif inserts:
            await self._insert(inserts, outcomes)
        if updates:
            await self._update(updates, outcomes)

    @staticmethod
    def _partition(
        survivors: List[UpsertCandidate],
        existing: List[ExistingRow],
    ) -> Tuple[List[UpsertCandidate], List[Tuple[UpsertCandidate, Any]]]:
        by_key = {row.key: row.identity for row in existing}
        by_secondary = {row.secondary_key: row.identity for row in existing if row.secondary_key}

        inserts: List[UpsertCandidate] = []
        updates: List[Tuple[UpsertCandidate, Any]] = []
        for candidate in survivors:
            identity = by_key.get(candidate.key)
            if identity is None and candidate.secondary_key:
                identity = by_secondary.get(candidate.secondary_key)
            if identity is None:
                inserts.append(candidate)
            else:
                updates.append((candidate, identity))
        return inserts, updates

    async def _insert(
        self,
        inserts: List[UpsertCandidate],
        outcomes: Dict[int, ReconciliationOutcome],
    ) -> None:
        try:
            rows = await self.store.insert_many([candidate.row_for_insert() for candidate in inserts])
        except StoreError as exc:
            logger.error("Bulk %s insert of %s rows failed: %s", self.entity_label, len(inserts), exc)
            for candidate in inserts:
                outcomes[candidate.origin_index] = ReconciliationOutcome.failed_candidate(candidate, str(exc))
            return

        # Match generated rows back by natural key; RETURNING order is not relied on.
        by_key = {str(row.get(self.store.key_column)): row for row in rows}
        for candidate in inserts:
            row = by_key.get(candidate.key)
            if row is None:
                outcomes[candidate.origin_index] = ReconciliationOutcome.failed_candidate(
                    candidate,
                    f"{StorePhase.INSERT.value} Error: row was not returned by the store",
                )
            else:
                outcomes[candidate.origin_index] = ReconciliationOutcome.created(candidate, row)

    async def _update(
        self,
        updates: List[Tuple[UpsertCandidate, Any]],
        outcomes: Dict[int, ReconciliationOutcome],
    ) -> None:
        results = await asyncio.gather(
            *(self._update_one(candidate, identity) for candidate, identity in updates)
        )
        for outcome in results:
            outcomes[outcome.origin_index] = outcome

    async def _update_one(self, candidate: UpsertCandidate, identity: Any) -> ReconciliationOutcome:
        try:
            row = await self.store.update_one(identity, candidate.values)
        except StoreError as exc:
            logger.error("Bulk %s update of %s failed: %s", self.entity_label, candidate.key, exc)
            return ReconciliationOutcome.failed_candidate(candidate, str(exc))
        if row is None:
            return ReconciliationOutcome.failed_candidate(
                candidate,
                f"{StorePhase.UPDATE.value} Error: record {identity} no longer exists",
            )
        return ReconciliationOutcome.updated(candidate, row)

    @staticmethod
    def _fail_rolled_back(
        survivors: List[UpsertCandidate],
        outcomes: Dict[int, ReconciliationOutcome],
        reason: str,
    ) -> None:
        # The store rolled the transaction back, so no write of this batch persisted.
        for candidate in survivors:
            outcome = outcomes.get(candidate.origin_index)
            if outcome is None or outcome.succeeded:
                outcomes[candidate.origin_index] = ReconciliationOutcome.failed_candidate(candidate, reason)
