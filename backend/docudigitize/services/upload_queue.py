"""
Upload Reconciliation Pipeline.

Processes a FIFO queue of uploaded files one at a time:

    hash -> duplicate check -> (duplicate decision) -> AI extraction
         -> caller review -> commit (create, or update the duplicate)

Nothing is written to the store until the caller commits.
"""
import asyncio
import uuid
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Deque, Dict, List, Optional, Tuple

from ..api.exceptions import AuthError, NotFoundError, PersistenceError, ServiceError, UploadStateError
from ..core.config import ALLOWED_UPLOAD_TYPES
from ..domain.value_objects import Collection
from ..utils.checksum import calculate_content_hash
from ..utils.document_utils import build_file_record, now_iso
from .ai_service import AIService
from .database.base import EntityStoreInterface
from ..core.logging_config import get_logger

logger = get_logger(__name__)


class UploadStatus(Enum):
    """Upload task status."""
    QUEUED = "queued"
    HASHING = "hashing"
    DUPLICATE = "duplicate"        # waiting for the replace/cancel decision
    EXTRACTING = "extracting"
    REVIEW = "review"              # extraction done, waiting for commit
    FAILED = "failed"              # extraction failed, retry allowed
    COMMITTED = "committed"
    SKIPPED = "skipped"


@dataclass
class UploadTask:
    """Represents a single file moving through the pipeline."""
    task_id: str
    filename: str
    mime_type: str
    data: bytes = field(repr=False)
    content_hash: Optional[str] = None
    status: UploadStatus = UploadStatus.QUEUED
    duplicate_of: Optional[Dict[str, Any]] = None
    replace_target_id: Optional[str] = None
    extraction: Optional[Dict[str, Any]] = None
    file_id: Optional[str] = None
    error: Optional[str] = None
    warning: Optional[str] = None
    created_at: datetime = field(default_factory=datetime.now)
    completed_at: Optional[datetime] = None

    def mark_hashing(self):
        self.status = UploadStatus.HASHING

    def mark_duplicate(self, existing_file: Dict[str, Any]):
        """Mark task as a duplicate of an existing file, pending a decision."""
        self.status = UploadStatus.DUPLICATE
        self.duplicate_of = existing_file

    def mark_extracting(self):
        self.status = UploadStatus.EXTRACTING
        self.error = None

    def mark_review(self, extraction: Dict[str, Any]):
        self.status = UploadStatus.REVIEW
        self.extraction = extraction

    def mark_failed(self, error: str):
        """Mark extraction as failed; the task stays current so it can be retried."""
        self.status = UploadStatus.FAILED
        self.error = error

    def mark_paused(self, error: str):
        """Park the task until credentials are fixed."""
        self.status = UploadStatus.QUEUED
        self.error = error

    def mark_committed(self, file_id: str):
        self.status = UploadStatus.COMMITTED
        self.file_id = file_id
        self.completed_at = datetime.now()

    def mark_skipped(self):
        self.status = UploadStatus.SKIPPED
        self.completed_at = datetime.now()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "taskId": self.task_id,
            "filename": self.filename,
            "mimeType": self.mime_type,
            "size": len(self.data),
            "contentHash": self.content_hash,
            "status": self.status.value,
            "duplicateOf": self.duplicate_of,
            "isReplacement": self.replace_target_id is not None,
            "extraction": self.extraction,
            "fileId": self.file_id,
            "error": self.error,
            "warning": self.warning,
        }


class UploadReconciliationPipeline:
    """
    Sequential upload pipeline with content-hash duplicate detection.

    At most one task is current; an asyncio lock keeps extractions from
    overlapping. Abandoning the batch discards any in-flight extraction result.
    """

    def __init__(
        self,
        store: EntityStoreInterface,
        ai_service: AIService,
        allowed_mime_types: Tuple[str, ...] = ALLOWED_UPLOAD_TYPES,
    ):
        self.store = store
        self.ai_service = ai_service
        self.allowed_mime_types = allowed_mime_types
        # Tasks waiting behind the current one
        self.queue: Deque[UploadTask] = deque()
        self.current: Optional[UploadTask] = None
        self._lock = asyncio.Lock()  # one hash/extraction at a time

        # Statistics
        self.stats = {
            "total_tasks": 0,
            "committed": 0,
            "replaced": 0,
            "skipped": 0,
            "failed": 0,
            "rejected": 0,
        }

    @property
    def is_idle(self) -> bool:
        return self.current is None and not self.queue

    def enqueue(self, files: List[Tuple[str, str, bytes]]) -> Dict[str, Any]:
        """
        Add files to the queue. Starts a fresh batch when idle, otherwise appends.

        Args:
            files: (filename, mime_type, data) tuples

        Returns:
            {"accepted": [task dicts], "rejected": [{"filename", "reason"}]}
        """
        # A new batch starts only when nothing is in progress
        if self.is_idle:
            self.queue.clear()

        accepted, rejected = [], []
        for filename, mime_type, data in files:
            # Unsupported types are reported, never queued
            if mime_type not in self.allowed_mime_types:
                rejected.append({"filename": filename, "reason": f"Unsupported file type: {mime_type}"})
                self.stats["rejected"] += 1
                continue
            task = UploadTask(task_id=str(uuid.uuid4()), filename=filename, mime_type=mime_type, data=data)
            self.queue.append(task)
            accepted.append(task)
            self.stats["total_tasks"] += 1

        if rejected:
            logger.warning(f"Rejected {len(rejected)} upload(s) with unsupported types")
        logger.info(f"Queued {len(accepted)} upload(s) (queue size: {len(self.queue)})")

        if self.current is None:
            self._advance()
        return {"accepted": [t.to_dict() for t in accepted], "rejected": rejected}

    def get_state(self) -> Dict[str, Any]:
        return {
            "current": self.current.to_dict() if self.current else None,
            "queued": [t.to_dict() for t in self.queue],
            "stats": dict(self.stats),
        }

    async def process_current(self) -> Optional[UploadTask]:
        """
        Hash, duplicate-check and extract the current task.

        A FAILED task is retried; a task in any waiting state is returned as is.

        Raises:
            AuthError: The AI rejected the credentials; the task is parked as QUEUED
        """
        async with self._lock:
            task = self.current
            if task is None or task.status not in (UploadStatus.QUEUED, UploadStatus.FAILED):
                return task

            if task.content_hash is None:
                task.mark_hashing()
                loop = asyncio.get_running_loop()
                task.content_hash = await loop.run_in_executor(None, calculate_content_hash, task.data)
                if self.current is not task:
                    logger.info(f"Upload '{task.filename}' was abandoned while hashing")
                    return task

            # Replacements already passed the duplicate check
            if task.replace_target_id is None:
                existing = self.store.find_file_by_content_hash(task.content_hash)
                if existing is not None:
                    logger.info(f"Duplicate upload '{task.filename}' matches file {existing['id']}")
                    task.mark_duplicate(existing)
                    return task

            await self._extract(task)
            return task

    async def _extract(self, task: UploadTask):
        task.mark_extracting()
        titles = [t.get("name", "") for t in self.store.get(Collection.METADATA_TITLES)]
        try:
            extraction = await self.ai_service.extract_document(task.data, task.mime_type, titles)
        except AuthError as e:
            task.mark_paused(str(e))
            logger.warning(f"Upload queue paused on '{task.filename}': credentials rejected")
            raise
        except ServiceError as e:
            task.mark_failed(str(e))
            self.stats["failed"] += 1
            logger.error(f"Extraction failed for '{task.filename}': {e}")
            return

        # The task may have been skipped or abandoned while the AI call ran
        if self.current is not task or task.status is not UploadStatus.EXTRACTING:
            logger.info(f"Discarding extraction result for abandoned upload '{task.filename}'")
            return
        task.mark_review(extraction)

    async def resolve_duplicate(self, replace: bool) -> Optional[UploadTask]:
        """
        Decide on a detected duplicate.

        Args:
            replace: True to re-extract and overwrite the existing file, False to skip

        Returns:
            The task the decision applied to
        """
        task = self._require_current(UploadStatus.DUPLICATE)
        if not replace:
            task.mark_skipped()
            self.stats["skipped"] += 1
            logger.info(f"Skipped duplicate upload '{task.filename}'")
            self._advance()
            return task

        # Re-extract, then overwrite the matched file on commit
        task.replace_target_id = task.duplicate_of["id"]
        task.status = UploadStatus.QUEUED
        await self.process_current()
        return task

    def commit(
        self,
        uploaded_by: str,
        metadata: Optional[Dict[str, str]] = None,
        overrides: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        Write the reviewed extraction to the store and advance the queue.

        Creates a new file, or updates the duplicate's record when the user
        chose to replace it (its id and createdAt are kept).

        Args:
            uploaded_by: Active user name
            metadata: Reviewed metadata values (defaults to the extracted ones)
            overrides: Reviewed ocrText / summary / originalLanguage

        Returns:
            The stored file record
        """
        task = self._require_current(UploadStatus.REVIEW)
        extraction = dict(task.extraction or {})
        # Reviewed values win over the extracted ones
        for key in ("ocrText", "summary", "originalLanguage"):
            if overrides and overrides.get(key) is not None:
                extraction[key] = overrides[key]

        entity = None
        try:
            if task.replace_target_id is not None:
                record = build_file_record(task.filename, task.content_hash, extraction, uploaded_by, metadata)
                try:
                    entity = self.store.update(Collection.FILES, task.replace_target_id, record)
                    self.stats["replaced"] += 1
                except NotFoundError:
                    logger.warning(f"Replacement target {task.replace_target_id} is gone, creating a new file")
            if entity is None:
                record = build_file_record(
                    task.filename, task.content_hash, extraction, uploaded_by, metadata, created_at=now_iso()
                )
                entity = self.store.create(Collection.FILES, record)
                self.stats["committed"] += 1
        except PersistenceError as e:
            # Kept in memory; the disk failure is reported on the task
            entity = e.result
            task.warning = str(e)

        task.mark_committed(entity["id"])
        logger.info(f"Committed upload '{task.filename}' as file {entity['id']}")
        self._advance()
        return entity

    def skip_current(self) -> Optional[UploadTask]:
        """Drop the current task without writing anything."""
        task = self.current
        if task is None:
            return None
        task.mark_skipped()
        self.stats["skipped"] += 1
        self._advance()
        return task

    def abandon(self) -> int:
        """Clear the queue and the current task. Returns how many tasks were dropped."""
        dropped = len(self.queue) + (1 if self.current else 0)
        if self.current is not None:
            self.current.mark_skipped()
        self.queue.clear()
        self.current = None
        logger.info(f"Upload batch abandoned ({dropped} task(s) dropped)")
        return dropped

    def _require_current(self, status: UploadStatus) -> UploadTask:
        task = self.current
        if task is None:
            raise UploadStateError("No upload is in progress")
        if task.status is not status:
            raise UploadStateError(
                f"Upload '{task.filename}' is {task.status.value}, expected {status.value}"
            )
        return task

    def _advance(self):
        self.current = self.queue.popleft() if self.queue else None
