"""
Autosave Service - debounced history snapshots of the metadata field list.

Watches the entity store for changes to the metadata titles. Once the live
list has differed from the last saved baseline for a full quiet interval, one
MetadataSettingsSnapshot is appended to the settings history:

    IDLE -> PENDING -> (quiet interval) -> SAVING -> (saving delay) -> SAVED
         -> (display time) -> IDLE

Timers are asyncio TimerHandles on the running loop; every store write that
reaches this service must happen on that loop's thread.
"""
import asyncio
import json
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Union

from ..api.exceptions import PersistenceError
from ..core.config import AUTOSAVE_QUIET_INTERVAL, AUTOSAVE_SAVING_DELAY, AUTOSAVE_SAVED_DISPLAY
from ..domain.value_objects import Collection
from ..utils.document_utils import now_iso
from .database.base import EntityStoreInterface
from ..core.logging_config import get_logger

logger = get_logger(__name__)


class SaveStatus(Enum):
    """Autosave indicator state."""
    IDLE = "idle"
    PENDING = "pending"
    SAVING = "saving"
    SAVED = "saved"


class AutosaveService:
    """
    Debounce state machine over the metadata titles collection.

    The baseline is the JSON serialization of the last saved (or last
    restored/merged) title list; comparison is order-sensitive.
    """

    def __init__(
        self,
        store: EntityStoreInterface,
        quiet_interval: float = AUTOSAVE_QUIET_INTERVAL,
        saving_delay: float = AUTOSAVE_SAVING_DELAY,
        saved_display: float = AUTOSAVE_SAVED_DISPLAY,
    ):
        self.store = store
        self.quiet_interval = quiet_interval
        self.saving_delay = saving_delay
        self.saved_display = saved_display

        self.status = SaveStatus.IDLE
        self.last_saved_at: Optional[str] = None
        self._baseline = self._serialize(store.get(Collection.METADATA_TITLES))
        self._timer: Optional[asyncio.TimerHandle] = None  # at most one pending timer
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._unsubscribe: Optional[Callable[[], None]] = None

    @staticmethod
    def _serialize(titles: List[Dict[str, Any]]) -> str:
        return json.dumps(titles, ensure_ascii=False)

    @property
    def has_unsaved_changes(self) -> bool:
        return self.status is SaveStatus.PENDING

    def start(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        """Subscribe to store changes; the current titles become the baseline."""
        self._loop = loop or asyncio.get_running_loop()
        self._baseline = self._serialize(self.store.get(Collection.METADATA_TITLES))
        if self._unsubscribe is None:
            self._unsubscribe = self.store.subscribe(self._on_store_change)
        logger.info(
            f"Autosave started (quiet interval {self.quiet_interval}s, "
            f"saving {self.saving_delay}s, saved {self.saved_display}s)"
        )

    def stop(self):
        """Unsubscribe and cancel timers, warning if an edit was never saved."""
        warning = self.unload_warning()
        if warning:
            logger.warning(warning)
        self._cancel_timer()
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def unload_warning(self) -> Optional[str]:
        """Message for the teardown boundary while an edit is still pending."""
        if self.has_unsaved_changes:
            return "Metadata field changes have not been saved to the settings history yet."
        return None

    def reset_baseline(self, titles: List[Dict[str, Any]]):
        """Adopt ``titles`` as the saved state (merge/restore) and return to IDLE."""
        self._cancel_timer()
        self._baseline = self._serialize(titles)
        self.status = SaveStatus.IDLE
        logger.debug("Autosave baseline reset")

    def flush(self) -> bool:
        """Commit a pending change immediately. Returns True if a snapshot was written."""
        if not self.has_unsaved_changes:
            return False
        self._cancel_timer()
        return self._commit()

    def get_status(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "hasUnsavedChanges": self.has_unsaved_changes,
            "lastSavedAt": self.last_saved_at,
        }

    # State machine
    def _on_store_change(self, target: Union[Collection, str]):
        if target is Collection.METADATA_TITLES:
            self.titles_changed()

    def titles_changed(self):
        """Re-evaluate the live titles against the baseline."""
        current = self._serialize(self.store.get(Collection.METADATA_TITLES))
        if current == self._baseline:
            if self.status is SaveStatus.PENDING:
                self._cancel_timer()
                self.status = SaveStatus.IDLE
                logger.debug("Metadata titles back at baseline, autosave cancelled")
            return

        # Any new edit restarts the quiet interval
        self._cancel_timer()
        self.status = SaveStatus.PENDING
        self._schedule(self.quiet_interval, self._on_quiet_interval)

    def _on_quiet_interval(self):
        self._timer = None
        self._commit()

    def _commit(self) -> bool:
        titles = self.store.get(Collection.METADATA_TITLES)
        serialized = self._serialize(titles)
        if serialized == self._baseline:
            self.status = SaveStatus.IDLE
            return False

        self.status = SaveStatus.SAVING
        self._baseline = serialized
        # The snapshot id is assigned by the store
        saved_at = now_iso()
        try:
            self.store.create(
                Collection.METADATA_SETTINGS_HISTORY,
                {"savedAt": saved_at, "metadataTitles": titles}
            )
        except PersistenceError as e:
            logger.warning(f"Settings snapshot kept in memory only: {e}")
        self.last_saved_at = saved_at
        logger.info(f"Saved metadata settings snapshot ({len(titles)} titles)")

        # SAVING -> SAVED -> IDLE are display states only
        self._schedule(self.saving_delay, self._mark_saved)
        return True

    def _mark_saved(self):
        self.status = SaveStatus.SAVED
        self._schedule(self.saved_display, self._mark_idle)

    def _mark_idle(self):
        self._timer = None
        self.status = SaveStatus.IDLE

    # Timers
    def _schedule(self, delay: float, callback: Callable[[], None]):
        loop = self._loop or asyncio.get_running_loop()
        self._timer = loop.call_later(delay, callback)

    def _cancel_timer(self):
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
