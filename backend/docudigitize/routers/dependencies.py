"""
Shared dependencies for routers.
Provides store and service initialization.

This module manages service lifecycle for the single local workspace.
"""
from typing import Optional

from ..services.database import StoreFactory, EntityStoreInterface
from ..services.ai_service import AIService
from ..services.autosave_service import AutosaveService
from ..services.file_service import FileService
from ..services.merge_service import MergeService
from ..services.metadata_service import MetadataService
from ..services.restore_service import RestoreService
from ..services.upload_queue import UploadReconciliationPipeline
from ..services.user_service import UserService
from ..domain.value_objects import Collection
from ..core.config import STORE_TYPE, DATA_DIR, DEFAULT_METADATA_TITLES
from ..core.logging_config import get_logger

logger = get_logger(__name__)

# Global services (initialized on startup)
store: Optional[EntityStoreInterface] = None
ai_service: Optional[AIService] = None
autosave_service: Optional[AutosaveService] = None
file_service: Optional[FileService] = None
metadata_service: Optional[MetadataService] = None
user_service: Optional[UserService] = None
merge_service: Optional[MergeService] = None
restore_service: Optional[RestoreService] = None
upload_pipeline: Optional[UploadReconciliationPipeline] = None


def initialize_store():
    """Create the entity store and seed the default metadata fields into a new workspace."""
    global store

    logger.info(f"Initializing entity store: {STORE_TYPE}")
    if STORE_TYPE.lower() == "json":
        logger.info("  → Store Type: JSON (one file per collection)")
        logger.debug(f"  → Data Path: {DATA_DIR}")
    elif STORE_TYPE.lower() == "memory":
        logger.info("  → Store Type: Memory (in-memory, non-persistent)")
    store = StoreFactory.create_and_initialize(STORE_TYPE, data_dir=DATA_DIR)

    # Only a workspace that never stored titles gets the defaults
    if not store.exists(Collection.METADATA_TITLES):
        store.replace_all(Collection.METADATA_TITLES, DEFAULT_METADATA_TITLES)
        logger.info(f"  → Seeded {len(DEFAULT_METADATA_TITLES)} default metadata titles")
    logger.info("  ✅ Entity store initialized")


def initialize_services(ai: Optional[AIService] = None):
    """
    Initialize all services once the store is ready.

    Must run inside the event loop: the autosave service binds its timers
    to the running loop.
    """
    global ai_service, autosave_service, file_service, metadata_service, user_service
    global merge_service, restore_service, upload_pipeline

    if store is None:
        raise RuntimeError("Store must be initialized before services")

    ai_service = ai or AIService()
    autosave_service = AutosaveService(store)
    autosave_service.start()
    file_service = FileService(store, ai_service)
    metadata_service = MetadataService(store, ai_service)
    user_service = UserService(store)
    merge_service = MergeService(store, autosave_service)
    restore_service = RestoreService(store, autosave_service)
    upload_pipeline = UploadReconciliationPipeline(store, ai_service)
    logger.info("  ✅ Services initialized")


def shutdown_services():
    """Stop autosave (warning about unsaved edits) and close the store."""
    if autosave_service is not None:
        autosave_service.stop()
    if store is not None:
        store.close()


def _require(service, name: str):
    if service is None:
        raise RuntimeError(f"{name} not initialized")
    return service


def get_store() -> EntityStoreInterface:
    return _require(store, "Store")


def get_ai_service() -> AIService:
    return _require(ai_service, "AI service")


def get_autosave_service() -> AutosaveService:
    return _require(autosave_service, "Autosave service")


def get_file_service() -> FileService:
    return _require(file_service, "File service")


def get_metadata_service() -> MetadataService:
    return _require(metadata_service, "Metadata service")


def get_user_service() -> UserService:
    return _require(user_service, "User service")


def get_merge_service() -> MergeService:
    return _require(merge_service, "Merge service")


def get_restore_service() -> RestoreService:
    return _require(restore_service, "Restore service")


def get_upload_pipeline() -> UploadReconciliationPipeline:
    return _require(upload_pipeline, "Upload pipeline")
