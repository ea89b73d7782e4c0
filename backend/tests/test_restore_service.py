"""
Tests for destructive restore from a snapshot.
"""
import json

import pytest

from docudigitize.api.exceptions import InvalidFormatError
from docudigitize.domain import Collection
from docudigitize.services.autosave_service import AutosaveService, SaveStatus
from docudigitize.services.restore_service import RestoreService


def _snapshot(**data):
    return json.dumps({"version": 1, "data": data}).encode("utf-8")


@pytest.fixture
def populated_store(store):
    store.replace_all(Collection.FILES, [{"id": "f0", "originalFilename": "old.png", "contentHash": "h0"}])
    store.replace_all(Collection.METADATA_TITLES, [{"id": "t0", "name": "Old"}])
    store.replace_all(Collection.METADATA_RAW_INPUTS, [{"id": "r0", "pastedText": "old"}])
    store.create(Collection.USERS, {"name": "Maria"})
    store.set_value("classificationGoal", "old goal")
    return store


def test_restore_replaces_every_backup_collection(populated_store):
    result = RestoreService(populated_store).restore(_snapshot(
        files=[{"id": "f1", "originalFilename": "new.png", "contentHash": "h1"}],
        metadataTitles=[{"id": "t1", "name": "Date"}],
        classificationGoal="new goal",
    ))

    assert [f["id"] for f in populated_store.get(Collection.FILES)] == ["f1"]
    assert populated_store.get(Collection.METADATA_TITLES) == [{"id": "t1", "name": "Date"}]
    assert populated_store.get(Collection.METADATA_RAW_INPUTS) == []
    assert populated_store.get_value("classificationGoal") == "new goal"
    assert result.restored[Collection.FILES] == 1
    assert result.warnings == []


def test_restored_file_defaults_are_filled(populated_store):
    RestoreService(populated_store).restore(_snapshot(
        files=[{"id": "f1", "originalFilename": "new.png", "contentHash": "h1"}],
    ))
    restored = populated_store.get(Collection.FILES)[0]
    assert restored["archiveStatus"] == "keep"
    assert restored["metadata"] == {}


def test_restore_keeps_users(populated_store):
    RestoreService(populated_store).restore(_snapshot())
    assert populated_store.get(Collection.USERS) == [{"name": "Maria"}]


def test_restore_accepts_legacy_snapshot_entries(populated_store):
    result = RestoreService(populated_store).restore(_snapshot(
        files=[{"id": "f1", "originalFilename": "new.png", "contentHash": "h1",
                "ocrText": None, "metadata": {"Date": None}}],
        metadataSettingsHistory=[{"metadataTitles": [{"id": "t1", "name": "Date"}]}],
    ))

    restored = populated_store.get(Collection.FILES)[0]
    assert restored["ocrText"] == ""
    assert restored["metadata"] == {"Date": ""}
    assert populated_store.get(Collection.METADATA_SETTINGS_HISTORY) == [
        {"metadataTitles": [{"id": "t1", "name": "Date"}]},
    ]
    assert result.restored[Collection.FILES] == 1


def test_invalid_snapshot_leaves_workspace_unchanged(populated_store):
    before = {c: populated_store.get(c) for c in Collection}

    with pytest.raises(InvalidFormatError):
        RestoreService(populated_store).restore(b'{"version": 2, "data": {}}')

    assert {c: populated_store.get(c) for c in Collection} == before
    assert populated_store.get_value("classificationGoal") == "old goal"


def test_result_dict_uses_collection_names(populated_store):
    body = RestoreService(populated_store).restore(_snapshot()).to_dict()
    assert body["restored"]["metadataTitles"] == 0
    assert body["message"] == "Workspace restored from backup."


async def test_restored_titles_become_autosave_baseline(populated_store):
    autosave = AutosaveService(populated_store, quiet_interval=0.05, saving_delay=0.01, saved_display=0.01)
    autosave.start()

    RestoreService(populated_store, autosave).restore(_snapshot(metadataTitles=[{"id": "t1", "name": "Date"}]))

    assert autosave.status is SaveStatus.IDLE
    assert not autosave.has_unsaved_changes
    autosave.stop()
