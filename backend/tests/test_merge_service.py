"""
Tests for additive snapshot merging.
"""
import json

import pytest

from docudigitize.api.exceptions import InvalidFormatError, PersistenceError
from docudigitize.domain import Collection
from docudigitize.services.autosave_service import AutosaveService, SaveStatus
from docudigitize.services.merge_service import MergeService
from docudigitize.services.snapshot_codec import encode_snapshot, serialize_snapshot


def _snapshot(**data):
    return json.dumps({"version": 1, "createdAt": "2024-05-01T10:00:00.000Z", "data": data}).encode("utf-8")


def _file(file_id, content_hash, **extra):
    record = {"id": file_id, "originalFilename": f"{file_id}.png", "contentHash": content_hash}
    record.update(extra)
    return record


@pytest.fixture
def merge_service(store):
    return MergeService(store)


def test_titles_are_merged_case_insensitively(store, merge_service):
    store.replace_all(Collection.METADATA_TITLES, [{"id": "t1", "name": "Date"}, {"id": "t2", "name": "Author"}])

    result = merge_service.merge(_snapshot(metadataTitles=[
        {"id": "x1", "name": "date"},
        {"id": "x2", "name": "Location"},
    ]))

    assert [t["name"] for t in store.get(Collection.METADATA_TITLES)] == ["Date", "Author", "Location"]
    assert result.added[Collection.METADATA_TITLES] == 1


def test_files_matching_a_live_hash_are_skipped(store, merge_service):
    store.replace_all(Collection.FILES, [_file("f1", "hash-a")])

    result = merge_service.merge(_snapshot(files=[
        _file("other-id", "hash-a"),
        _file("f2", "hash-b"),
        _file("f3", "hash-b"),
    ]))

    files = store.get(Collection.FILES)
    assert [f["id"] for f in files] == ["f1", "f2", "f3"]
    assert result.added[Collection.FILES] == 2


def test_same_hash_copies_within_snapshot_are_all_imported(store, merge_service):
    snapshot = _snapshot(files=[_file("f1", "hash-a"), _file("f1", "hash-a")])

    assert merge_service.merge(snapshot).added[Collection.FILES] == 2
    files = store.get(Collection.FILES)
    assert [f["contentHash"] for f in files] == ["hash-a", "hash-a"]
    assert files[0]["id"] == "f1" and files[1]["id"] != "f1"

    assert merge_service.merge(snapshot).nothing_to_merge


def test_excluded_files_in_snapshot_are_still_imported(store, merge_service):
    merge_service.merge(_snapshot(files=[_file("f1", "hash-a", archiveStatus="exclude")]))
    assert store.get(Collection.FILES)[0]["archiveStatus"] == "exclude"


def test_colliding_file_id_is_rekeyed(store, merge_service):
    store.replace_all(Collection.FILES, [_file("f1", "hash-a")])

    merge_service.merge(_snapshot(files=[_file("f1", "hash-b")]))

    files = store.get(Collection.FILES)
    assert len(files) == 2
    assert files[1]["contentHash"] == "hash-b"
    assert files[1]["id"] != "f1"


def test_merge_is_idempotent(store, merge_service):
    raw = _snapshot(
        files=[_file("f1", "hash-a")],
        metadataTitles=[{"id": "t1", "name": "Date"}],
        metadataRawInputs=[{"id": "r1", "pastedText": "Date: 1932", "createdAt": "2024-01-01T00:00:00.000Z"}],
        metadataSettingsHistory=[{"savedAt": "2024-01-01T00:00:00.000Z", "metadataTitles": []}],
    )

    first = merge_service.merge(raw)
    state = {c: store.get(c) for c in Collection}
    second = merge_service.merge(raw)

    assert first.total_added == 4
    assert second.nothing_to_merge
    assert second.summary() == "Merge complete. No new data was found to add."
    assert {c: store.get(c) for c in Collection} == state


def test_workspace_is_superset_of_snapshot_after_merge(store, merge_service):
    store.replace_all(Collection.FILES, [_file("f0", "hash-0")])
    store.replace_all(Collection.METADATA_RAW_INPUTS, [{"id": "r0", "pastedText": "old"}])
    before = {c: store.get(c) for c in Collection}

    merge_service.merge(_snapshot(
        files=[_file("f1", "hash-1")],
        metadataRawInputs=[{"id": "r0", "pastedText": "changed"}, {"id": "r1", "pastedText": "new"}],
        categoryRawInputs=[{"id": "c1", "pastedText": "legacy"}],
    ))

    for collection, entities in before.items():
        after = store.get(collection)
        assert after[:len(entities)] == entities
    assert store.get(Collection.METADATA_RAW_INPUTS)[0]["pastedText"] == "old"
    assert [r["id"] for r in store.get(Collection.METADATA_RAW_INPUTS)] == ["r0", "r1"]
    assert store.get(Collection.CATEGORY_RAW_INPUTS) == [{"id": "c1", "pastedText": "legacy"}]


def test_settings_snapshots_without_ids_match_by_content(store, merge_service):
    entry = {"savedAt": "2024-01-01T00:00:00.000Z", "metadataTitles": [{"id": "t1", "name": "Date"}]}
    store.replace_all(Collection.METADATA_SETTINGS_HISTORY, [dict(entry)])

    result = merge_service.merge(_snapshot(metadataSettingsHistory=[
        entry,
        {"savedAt": "2024-02-01T00:00:00.000Z", "metadataTitles": []},
    ]))

    assert result.added[Collection.METADATA_SETTINGS_HISTORY] == 1
    assert len(store.get(Collection.METADATA_SETTINGS_HISTORY)) == 2


def test_invalid_snapshot_leaves_workspace_unchanged(store, merge_service):
    store.replace_all(Collection.METADATA_TITLES, [{"id": "t1", "name": "Date"}])
    before = {c: store.get(c) for c in Collection}

    with pytest.raises(InvalidFormatError):
        merge_service.merge(_snapshot(
            metadataTitles=[{"id": "t2", "name": "Author"}],
            files=[{"id": "broken"}],
        ))

    assert {c: store.get(c) for c in Collection} == before


def test_users_and_classification_goal_are_untouched(store, merge_service):
    store.create(Collection.USERS, {"name": "Maria"})
    store.set_value("classificationGoal", "mine")

    merge_service.merge(_snapshot(classificationGoal="theirs"))

    assert store.get(Collection.USERS) == [{"name": "Maria"}]
    assert store.get_value("classificationGoal") == "mine"


def test_summary_lists_added_counts(merge_service):
    result = merge_service.merge(_snapshot(
        files=[_file("f1", "h1"), _file("f2", "h2")],
        metadataTitles=[{"id": "t1", "name": "Date"}],
    ))

    assert result.summary() == (
        "Merge complete! Added:\n"
        "- 2 new files\n"
        "- 1 new metadata titles\n"
        "- 0 new metadata generation history entries"
    )
    assert result.to_dict()["added"]["digitizedFiles"] == 2


def test_merging_own_backup_adds_nothing(store, merge_service):
    store.replace_all(Collection.FILES, [_file("f1", "h1")])
    store.replace_all(Collection.METADATA_TITLES, [{"id": "t1", "name": "Date"}])

    result = merge_service.merge(serialize_snapshot(encode_snapshot(store)))
    assert result.nothing_to_merge


def test_persistence_failure_is_reported_as_warning(store, merge_service, monkeypatch):
    def failing_replace_all(collection, entities):
        raise PersistenceError("could not write digitizedFiles to disk", result=entities)

    monkeypatch.setattr(store, "replace_all", failing_replace_all)
    result = merge_service.merge(_snapshot(files=[_file("f1", "h1")]))

    assert result.added[Collection.FILES] == 1
    assert result.warnings == ["could not write digitizedFiles to disk"]


async def test_merged_titles_do_not_trigger_autosave(store):
    autosave = AutosaveService(store, quiet_interval=0.05, saving_delay=0.01, saved_display=0.01)
    autosave.start()
    service = MergeService(store, autosave)

    service.merge(_snapshot(metadataTitles=[{"id": "t1", "name": "Date"}]))

    assert autosave.status is SaveStatus.IDLE
    assert store.get(Collection.METADATA_SETTINGS_HISTORY) == []
    autosave.stop()
