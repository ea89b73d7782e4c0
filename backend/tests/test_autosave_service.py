"""
Tests for the debounced metadata settings autosave.
"""
import asyncio
import logging

import pytest

from docudigitize.domain import Collection
from docudigitize.services.autosave_service import AutosaveService, SaveStatus


async def wait_for_status(service, status, timeout=2.0):
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while service.status is not status:
        if loop.time() > deadline:
            raise AssertionError(f"autosave stuck in {service.status}, expected {status}")
        await asyncio.sleep(0.005)


@pytest.fixture
async def autosave(store):
    store.replace_all(Collection.METADATA_TITLES, [{"id": "t1", "name": "Date"}])
    service = AutosaveService(store, quiet_interval=0.1, saving_delay=0.05, saved_display=0.05)
    service.start()
    yield service
    service.stop()


def history(store):
    return store.get(Collection.METADATA_SETTINGS_HISTORY)


async def test_edit_goes_through_every_state(store, autosave):
    store.create(Collection.METADATA_TITLES, {"name": "Author"})
    assert autosave.status is SaveStatus.PENDING
    assert autosave.has_unsaved_changes

    await wait_for_status(autosave, SaveStatus.SAVING)
    await wait_for_status(autosave, SaveStatus.SAVED)
    await wait_for_status(autosave, SaveStatus.IDLE)

    snapshots = history(store)
    assert len(snapshots) == 1
    assert [t["name"] for t in snapshots[0]["metadataTitles"]] == ["Date", "Author"]
    assert snapshots[0]["id"]
    assert snapshots[0]["savedAt"] == autosave.last_saved_at


async def test_burst_of_edits_produces_one_snapshot(store, autosave):
    for name in ("Author", "Location", "Recipient"):
        store.create(Collection.METADATA_TITLES, {"name": name})
        await asyncio.sleep(0.03)

    assert history(store) == []
    await wait_for_status(autosave, SaveStatus.IDLE)

    snapshots = history(store)
    assert len(snapshots) == 1
    assert len(snapshots[0]["metadataTitles"]) == 4


async def test_reverting_to_baseline_cancels_save(store, autosave):
    original = store.get(Collection.METADATA_TITLES)
    store.create(Collection.METADATA_TITLES, {"name": "Author"})
    assert autosave.status is SaveStatus.PENDING

    store.replace_all(Collection.METADATA_TITLES, original)
    assert autosave.status is SaveStatus.IDLE

    await asyncio.sleep(0.2)
    assert history(store) == []


async def test_reset_baseline_discards_pending_edit(store, autosave):
    store.create(Collection.METADATA_TITLES, {"name": "Author"})
    autosave.reset_baseline(store.get(Collection.METADATA_TITLES))

    assert autosave.status is SaveStatus.IDLE
    await asyncio.sleep(0.2)
    assert history(store) == []


async def test_flush_writes_immediately(store, autosave):
    assert autosave.flush() is False

    store.create(Collection.METADATA_TITLES, {"name": "Author"})
    assert autosave.flush() is True

    assert len(history(store)) == 1
    assert autosave.status is SaveStatus.SAVING
    await wait_for_status(autosave, SaveStatus.IDLE)
    assert len(history(store)) == 1


async def test_other_collections_are_ignored(store, autosave):
    store.create(Collection.FILES, {"originalFilename": "a.png", "contentHash": "h1"})
    store.set_value("classificationGoal", "goal")
    assert autosave.status is SaveStatus.IDLE


async def test_stop_warns_about_unsaved_edit(store, autosave, caplog):
    store.create(Collection.METADATA_TITLES, {"name": "Author"})
    assert autosave.unload_warning() is not None

    with caplog.at_level(logging.WARNING):
        autosave.stop()

    assert "have not been saved" in caplog.text
    await asyncio.sleep(0.2)
    assert history(store) == []


async def test_status_payload(store, autosave):
    store.create(Collection.METADATA_TITLES, {"name": "Author"})
    assert autosave.get_status() == {"status": "pending", "hasUnsavedChanges": True, "lastSavedAt": None}
