"""Tests for the JSON notification store."""

import json
import logging
from dataclasses import replace
from datetime import datetime, timezone

import pytest

from voicemate.adapters.json_store import JsonNotificationStore
from voicemate.core.notifications import Repeat, ScheduledNotification
from voicemate.ports.notification_store import StoreError


@pytest.fixture
def path(tmp_path):
    return tmp_path / "data" / "notifications.json"


@pytest.fixture
def notification():
    return ScheduledNotification(
        id="schedule-3",
        title="Meditate",
        scheduled_time=datetime(2025, 1, 16, 7, 30, tzinfo=timezone.utc),
        repeat=Repeat.DAILY,
        schedule_id=3,
    )


class TestJsonNotificationStore:
    def test_missing_file_is_empty(self, path):
        assert JsonNotificationStore(path).load() == []

    def test_save_and_load(self, path, notification):
        store = JsonNotificationStore(path)
        store.save([notification])

        assert store.load() == [notification]
        assert json.loads(path.read_text())[0]["repeat"] == "daily"

    def test_save_replaces_contents(self, path, notification):
        store = JsonNotificationStore(path)
        store.save([notification])
        store.save([])

        assert store.load() == []
        assert not path.with_suffix(".json.tmp").exists()

    def test_invalid_json_raises(self, path):
        path.parent.mkdir(parents=True)
        path.write_text("{not json")

        with pytest.raises(StoreError):
            JsonNotificationStore(path).load()

    def test_undecodable_bytes_raise_store_error(self, path):
        path.parent.mkdir(parents=True)
        path.write_bytes(b"\xff\xfe\x00garbage")

        with pytest.raises(StoreError):
            JsonNotificationStore(path).load()

    def test_update_keeps_other_entries(self, path, notification):
        store = JsonNotificationStore(path)
        other = ScheduledNotification(
            id="dentist", title="Dentist", scheduled_time=datetime(2025, 1, 16, 11, 0, tzinfo=timezone.utc)
        )
        store.save([notification])

        store.update([other])
        assert {n.id for n in store.load()} == {"schedule-3", "dentist"}

        store.update([], ["schedule-3"])
        assert store.load() == [other]

    def test_update_rereads_file_written_by_another_store(self, path, notification):
        first = JsonNotificationStore(path)
        second = JsonNotificationStore(path)
        first.save([notification])

        second.update([], ["schedule-3"])
        first.update([replace(notification, id="schedule-4")])

        assert [n.id for n in first.load()] == ["schedule-4"]

    def test_non_list_raises(self, path):
        path.parent.mkdir(parents=True)
        path.write_text('{"id": "a"}')

        with pytest.raises(StoreError, match="Expected a list"):
            JsonNotificationStore(path).load()

    def test_skips_invalid_items(self, path, notification, caplog):
        path.parent.mkdir(parents=True)
        path.write_text(json.dumps([notification.to_dict(), {"id": "broken", "title": ""}]))

        with caplog.at_level(logging.WARNING):
            loaded = JsonNotificationStore(path).load()

        assert [n.id for n in loaded] == ["schedule-3"]
        assert "Skipping invalid stored notification" in caplog.text

    def test_write_failure_raises(self, tmp_path, notification):
        blocker = tmp_path / "blocker"
        blocker.write_text("")

        with pytest.raises(StoreError):
            JsonNotificationStore(blocker / "notifications.json").save([notification])

    def test_expands_user(self):
        assert "~" not in str(JsonNotificationStore("~/n.json").path)
