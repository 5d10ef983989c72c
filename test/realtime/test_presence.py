from datetime import datetime

from freezegun import freeze_time

from dmchat.realtime.presence import PresenceStatus, PresenceTracker
from dmchat.utils.datetime import UTC, now


def test_unknown_user_is_offline():
    tracker = PresenceTracker()
    assert tracker.get("alice") == PresenceStatus(username="alice")
    assert not tracker.is_online("alice")


@freeze_time("2024-05-01 12:00:00")
def test_online_then_offline():
    tracker = PresenceTracker()
    joined = now()
    tracker.set_online("alice", joined)
    assert tracker.is_online("alice")
    assert tracker.get("alice").last_seen == joined

    with freeze_time("2024-05-01 12:30:00"):
        left = now()
    tracker.set_offline("alice", left)
    status = tracker.get("alice")
    assert status.online is False
    assert status.last_seen == datetime(2024, 5, 1, 12, 30, tzinfo=UTC)
    assert status.last_seen >= joined
