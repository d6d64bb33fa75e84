import pytest

from folio.logic.store import RecordStore
from folio.logic.validator import validate


def test_starts_empty():
    store = RecordStore()
    assert store.get() is None
    assert not store.has_record


def test_set_then_get_returns_new_record(record, minimal_record):
    store = RecordStore()
    store.set(record)
    assert store.get() is record
    store.set(minimal_record)
    assert store.get() is minimal_record


def test_listeners_see_complete_valid_record(record, minimal_record):
    store = RecordStore(record)
    seen = []

    def listener(new_record):
        # read back through the store while the notification is running
        current = store.get()
        seen.append((new_record is current, validate(current).ok))

    store.subscribe(listener)
    store.set(minimal_record)

    assert seen == [(True, True)]


def test_notification_is_synchronous_and_unsubscribe_works(record):
    store = RecordStore()
    calls = []
    unsubscribe = store.subscribe(calls.append)

    store.set(record)
    assert calls == [record]

    unsubscribe()
    unsubscribe()
    store.set(record)
    assert calls == [record]


def test_failing_listener_does_not_block_others(record):
    store = RecordStore()
    calls = []

    def broken(_):
        raise RuntimeError("boom")

    store.subscribe(broken)
    store.subscribe(calls.append)
    store.set(record)

    assert calls == [record]
    assert store.get() is record


def test_set_rejects_raw_dicts(full_candidate):
    store = RecordStore()
    with pytest.raises(TypeError):
        store.set(full_candidate)
    assert store.get() is None


def test_inbox_is_append_only():
    store = RecordStore()
    message, errors = store.add_message({
        "name": "Grace", "email": "grace@navy.mil", "message": "Hello!", "date": "2024-01-02T10:00:00+00:00",
    })
    assert errors == []
    assert store.messages == (message,)
    assert isinstance(store.messages, tuple)

    message, errors = store.add_message({"name": "", "email": "nope", "message": ""})
    assert message is None
    assert {e.path for e in errors} == {"name", "email", "message"}
    assert len(store.messages) == 1


def test_inbox_stamps_missing_date():
    store = RecordStore()
    message, _ = store.add_message({"name": "Grace", "email": "grace@navy.mil", "message": "Hi"})
    assert message.date
    assert message.date.endswith("+00:00")
