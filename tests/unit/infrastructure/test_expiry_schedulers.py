"""
Unit tests for the threading and Celery expiry schedulers.
"""

import threading
from datetime import timedelta
from unittest.mock import Mock

import pytest

from filevault.domain.file_storage.entities import utcnow
from filevault.infrastructure.celery_expiry_scheduler import (
    EXPIRE_FILE_TASK,
    CeleryExpiryScheduler,
)
from filevault.infrastructure.redis_repository import RedisRepository
from filevault.infrastructure.threading_expiry_scheduler import ThreadingExpiryScheduler


class TestThreadingExpiryScheduler:
    @pytest.fixture
    def fired(self):
        return []

    @pytest.fixture
    def scheduler(self, fired):
        scheduler = ThreadingExpiryScheduler(on_expire=fired.append)
        yield scheduler
        scheduler.shutdown()

    def test_register_tracks_pending(self, scheduler):
        scheduler.register("a", utcnow() + timedelta(hours=1))
        assert scheduler.pending() == ["a"]
        assert scheduler.is_pending("a")

    def test_cancel_prevents_fire(self, scheduler, fired):
        scheduler.register("a", utcnow() + timedelta(hours=1))

        assert scheduler.cancel("a") is True
        assert scheduler.cancel("a") is False
        assert scheduler.pending() == []
        assert fired == []

    def test_cancel_unknown_is_noop(self, scheduler):
        assert scheduler.cancel("never-registered") is False

    def test_reregister_replaces_timer(self, scheduler):
        scheduler.register("a", utcnow() + timedelta(hours=1))
        first = scheduler._timers["a"]
        scheduler.register("a", utcnow() + timedelta(hours=2))

        assert scheduler._timers["a"] is not first
        assert not first.is_alive() or first.finished.is_set()
        assert scheduler.pending() == ["a"]

    def test_fire_deregisters_and_calls_back(self, scheduler, fired):
        scheduler.register("a", utcnow() + timedelta(hours=1))
        timer = scheduler._timers["a"]
        timer.cancel()

        scheduler._fire("a", timer)

        assert fired == ["a"]
        assert scheduler.pending() == []

    def test_stale_timer_does_not_fire(self, scheduler, fired):
        scheduler.register("a", utcnow() + timedelta(hours=1))
        stale = scheduler._timers["a"]
        scheduler.register("a", utcnow() + timedelta(hours=2))

        scheduler._fire("a", stale)

        assert fired == []
        assert scheduler.pending() == ["a"]

    def test_fire_after_cancel_is_noop(self, scheduler, fired):
        scheduler.register("a", utcnow() + timedelta(hours=1))
        timer = scheduler._timers["a"]
        scheduler.cancel("a")

        scheduler._fire("a", timer)

        assert fired == []

    def test_callback_errors_are_contained(self):
        scheduler = ThreadingExpiryScheduler(on_expire=Mock(side_effect=RuntimeError("boom")))
        scheduler.register("a", utcnow() + timedelta(hours=1))
        timer = scheduler._timers["a"]
        timer.cancel()

        scheduler._fire("a", timer)

        assert scheduler.pending() == []

    def test_cancel_and_fire_race_runs_callback_at_most_once(self):
        for _ in range(50):
            calls = []
            scheduler = ThreadingExpiryScheduler(on_expire=calls.append)
            scheduler.register("a", utcnow() + timedelta(hours=1))
            timer = scheduler._timers["a"]
            timer.cancel()
            cancelled = []

            start = threading.Barrier(2)

            def fire():
                start.wait()
                scheduler._fire("a", timer)

            def cancel():
                start.wait()
                cancelled.append(scheduler.cancel("a"))

            threads = [threading.Thread(target=fire), threading.Thread(target=cancel)]
            for t in threads:
                t.start()
            for t in threads:
                t.join()

            assert len(calls) + int(cancelled[0]) == 1

    def test_shutdown_cancels_everything(self, scheduler):
        for file_id in ("a", "b"):
            scheduler.register(file_id, utcnow() + timedelta(hours=1))
        timers = list(scheduler._timers.values())

        scheduler.shutdown()

        assert scheduler.pending() == []
        for timer in timers:
            timer.join(timeout=1)
            assert not timer.is_alive()


class TestCeleryExpiryScheduler:
    @pytest.fixture
    def celery_app(self):
        app = Mock()
        app.send_task.return_value = Mock(id="task-2")
        return app

    @pytest.fixture
    def registry(self):
        return Mock(spec=RedisRepository)

    @pytest.fixture
    def scheduler(self, celery_app, registry):
        return CeleryExpiryScheduler(celery_app, registry, grace_seconds=60)

    def test_register_sends_eta_task(self, scheduler, celery_app, registry):
        expires_at = utcnow() + timedelta(hours=1)
        registry.get_json.return_value = None

        scheduler.register("f1", expires_at)

        celery_app.send_task.assert_called_once_with(
            EXPIRE_FILE_TASK, args=["f1"], eta=expires_at, queue="expiry_queue"
        )
        key, data = registry.set_json.call_args[0]
        assert key == "expiry:f1"
        assert data == {"task_id": "task-2", "expires_at": expires_at.isoformat()}
        celery_app.control.revoke.assert_not_called()

    def test_register_revokes_previous_task(self, scheduler, celery_app, registry):
        registry.get_json.return_value = {"task_id": "task-1"}

        scheduler.register("f1", utcnow() + timedelta(hours=1))

        celery_app.control.revoke.assert_called_once_with("task-1")

    def test_cancel_revokes(self, scheduler, celery_app, registry):
        registry.pop_json.return_value = {"task_id": "task-1", "expires_at": "x"}

        assert scheduler.cancel("f1") is True
        registry.pop_json.assert_called_once_with("expiry:f1")
        celery_app.control.revoke.assert_called_once_with("task-1")

    def test_cancel_unknown(self, scheduler, celery_app, registry):
        registry.pop_json.return_value = None

        assert scheduler.cancel("f1") is False
        celery_app.control.revoke.assert_not_called()

    def test_claim_by_owner(self, scheduler, registry):
        registry.pop_json.return_value = {"task_id": "task-1", "expires_at": "x"}
        assert scheduler.claim("f1", "task-1") is True

    def test_claim_after_cancel(self, scheduler, registry):
        registry.pop_json.return_value = None
        assert scheduler.claim("f1", "task-1") is False

    def test_claim_by_replaced_task_hands_entry_back(self, scheduler, registry):
        expires_at = utcnow() + timedelta(hours=1)
        entry = {"task_id": "task-2", "expires_at": expires_at.isoformat()}
        registry.pop_json.return_value = entry

        assert scheduler.claim("f1", "task-1") is False

        args, kwargs = registry.set_json.call_args
        assert args == ("expiry:f1", entry)
        assert kwargs["only_if_absent"] is True

    def test_pending_lists_registry(self, scheduler, registry):
        registry.get_keys_by_pattern.return_value = ["expiry:a", "expiry:b"]
        assert scheduler.pending() == ["a", "b"]
