import threading

from fastapi.testclient import TestClient

from courtbook import main
from courtbook.core.constants import WINDOW_CLEANUP_JOB_ID
from courtbook.services.cleanup_service import SweepResult


def test_startup_sweep_runs_off_the_event_loop(monkeypatch):
    started, release, finished = threading.Event(), threading.Event(), threading.Event()

    def slow_sweep(session_factory):
        started.set()
        release.wait(5)
        finished.set()
        return SweepResult()

    monkeypatch.setattr(main, "run_window_cleanup_job", slow_sweep)
    try:
        with TestClient(main.app) as client:
            assert started.wait(5)
            # App serves requests while the first sweep is still running
            assert not finished.is_set()
            assert client.get("/health").json() == {"status": "ok"}
            assert main.app.state.scheduler.get_job(WINDOW_CLEANUP_JOB_ID) is not None
    finally:
        release.set()
    assert finished.wait(5)
