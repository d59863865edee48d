"""Tests for the live status view."""

import logging
import threading

from dsctl.deployment.batch import Batch
from dsctl.deployment.live import build_table, run_live, state_markup
from dsctl.deployment.models import Operation, ServiceState


class FakeAdapter:
    """Flips a service to RUNNING once its unit ran; counts state queries."""

    def __init__(self, failing=()):
        self.failing = set(failing)
        self.started: set[str] = set()
        self.state_queries = 0
        self._lock = threading.Lock()

    def run(self, operation, service):
        with self._lock:
            self.started.add(service)
        return 1 if service in self.failing else 0

    def query_state(self, service):
        with self._lock:
            self.state_queries += 1
            return ServiceState.RUNNING if service in self.started else ServiceState.DOWN

    def query_states(self, services):
        return {service: self.query_state(service) for service in services}


class HeldAdapter(FakeAdapter):
    """Units for held services block until ``release`` is set.

    Records the first state query made after another unit finished while a
    held unit was still blocked.
    """

    def __init__(self, held):
        super().__init__()
        self.held = set(held)
        self.finished: set[str] = set()
        self.release = threading.Event()
        self.refreshed_mid_batch = threading.Event()
        self.mid_batch_query = None

    def run(self, operation, service):
        if service in self.held:
            self.release.wait(timeout=10)
        code = super().run(operation, service)
        with self._lock:
            self.finished.add(service)
        return code

    def query_states(self, services):
        with self._lock:
            mid_batch = bool(self.finished) and not self.release.is_set()
        if mid_batch and self.mid_batch_query is None:
            self.mid_batch_query = list(services)
            self.refreshed_mid_batch.set()
        return super().query_states(services)


class TestStateMarkup:
    def test_styles(self):
        assert state_markup(ServiceState.RUNNING) == "[success]● running[/success]"
        assert state_markup(ServiceState.STOPPED) == "[error]● stopped[/error]"
        assert state_markup(ServiceState.UNAVAILABLE) == "[warning]● missing[/warning]"

    def test_unknown_state(self):
        assert "…" in state_markup(None)


class TestRunLive:
    def test_before_and_after_states(self, console):
        adapter = FakeAdapter()

        results = run_live(
            adapter, Operation.UP, ["web", "db"], max_jobs=2, console=console, refresh_interval=0.01
        )

        assert set(results) == {"web", "db"}
        assert all(outcome.succeeded for outcome in results.values())

        output = console.file.getvalue()
        assert "Before" in output and "After" in output
        assert "● down" in output
        assert "● running" in output
        assert "✅ success" in output

    def test_final_refresh_queries_every_service(self, console):
        adapter = FakeAdapter()

        run_live(adapter, Operation.UP, ["a", "b", "c"], max_jobs=1, console=console,
                 refresh_interval=0.01)

        # one "before" pass and one final pass at minimum
        assert adapter.state_queries >= 6

    def test_failures_shown(self, console):
        adapter = FakeAdapter(failing={"db"})

        results = run_live(
            adapter, "reload", ["web", "db"], max_jobs=2, console=console, refresh_interval=0.01
        )

        assert results["db"].exit_code == 1
        assert "failed (exit 1)" in console.file.getvalue()

    def test_duplicate_targets_collapse(self, console):
        adapter = FakeAdapter()

        results = run_live(
            adapter, Operation.DOWN, ["web", "web"], max_jobs=2, console=console,
            refresh_interval=0.01,
        )

        assert list(results) == ["web"]

    def test_refreshes_every_service_while_a_unit_is_still_running(self, console):
        adapter = HeldAdapter(held={"slow"})
        results = {}

        def go():
            results.update(
                run_live(adapter, Operation.UP, ["fast", "slow"], max_jobs=2, console=console,
                         refresh_interval=0.01)
            )

        runner = threading.Thread(target=go)
        runner.start()
        try:
            assert adapter.refreshed_mid_batch.wait(timeout=5)
            assert runner.is_alive()
            assert adapter.mid_batch_query == ["fast", "slow"]
        finally:
            adapter.release.set()
            runner.join(timeout=5)

        assert not runner.is_alive()
        assert set(results) == {"fast", "slow"}

    def test_engine_warnings_held_back(self, console, caplog):
        class WarningAdapter(FakeAdapter):
            def run(self, operation, service):
                logging.getLogger("dsctl.engine").warning(f"{service}: pull failed")
                return 1

        with caplog.at_level(logging.INFO):
            results = run_live(
                WarningAdapter(), Operation.UPDATE, ["web"], max_jobs=1, console=console,
                refresh_interval=0.01,
            )

        assert results["web"].exit_code == 1
        assert not [r for r in caplog.records if r.name == "dsctl.engine"]
        assert "failed (exit 1)" in console.file.getvalue()


class TestBuildTable:
    def test_queued_rows_before_launch(self, console):
        batch = Batch(Operation.UP, ["web"], 1, lambda op, s: 0)

        table = build_table(Operation.UP, ["web"], {"web": ServiceState.DOWN}, {}, batch)
        console.print(table)

        output = console.file.getvalue()
        assert "queued" in output
        assert "0/1 done" in output
