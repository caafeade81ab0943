"""
Unit tests for the container readiness poll.
"""
import pytest
from placeholder_page.ENGINES.container_engine import CommandFailedError
from placeholder_page.ENGINES.fake_engine import FakeEngine
from placeholder_page.MODELS.container_status import ContainerStatus
from placeholder_page.ORCHESTRATION.readiness import wait_until_running


def _started(engine):
    return engine.run("acme/page:latest", {8510: 80}, {"PORT": "8510"})


class TestWaitUntilRunning:
    """Tests for wait_until_running."""

    def test_running_immediately(self):
        engine = FakeEngine(statuses=[ContainerStatus.RUNNING])
        sleeps = []
        status = wait_until_running(engine, _started(engine), sleep=sleeps.append)
        assert status == ContainerStatus.RUNNING
        assert sleeps == []

    def test_polls_until_running(self):
        engine = FakeEngine(statuses=[
            ContainerStatus.CREATED,
            ContainerStatus.CREATED,
            ContainerStatus.RUNNING,
        ])
        sleeps = []
        status = wait_until_running(engine, _started(engine), sleep=sleeps.append)
        assert status == ContainerStatus.RUNNING
        assert len(sleeps) == 2
        assert engine.call_names.count("inspect_status") == 3

    def test_backoff_is_bounded(self):
        engine = FakeEngine(statuses=[ContainerStatus.RESTARTING])
        sleeps = []
        wait_until_running(
            engine, _started(engine), initial_wait=0.5, max_wait=1.0,
            max_attempts=6, sleep=sleeps.append,
        )
        assert sleeps[0] == pytest.approx(0.5)
        assert max(sleeps) <= 1.0
        assert sleeps == sorted(sleeps)

    def test_stops_on_exit(self):
        engine = FakeEngine(statuses=[ContainerStatus.CREATED, ContainerStatus.EXITED])
        sleeps = []
        status = wait_until_running(engine, _started(engine), sleep=sleeps.append)
        assert status == ContainerStatus.EXITED
        assert len(sleeps) == 1

    def test_gives_up_and_returns_last_status(self):
        engine = FakeEngine(statuses=[ContainerStatus.CREATED])
        status = wait_until_running(
            engine, _started(engine), max_attempts=4, sleep=lambda seconds: None
        )
        assert status == ContainerStatus.CREATED
        assert engine.call_names.count("inspect_status") == 4

    def test_engine_errors_propagate(self):
        engine = FakeEngine(fail_on={"inspect_status"})
        with pytest.raises(CommandFailedError):
            wait_until_running(engine, _started(engine), sleep=lambda seconds: None)


class TestContainerStatus:
    """Tests for ContainerStatus."""

    def test_from_engine(self):
        assert ContainerStatus.from_engine("running\n") == ContainerStatus.RUNNING
        assert ContainerStatus.from_engine("Exited") == ContainerStatus.EXITED
        assert ContainerStatus.from_engine("bogus") == ContainerStatus.UNKNOWN

    def test_terminal(self):
        assert ContainerStatus.EXITED.is_terminal
        assert ContainerStatus.DEAD.is_terminal
        assert not ContainerStatus.CREATED.is_terminal
