# =============================================================================
# tests/test_sequencer.py - Bootstrap Sequencer Tests
# =============================================================================
# Unit tests for the sequencer to ensure:
# - Steps run once, in order
# - Ordering mistakes are rejected before anything runs
# - A failing step aborts the run and no later step executes
# - Timeouts and undeclared capabilities are startup errors
#
# Run with: pytest tests/test_sequencer.py -v
# =============================================================================

import asyncio

import pytest

from core.registry import MissingCapabilityError, StartupError
from core.sequencer import (
    BootstrapContext,
    BootstrapSequencer,
    BootstrapStep,
    StartupTimeoutError,
)


def register(key, value=None):
    """Step action that registers one capability."""

    def action(context):
        context.registry.register(key, value if value is not None else key)

    return action


def run(sequencer, context=None, **kwargs):
    context = context or BootstrapContext()
    return asyncio.run(sequencer.run(context, **kwargs))


class TestOrdering:
    """Static checks done when the sequencer is built."""

    def test_requires_must_be_provided_earlier(self):
        with pytest.raises(MissingCapabilityError) as exc_info:
            BootstrapSequencer(
                [
                    BootstrapStep("cors", register("cors"), requires=("settings",)),
                    BootstrapStep("configuration", register("settings"), provides=("settings",)),
                ]
            )

        assert exc_info.value.step == "cors"
        assert "settings" in str(exc_info.value)

    def test_duplicate_step_names(self):
        with pytest.raises(StartupError, match="Duplicate"):
            BootstrapSequencer(
                [
                    BootstrapStep("a", register("x")),
                    BootstrapStep("a", register("y")),
                ]
            )

    def test_step_names(self):
        sequencer = BootstrapSequencer(
            [BootstrapStep("first", register("a")), BootstrapStep("second", register("b"))]
        )

        assert sequencer.step_names == ["first", "second"]


class TestRun:
    """Runtime behaviour."""

    def test_runs_steps_in_order(self):
        calls = []

        def record(name):
            def action(context):
                calls.append(name)

            return action

        async def async_step(context):
            calls.append("async")

        sequencer = BootstrapSequencer(
            [
                BootstrapStep("one", record("one")),
                BootstrapStep("two", async_step),
                BootstrapStep("three", record("three")),
            ]
        )
        run(sequencer)

        assert calls == ["one", "async", "three"]
        assert sequencer.completed == ["one", "two", "three"]

    def test_registry_frozen_after_run(self):
        context = BootstrapContext()
        sequencer = BootstrapSequencer([BootstrapStep("a", register("a"), provides=("a",))])

        run(sequencer, context)

        assert context.registry.frozen
        assert context.registry.get("a") == "a"

    def test_second_run_is_rejected(self):
        sequencer = BootstrapSequencer([BootstrapStep("a", register("a"))])
        run(sequencer)

        with pytest.raises(StartupError, match="already been run"):
            run(sequencer)

    def test_failure_aborts_later_steps(self):
        ran = []

        def broken(context):
            raise RuntimeError("database unreachable")

        sequencer = BootstrapSequencer(
            [
                BootstrapStep("persistence", broken),
                BootstrapStep("listener", lambda context: ran.append("listener")),
            ]
        )

        with pytest.raises(StartupError) as exc_info:
            run(sequencer)

        assert exc_info.value.step == "persistence"
        assert isinstance(exc_info.value.__cause__, RuntimeError)
        assert "database unreachable" in str(exc_info.value)
        assert ran == []
        assert sequencer.completed == []

    def test_registry_frozen_after_failure(self):
        context = BootstrapContext()

        def broken(context):
            raise RuntimeError("boom")

        with pytest.raises(StartupError):
            run(BootstrapSequencer([BootstrapStep("broken", broken)]), context)

        assert context.registry.frozen

    def test_startup_error_keeps_its_type(self):
        def missing(context):
            context.registry.get("settings")

        with pytest.raises(MissingCapabilityError) as exc_info:
            run(BootstrapSequencer([BootstrapStep("cors", missing)]))

        assert exc_info.value.step == "cors"

    def test_undeclared_provides(self):
        sequencer = BootstrapSequencer(
            [BootstrapStep("caching", lambda context: None, provides=("cache",))]
        )

        with pytest.raises(StartupError, match="did not register 'cache'"):
            run(sequencer)

    def test_skip(self):
        sequencer = BootstrapSequencer(
            [BootstrapStep("a", register("a")), BootstrapStep("listener", register("served"))]
        )
        context = run(sequencer, skip=("listener",))

        assert sequencer.completed == ["a"]
        assert "served" not in context.registry

    def test_options_reach_steps(self):
        seen = {}

        def configure(context):
            seen.update(context.options)

        run(
            BootstrapSequencer([BootstrapStep("configuration", configure)]),
            BootstrapContext(options={"config_file": "appsettings.json"}),
        )

        assert seen == {"config_file": "appsettings.json"}


class TestTimeout:
    """Steps with a timeout."""

    def test_step_exceeding_timeout(self):
        async def slow(context):
            await asyncio.sleep(1)

        sequencer = BootstrapSequencer([BootstrapStep("seeding", slow, timeout=0.01)])

        with pytest.raises(StartupTimeoutError) as exc_info:
            run(sequencer)

        assert exc_info.value.step == "seeding"
        assert exc_info.value.timeout == 0.01

    def test_step_within_timeout(self):
        async def quick(context):
            await asyncio.sleep(0)
            context.registry.register("seeded", True)

        context = run(
            BootstrapSequencer([BootstrapStep("seeding", quick, provides=("seeded",), timeout=5)])
        )

        assert context.registry.get("seeded") is True
