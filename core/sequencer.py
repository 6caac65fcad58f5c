# =============================================================================
# core/sequencer.py - Bootstrap Sequencer
# =============================================================================
# Runs a fixed, ordered list of startup steps exactly once.
#
# Each step declares which capabilities it needs (`requires`) and which it
# registers (`provides`). The ordering is checked twice:
#   1. When the sequencer is constructed - a step that needs something only
#      a later step provides is rejected before any I/O happens.
#   2. Right before each step runs - against what is actually registered.
#
# Any failure aborts the whole run. Steps after the failing one never
# execute, so a listener step at the end of the list can never start on a
# half-configured application.
# =============================================================================

from __future__ import annotations

import asyncio
import inspect
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Collection, Sequence

from core.registry import (
    CapabilityKey,
    CapabilityRegistry,
    MissingCapabilityError,
    StartupError,
    describe_key,
)

logger = logging.getLogger(__name__)


class StartupTimeoutError(StartupError):
    """Raised when a step with a timeout does not finish in time."""

    def __init__(self, step: str, timeout: float):
        super().__init__(
            f"Bootstrap step '{step}' did not finish within {timeout:g}s",
            step=step,
        )
        self.timeout = timeout


@dataclass
class BootstrapContext:
    """
    State shared by all bootstrap steps.

    `registry` is the only thing steps should write to. `options` carries
    startup arguments (config file path, settings overrides) for the
    steps that need them.
    """

    registry: CapabilityRegistry = field(default_factory=CapabilityRegistry)
    options: dict[str, Any] = field(default_factory=dict)


StepAction = Callable[[BootstrapContext], "Awaitable[None] | None"]


@dataclass(frozen=True)
class BootstrapStep:
    """A single named unit of startup work."""

    name: str
    action: StepAction
    requires: tuple[CapabilityKey, ...] = ()
    provides: tuple[CapabilityKey, ...] = ()
    timeout: float | None = None


class BootstrapSequencer:
    """
    Executes bootstrap steps in their declared order, once.

    Example:
        sequencer = BootstrapSequencer([
            BootstrapStep("configuration", load_config, provides=(Settings,)),
            BootstrapStep("cors", add_cors, requires=(Settings,), provides=(CorsPolicy,)),
        ])
        await sequencer.run(BootstrapContext())
    """

    def __init__(self, steps: Sequence[BootstrapStep]):
        self.steps = list(steps)
        self.completed: list[str] = []
        self._started = False
        self._validate_order()

    @property
    def step_names(self) -> list[str]:
        return [step.name for step in self.steps]

    def _validate_order(self) -> None:
        seen_names: set[str] = set()
        provided: set[CapabilityKey] = set()
        for step in self.steps:
            if step.name in seen_names:
                raise StartupError(f"Duplicate bootstrap step name '{step.name}'")
            seen_names.add(step.name)
            for key in step.requires:
                if key not in provided:
                    raise MissingCapabilityError(key, step=step.name)
            provided.update(step.provides)

    async def run(
        self,
        context: BootstrapContext,
        skip: Collection[str] = (),
    ) -> BootstrapContext:
        """
        Run every step (except those named in `skip`) in order.

        Raises:
            StartupError: on the first failing step; nothing after it runs
        """
        if self._started:
            raise StartupError("The bootstrap sequence has already been run")
        self._started = True

        registry = context.registry
        try:
            for step in self.steps:
                if step.name in skip:
                    logger.debug(f"Skipping bootstrap step {step.name}")
                    continue
                await self._run_step(step, context)
                self.completed.append(step.name)
        finally:
            registry.freeze()

        return context

    async def _run_step(self, step: BootstrapStep, context: BootstrapContext) -> None:
        registry = context.registry
        for key in step.requires:
            if key not in registry:
                raise MissingCapabilityError(key, step=step.name)

        logger.info(f"Bootstrap step: {step.name}")
        started = time.perf_counter()
        try:
            result = step.action(context)
            if inspect.isawaitable(result):
                if step.timeout is not None:
                    try:
                        await asyncio.wait_for(result, timeout=step.timeout)
                    except asyncio.TimeoutError:
                        raise StartupTimeoutError(step.name, step.timeout) from None
                else:
                    await result
        except StartupError as e:
            if e.step is None:
                e.step = step.name
            raise
        except Exception as e:
            raise StartupError(
                f"Bootstrap step '{step.name}' failed: {e}", step=step.name
            ) from e

        for key in step.provides:
            if key not in registry:
                raise StartupError(
                    f"Bootstrap step '{step.name}' did not register "
                    f"'{describe_key(key)}'",
                    step=step.name,
                )

        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.debug(f"Bootstrap step {step.name} finished in {elapsed_ms:.1f}ms")
