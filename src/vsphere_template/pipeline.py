# SPDX-FileCopyrightText: 2026 Lasath Fernando <devel@lasath.org>
#
# SPDX-License-Identifier: GPL-3.0-or-later

"""Generic ordered pipeline for async step functions.

Create a :class:`Pipeline` instance at module level and use its
:meth:`~Pipeline.step` method as a decorator.  When the steps are
split across files, each file just imports the pipeline instance and
decorates its functions; there is no central list to maintain.
"""

from __future__ import annotations

import asyncio
import enum
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Generic, Protocol, TypeVar, overload

from .errors import Cancelled, PostProcessError, StepHalted

logger = logging.getLogger(__name__)


class StepAction(enum.Enum):
    CONTINUE = "continue"
    HALT = "halt"


class RunOutcome(enum.Enum):
    COMPLETED = "completed"
    HALTED = "halted"
    CANCELLED = "cancelled"


class _Context(Protocol):
    error: PostProcessError | None


_Ctx = TypeVar("_Ctx", bound=_Context)

_RunFn = Callable[[_Ctx], Awaitable["StepAction | None"]]
_CleanupFn = Callable[[_Ctx], Awaitable[None]]
PauseFn = Callable[[str, _Ctx], Awaitable[None]]


@dataclass
class Step(Generic[_Ctx]):
    """A registered step: its run function and optional cleanup hook.

    Attach a cleanup with the step's own decorator::

        @pipeline.step(order=100)
        async def reserve(ctx): ...

        @reserve.cleanup
        async def release(ctx): ...
    """

    name: str
    order: int
    run: _RunFn[_Ctx]
    cleanup_fn: _CleanupFn[_Ctx] | None = None

    def cleanup(self, fn: _CleanupFn[_Ctx]) -> _CleanupFn[_Ctx]:
        self.cleanup_fn = fn
        return fn

    async def __call__(self, ctx: _Ctx) -> StepAction:
        return await self.run(ctx) or StepAction.CONTINUE


class Pipeline(Generic[_Ctx]):
    """A registry of async step functions executed by ``order``.

    Ordering
    --------
    Every step declares a numeric *order* and steps run in ascending
    order.  Orders must be unique: each step consumes what its
    predecessor left on the context, so the sequence is fixed and
    written down at each step rather than implied by import order.

    Convention: use multiples of 100 so there's room to insert
    steps between existing ones.

    Running
    -------
    :meth:`run` stops at the first step that returns
    :attr:`StepAction.HALT` or raises a
    :class:`~vsphere_template.errors.PostProcessError`, and records the
    error on ``ctx.error``.  Cleanup hooks of every step that started
    (including the one that halted) then run in reverse order, on every
    exit path.

    Example::

        template = Pipeline[TemplateContext]("template")

        @template.step(order=100)
        async def choose_datacenter(ctx: TemplateContext) -> None: ...
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self._steps: dict[int, Step[_Ctx]] = {}

    @overload
    def step(self, fn: _RunFn[_Ctx]) -> Step[_Ctx]: ...
    @overload
    def step(self, *, order: int, name: str | None = None) -> Callable[[_RunFn[_Ctx]], Step[_Ctx]]: ...

    def step(
        self,
        fn: _RunFn[_Ctx] | None = None,
        *,
        order: int | None = None,
        name: str | None = None,
    ) -> Step[_Ctx] | Callable[[_RunFn[_Ctx]], Step[_Ctx]]:
        """Register *fn* as a step in this pipeline.

        Can be used bare (``@pipeline.step``, appended after the last
        step) or with arguments (``@pipeline.step(order=200)``).
        """
        def _register(f: _RunFn[_Ctx]) -> Step[_Ctx]:
            step_order = order
            if step_order is None:
                step_order = max(self._steps, default=0) + 100
            if step_order in self._steps:
                raise ValueError(
                    f"Pipeline {self.name!r}: order {step_order} already used by "
                    f"{self._steps[step_order].name!r}"
                )
            s = Step(name=name or f.__name__, order=step_order, run=f)
            self._steps[step_order] = s
            return s

        if fn is not None:
            # Called as @pipeline.step (no parentheses)
            return _register(fn)
        # Called as @pipeline.step(order=...)
        return _register

    @property
    def steps(self) -> tuple[Step[_Ctx], ...]:
        return tuple(self._steps[o] for o in sorted(self._steps))

    async def run(
        self,
        ctx: _Ctx,
        *,
        cancel: asyncio.Event | None = None,
        pause: PauseFn[_Ctx] | None = None,
    ) -> RunOutcome:
        """Execute every registered step in order.

        Args:
            ctx: Context shared by the steps of this run.
            cancel: Checked before each step; once set, no further
                step starts.  A step already running is not interrupted.
            pause: Awaited before each step with the step name, for
                interactive or debug execution.

        Returns:
            How the run ended.  On anything but ``COMPLETED``,
            ``ctx.error`` holds the reason.
        """
        started: list[Step[_Ctx]] = []
        outcome = RunOutcome.COMPLETED
        try:
            for s in self.steps:
                if pause is not None:
                    await pause(s.name, ctx)
                if cancel is not None and cancel.is_set():
                    logger.debug("%s: cancelled before %s", self.name, s.name)
                    ctx.error = Cancelled(f"Cancelled before step '{s.name}'")
                    outcome = RunOutcome.CANCELLED
                    break

                logger.debug("%s: running %s", self.name, s.name)
                started.append(s)
                try:
                    action = await s(ctx)
                except PostProcessError as e:
                    logger.debug("%s: %s failed: %s", self.name, s.name, e)
                    ctx.error = e
                    outcome = RunOutcome.HALTED
                    break

                if action is StepAction.HALT:
                    if ctx.error is None:
                        ctx.error = StepHalted(s.name)
                    outcome = RunOutcome.HALTED
                    break
        finally:
            await self._cleanup(started, ctx)
        return outcome

    async def _cleanup(self, started: list[Step[_Ctx]], ctx: _Ctx) -> None:
        for s in reversed(started):
            if s.cleanup_fn is None:
                continue
            try:
                await s.cleanup_fn(ctx)
            except Exception:
                logger.exception("%s: cleanup of %s failed", self.name, s.name)

    def __len__(self) -> int:
        return len(self._steps)

    def __repr__(self) -> str:
        names = ", ".join(f"{s.name}({s.order})" for s in self.steps)
        return f"Pipeline({self.name!r}, [{names}])"
