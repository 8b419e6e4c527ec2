# SPDX-FileCopyrightText: 2026 Lasath Fernando <devel@lasath.org>
#
# SPDX-License-Identifier: GPL-3.0-or-later

"""Turn a freshly built vSphere VM into a template.

This is the entry point the build pipeline calls once per artifact.
It gates the artifact, opens one vSphere session, runs the template
pipeline over a fresh :class:`~vsphere_template.context.TemplateContext`
and closes the session again, whatever happened in between.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any

from .artifact import DEFAULT_PRODUCERS, Artifact, ProducerRegistry, locate_vm, validate_artifact
from .config import PostProcessorConfig, parse_config
from .context import TemplateContext
from .pipeline import PauseFn, RunOutcome
from .reporter import Reporter
from .session import ClientFactory, SessionManager, SettlePolicy
from .steps import template_pipeline
from .vsphere_client import VSphereClient

logger = logging.getLogger(__name__)


@dataclass
class PostProcessResult:
    """What the post-processor hands back to the pipeline.

    ``keep`` asks the pipeline to retain the artifact and
    ``force_override`` tells it to honour that over user settings; both
    are always true on success.
    """

    artifact: Artifact
    keep: bool = True
    force_override: bool = True


class PostProcessor:
    """Converts the VM behind a build artifact into a template."""

    def __init__(
        self,
        config: PostProcessorConfig,
        *,
        progress: Reporter | None = None,
        client_factory: ClientFactory = VSphereClient,
        settle_policy: SettlePolicy | None = None,
        settle: bool = True,
        producers: ProducerRegistry = DEFAULT_PRODUCERS,
    ) -> None:
        """Initialize the post-processor.

        Args:
            config: Validated configuration.
            progress: Where to report progress; silent if None.
            client_factory: Builds the vSphere client for each run.
            settle_policy: Backoff used while waiting for the VM to settle.
            settle: Whether to wait for the VM to settle at all.
            producers: Upstream producers whose artifacts are accepted.
        """
        self._config = config
        self._progress = progress
        self._client_factory = client_factory
        self._settle_policy = settle_policy
        self._settle = settle
        self._producers = producers

    @classmethod
    def from_raw(cls, raw: dict[str, Any], **kwargs: Any) -> PostProcessor:
        """Build a post-processor from an unvalidated option mapping.

        Raises:
            ConfigurationError: Listing every invalid or missing option.
        """
        return cls(parse_config(raw), **kwargs)

    @property
    def config(self) -> PostProcessorConfig:
        return self._config

    def _session_manager(self) -> SessionManager:
        return SessionManager(
            self._config.endpoint,
            client_factory=self._client_factory,
            settle_policy=self._settle_policy,
            progress=self._progress,
        )

    async def post_process(
        self,
        artifact: Artifact,
        *,
        cancel: asyncio.Event | None = None,
        pause: PauseFn[TemplateContext] | None = None,
    ) -> PostProcessResult:
        """Convert *artifact*'s VM into a template.

        Args:
            artifact: Artifact from the upstream builder; flagged as a
                template on success.
            cancel: Set it to stop the run at the next step boundary.
            pause: Awaited before each step, for interactive runs.

        Returns:
            The artifact, with ``keep`` and ``force_override`` set.

        Raises:
            PostProcessError: The first error of the run.  Nothing the
                run already changed in vSphere is rolled back.
        """
        validate_artifact(artifact, self._producers)
        location = locate_vm(artifact, self._producers)

        manager = self._session_manager()
        settle_vm = location.name if self._settle else None
        async with manager.session(settle_vm=settle_vm) as client:
            ctx = TemplateContext(
                config=self._config,
                artifact=artifact,
                location=location,
                client=client,
                progress=self._progress,
            )
            outcome = await template_pipeline.run(ctx, cancel=cancel, pause=pause)

        if outcome is not RunOutcome.COMPLETED:
            if ctx.error is None:
                raise RuntimeError(f"Template pipeline {outcome.value} without recording an error")
            logger.debug("Template pipeline %s: %s", outcome.value, ctx.error)
            ctx.report_error(str(ctx.error))
            raise ctx.error

        return PostProcessResult(artifact=artifact)
