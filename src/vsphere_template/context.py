# SPDX-FileCopyrightText: 2026 Lasath Fernando <devel@lasath.org>
#
# SPDX-License-Identifier: GPL-3.0-or-later

"""Context dataclass passed through the template pipeline steps."""

from __future__ import annotations

from dataclasses import dataclass

from .artifact import Artifact, VMLocation
from .config import PostProcessorConfig
from .errors import PostProcessError
from .reporter import Reporter
from .vsphere_client import InventoryObject, VSphereClient


@dataclass
class TemplateContext:
    """Context passed through the template pipeline.

    ChooseDatacenter fills ``datacenter``, CreateFolder fills
    ``folder``, and whichever step first needs the VM caches it in
    ``vm``.  The runner sets ``error`` when a step fails; nothing runs
    after that.

    One context belongs to exactly one run and is never reused.
    """

    config: PostProcessorConfig
    artifact: Artifact
    location: VMLocation
    client: VSphereClient
    progress: Reporter | None = None

    # Built up by pipeline steps
    datacenter: InventoryObject | None = None
    folder: InventoryObject | None = None
    vm: InventoryObject | None = None
    error: PostProcessError | None = None

    def info(self, msg: str) -> None:
        if self.progress:
            self.progress.info(msg)

    def dim(self, msg: str) -> None:
        if self.progress:
            self.progress.dim(msg)

    def warning(self, msg: str) -> None:
        if self.progress:
            self.progress.warning(msg)

    def report_error(self, msg: str) -> None:
        if self.progress:
            self.progress.error(msg)
