# SPDX-FileCopyrightText: 2026 Lasath Fernando <devel@lasath.org>
#
# SPDX-License-Identifier: GPL-3.0-or-later

"""Template step: snapshot the VM before it's converted."""

from __future__ import annotations

from ..context import TemplateContext
from ..errors import SnapshotError
from ..vsphere_client import VSphereError
from . import template_pipeline
from .helpers import find_runtime_vm


@template_pipeline.step(order=300)
async def create_snapshot(ctx: TemplateContext) -> None:
    """Take a powered-off snapshot if ``snapshot_enable`` is set."""
    if not ctx.config.snapshot_enable:
        return

    ctx.info("Creating snapshot...")
    vm = await find_runtime_vm(ctx, SnapshotError)
    try:
        await ctx.client.create_snapshot(
            vm,
            ctx.config.snapshot_name,
            ctx.config.snapshot_description,
            memory=False,
            quiesce=False,
        )
    except VSphereError as e:
        raise SnapshotError(f"Failed to create snapshot: {e}") from e
    ctx.dim(f"Created snapshot '{ctx.config.snapshot_name}' of {vm.name}")
