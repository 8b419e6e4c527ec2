# SPDX-FileCopyrightText: 2026 Lasath Fernando <devel@lasath.org>
#
# SPDX-License-Identifier: GPL-3.0-or-later

"""Template step: make sure the destination folder exists."""

from __future__ import annotations

from ..context import TemplateContext
from ..errors import FolderCreationError
from ..vsphere_client import VSphereError
from . import template_pipeline
from .helpers import inventory_path, vm_root_path


@template_pipeline.step(order=200)
async def create_folder(ctx: TemplateContext) -> None:
    """Find or create ``ctx.config.folder`` under the datacenter's VM folder.

    Starting from the full path, walk up until an existing folder is
    found, then create the missing segments top-down.  Running it again
    once the folders exist creates nothing.

    With no folder configured the VM root itself is used and the VM
    stays where the builder put it.
    """
    base = vm_root_path(ctx)
    full_path = inventory_path(base, ctx.config.folder)
    if full_path != base:
        ctx.info("Creating or checking destination folders...")

    missing: list[str] = []
    path = full_path
    try:
        while True:
            found = await ctx.client.find_by_inventory_path(path)
            if found is not None:
                break
            if path == base:
                raise FolderCreationError(f"vSphere base path {base} not found")
            path, segment = path.rsplit("/", 1)
            missing.insert(0, segment)

        if not found.is_folder:
            raise FolderCreationError(f"{found.path} exists and is not a folder")

        folder = found
        for segment in missing:
            folder = await ctx.client.create_folder(folder, segment)
            ctx.info(f"Created folder {folder.path}")
    except VSphereError as e:
        raise FolderCreationError(f"Failed to create folder {full_path}: {e}") from e

    ctx.folder = folder
