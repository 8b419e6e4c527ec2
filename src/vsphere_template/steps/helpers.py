# SPDX-FileCopyrightText: 2026 Lasath Fernando <devel@lasath.org>
#
# SPDX-License-Identifier: GPL-3.0-or-later

"""Inventory helpers shared by the template steps."""

from __future__ import annotations

from ..constants import VM_ROOT_FOLDER
from ..context import TemplateContext
from ..errors import NotFoundError, PostProcessError
from ..vsphere_client import InventoryObject, VSphereError


def inventory_path(*parts: str) -> str:
    """Join inventory path parts, dropping empty segments."""
    segments: list[str] = []
    for part in parts:
        segments.extend(s for s in part.split("/") if s)
    return "/".join(segments)


def vm_root_path(ctx: TemplateContext) -> str:
    """Inventory path of the chosen datacenter's VM folder."""
    if ctx.datacenter is None:
        raise NotFoundError("No datacenter chosen")
    return inventory_path(ctx.datacenter.path, VM_ROOT_FOLDER)


async def find_runtime_vm(
    ctx: TemplateContext,
    error_cls: type[PostProcessError] = NotFoundError,
) -> InventoryObject:
    """Return the artifact's VM, looking it up on first use.

    Raises:
        NotFoundError: Nothing is registered at the VM's path.
        error_cls: The lookup itself failed.
    """
    if ctx.vm is not None:
        return ctx.vm

    path = inventory_path(vm_root_path(ctx), ctx.location.folder, ctx.location.name)
    try:
        vm = await ctx.client.find_by_inventory_path(path)
    except VSphereError as e:
        raise error_cls(f"Error looking up VM at path {path}: {e}") from e
    if vm is None or not vm.is_vm:
        raise NotFoundError(f"VM at path {path} not found")
    ctx.vm = vm
    return vm
