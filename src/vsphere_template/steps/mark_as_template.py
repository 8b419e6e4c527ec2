# SPDX-FileCopyrightText: 2026 Lasath Fernando <devel@lasath.org>
#
# SPDX-License-Identifier: GPL-3.0-or-later

"""Template step: convert the VM into a template."""

from __future__ import annotations

from ..context import TemplateContext
from ..errors import TemplateConversionError
from ..vsphere_client import InventoryObject, VSphereError
from . import template_pipeline
from .helpers import find_runtime_vm, inventory_path


@template_pipeline.step(order=400)
async def mark_as_template(ctx: TemplateContext) -> None:
    """Turn the VM into a template and flag the artifact accordingly.

    ``reregister_vm`` picks the strategy:

    - unset / false: convert in place, then move the template into the
      configured folder if it isn't there already.
    - true: unregister the VM and register its ``.vmx`` again as a
      template in the destination folder, replacing any VM already
      registered there under the same name.
    """
    ctx.info("Marking as a template...")
    vm = await find_runtime_vm(ctx, TemplateConversionError)
    try:
        if ctx.config.reregister_vm.is_true():
            await _reregister(ctx, vm)
        else:
            await _convert_in_place(ctx, vm)
    except VSphereError as e:
        raise TemplateConversionError(f"Failed to mark VM as template: {e}") from e

    ctx.artifact.mark_as_template()


async def _convert_in_place(ctx: TemplateContext, vm: InventoryObject) -> None:
    await ctx.client.mark_as_template(vm)

    if not ctx.config.folder or ctx.folder is None:
        return
    parent = await ctx.client.parent_folder(vm)
    if parent.path != ctx.folder.path:
        ctx.vm = await ctx.client.move_into_folder(ctx.folder, vm)
        ctx.info(f"Moved template to {ctx.folder.path}")


async def _reregister(ctx: TemplateContext, vm: InventoryObject) -> None:
    folder = ctx.folder
    if folder is None:
        raise TemplateConversionError("No destination folder to register the template in")

    # Nothing is unregistered until the destination name is known to be free
    previous = await _previous_vm(ctx, folder, vm)
    vmx_path = await ctx.client.vmx_path(vm)
    host = await ctx.client.vm_host(vm)

    await ctx.client.unregister_vm(vm)
    if previous is not None:
        ctx.warning(f"Unregistering previous VM '{previous.path}'")
        await ctx.client.unregister_vm(previous)

    ctx.dim(f"Registering {vmx_path} as template in {folder.path}")
    ctx.vm = await ctx.client.register_vm(folder, vmx_path, vm.name, host, as_template=True)


async def _previous_vm(
    ctx: TemplateContext, folder: InventoryObject, vm: InventoryObject
) -> InventoryObject | None:
    """Return another VM holding *vm*'s name in *folder*, if any.

    Raises:
        TemplateConversionError: A non-VM object holds the name.
    """
    existing = await ctx.client.find_by_inventory_path(inventory_path(folder.path, vm.name))
    if existing is None or existing.path == vm.path:
        return None
    if not existing.is_vm:
        raise TemplateConversionError(f"an object named '{vm.name}' already exists in {folder.path}")
    return existing
