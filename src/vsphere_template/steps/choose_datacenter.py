# SPDX-FileCopyrightText: 2026 Lasath Fernando <devel@lasath.org>
#
# SPDX-License-Identifier: GPL-3.0-or-later

"""Template step: resolve the datacenter everything else happens in."""

from __future__ import annotations

from ..context import TemplateContext
from ..errors import AmbiguousDatacenter, NotFoundError
from ..vsphere_client import InventoryObject, VSphereClient, VSphereError
from . import template_pipeline


@template_pipeline.step(order=100)
async def choose_datacenter(ctx: TemplateContext) -> None:
    """Find the configured datacenter, or the only one if none is set."""
    name = ctx.config.datacenter
    try:
        if name:
            dc = await _find_datacenter(ctx.client, name)
            if dc is None:
                raise NotFoundError(f"datacenter '{name}' not found")
        else:
            dc = await _default_datacenter(ctx.client)
    except VSphereError as e:
        raise NotFoundError(f"Error looking up datacenter: {e}") from e

    ctx.dim(f"Using datacenter: {dc.path}")
    ctx.datacenter = dc


async def _find_datacenter(client: VSphereClient, name: str) -> InventoryObject | None:
    """Resolve *name* as an inventory path first, then by plain name."""
    obj = await client.find_by_inventory_path(name.strip("/"))
    if obj is not None and obj.kind == "Datacenter":
        return obj

    matches = [dc for dc in await client.list_datacenters() if dc.name == name]
    if len(matches) > 1:
        raise AmbiguousDatacenter(sorted(dc.path for dc in matches))
    return matches[0] if matches else None


async def _default_datacenter(client: VSphereClient) -> InventoryObject:
    datacenters = await client.list_datacenters()
    if not datacenters:
        raise NotFoundError("no datacenter found")
    if len(datacenters) > 1:
        raise AmbiguousDatacenter(sorted(dc.path for dc in datacenters))
    return datacenters[0]
