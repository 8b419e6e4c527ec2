# SPDX-FileCopyrightText: 2026 Lasath Fernando <devel@lasath.org>
#
# SPDX-License-Identifier: GPL-3.0-or-later

"""Tests for error translation in VSphereClient."""

from __future__ import annotations

import http.client

import pytest
from pyVmomi import vim

from fakes import VM_PATH
from vsphere_template.errors import SnapshotError, TemplateConversionError
from vsphere_template.steps.create_snapshot import create_snapshot
from vsphere_template.steps.mark_as_template import mark_as_template
from vsphere_template.vsphere_client import InventoryObject, VSphereClient, VSphereError


class DroppedConnectionVM:
    """Managed-object stand-in whose every call loses the connection."""

    def CreateSnapshot_Task(self, **kwargs):
        raise ConnectionResetError("peer reset")

    def MarkAsTemplate(self):
        raise http.client.RemoteDisconnected("Remote end closed connection without response")


def _raise(exc: BaseException):
    def fn():
        raise exc

    return fn


@pytest.fixture
def client(config) -> VSphereClient:
    return VSphereClient(config.endpoint)


@pytest.mark.asyncio
async def test_method_fault_becomes_vsphere_error(client):
    with pytest.raises(VSphereError) as exc:
        await client._call(_raise(vim.fault.InvalidPowerState(msg="VM is powered on")))
    assert str(exc.value) == "VM is powered on"
    assert exc.value.fault == "InvalidPowerState"


@pytest.mark.asyncio
async def test_socket_error_becomes_vsphere_error(client):
    with pytest.raises(VSphereError, match="peer reset") as exc:
        await client._call(_raise(ConnectionResetError("peer reset")))
    assert exc.value.fault == "ConnectionResetError"
    assert isinstance(exc.value.__cause__, ConnectionResetError)


@pytest.mark.asyncio
async def test_http_error_becomes_vsphere_error(client):
    with pytest.raises(VSphereError) as exc:
        await client._call(_raise(http.client.BadStatusLine("")))
    assert exc.value.fault == "BadStatusLine"


@pytest.mark.asyncio
async def test_other_exceptions_propagate(client):
    with pytest.raises(KeyError):
        await client._call(_raise(KeyError("bug")))


@pytest.mark.asyncio
async def test_dropped_connection_during_snapshot(make_ctx, client):
    ctx = make_ctx(snapshot_enable=True, snapshot_name="base")
    ctx.client = client
    ctx.vm = InventoryObject("VirtualMachine", "packer-vm", VM_PATH, ref=DroppedConnectionVM())

    with pytest.raises(SnapshotError, match="peer reset"):
        await create_snapshot(ctx)


@pytest.mark.asyncio
async def test_dropped_connection_during_conversion(make_ctx, client, artifact):
    ctx = make_ctx()
    ctx.client = client
    ctx.vm = InventoryObject("VirtualMachine", "packer-vm", VM_PATH, ref=DroppedConnectionVM())

    with pytest.raises(TemplateConversionError, match="Remote end closed"):
        await mark_as_template(ctx)
    assert artifact.template is False
