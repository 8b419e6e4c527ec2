# SPDX-FileCopyrightText: 2026 Lasath Fernando <devel@lasath.org>
#
# SPDX-License-Identifier: GPL-3.0-or-later

"""High-level vSphere API client.

This module provides a small async facade over pyvmomi, exposing just
the inventory operations the template steps need.  pyvmomi is blocking,
so every call is pushed to a worker thread; one client holds exactly one
service-instance session.

Inventory objects are handed out as :class:`InventoryObject` wrappers so
that steps never touch pyvmomi types directly and can be exercised
against an in-memory fake.
"""

from __future__ import annotations

import asyncio
import http.client
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, TypeVar

from pyVim.connect import Disconnect, SmartConnect
from pyVim.task import WaitForTask
from pyVmomi import vim, vmodl

from .config import Endpoint
from .errors import VSphereConnectionError

logger = logging.getLogger(__name__)

_T = TypeVar("_T")


class VSphereError(Exception):
    """Error from the vSphere API."""

    def __init__(self, message: str, fault: str | None = None):
        super().__init__(message)
        self.fault = fault


@dataclass
class InventoryObject:
    """A managed object together with its inventory location.

    ``kind`` is the vSphere type name (``Datacenter``, ``Folder``,
    ``VirtualMachine`` ...); ``path`` is the slash-separated inventory
    path without the root folder, e.g. ``DC1/vm/templates``.
    """

    kind: str
    name: str
    path: str
    ref: Any = field(default=None, repr=False, compare=False)

    @property
    def is_folder(self) -> bool:
        return self.kind == "Folder"

    @property
    def is_vm(self) -> bool:
        return self.kind == "VirtualMachine"


def _fault_message(fault: vmodl.MethodFault) -> str:
    return getattr(fault, "msg", None) or type(fault).__name__


class VSphereClient:
    """Async client for the vSphere SOAP API."""

    def __init__(self, endpoint: Endpoint):
        self._endpoint = endpoint
        self._si: Any = None

    @property
    def endpoint(self) -> Endpoint:
        return self._endpoint

    @property
    def connected(self) -> bool:
        return self._si is not None

    async def connect(self) -> None:
        """Open and authenticate the session.

        Raises:
            VSphereConnectionError: Connection or login failed.
        """
        ep = self._endpoint
        logger.debug("Connecting to %s as %s (insecure=%s)", ep.url, ep.username, ep.insecure)
        try:
            self._si = await asyncio.to_thread(
                SmartConnect,
                host=ep.host,
                port=ep.port,
                path=ep.path,
                user=ep.username,
                pwd=ep.password,
                disableSslCertValidation=ep.insecure,
            )
        except vmodl.MethodFault as e:
            raise VSphereConnectionError(f"Error connecting to vSphere: {_fault_message(e)}") from e
        except (OSError, http.client.HTTPException) as e:
            raise VSphereConnectionError(f"Error connecting to vSphere: {e}") from e

    async def close(self) -> None:
        """Log out and drop the session."""
        if self._si is None:
            return
        si, self._si = self._si, None
        await asyncio.to_thread(Disconnect, si)

    # -------------------------------------------------------------------------
    # Plumbing
    # -------------------------------------------------------------------------

    def _content(self) -> Any:
        if self._si is None:
            raise VSphereError("Not connected to vSphere")
        return self._si.RetrieveContent()

    async def _call(self, fn: Callable[..., _T], *args: Any, **kwargs: Any) -> _T:
        """Run a blocking pyvmomi call in a thread, translating faults.

        Socket and HTTP errors become :class:`VSphereError` too, with the
        exception class name as the fault.
        """
        try:
            return await asyncio.to_thread(fn, *args, **kwargs)
        except vmodl.MethodFault as e:
            raise VSphereError(_fault_message(e), type(e).__name__) from e
        except (OSError, http.client.HTTPException) as e:
            raise VSphereError(str(e) or type(e).__name__, type(e).__name__) from e

    def _wait(self, task: Any) -> Any:
        WaitForTask(task, si=self._si)
        return task.info.result

    def _wrap(self, ref: Any) -> InventoryObject:
        return InventoryObject(
            kind=ref._wsdlName,
            name=ref.name,
            path=self._path_of(ref),
            ref=ref,
        )

    def _path_of(self, ref: Any) -> str:
        root = self._content().rootFolder
        names: list[str] = []
        node = ref
        while node is not None and node != root:
            names.append(node.name)
            node = node.parent
        return "/".join(reversed(names))

    def _list(self, vimtype: Any) -> list[Any]:
        content = self._content()
        view = content.viewManager.CreateContainerView(content.rootFolder, [vimtype], True)
        try:
            return list(view.view)
        finally:
            view.Destroy()

    # -------------------------------------------------------------------------
    # Inventory lookups
    # -------------------------------------------------------------------------

    async def find_by_inventory_path(self, path: str) -> InventoryObject | None:
        """Look up *path* (e.g. ``DC1/vm/folder/name``); ``None`` if absent."""
        def _find() -> InventoryObject | None:
            ref = self._content().searchIndex.FindByInventoryPath(inventoryPath=path)
            return self._wrap(ref) if ref is not None else None

        logger.debug("FindByInventoryPath %s", path)
        return await self._call(_find)

    async def list_datacenters(self) -> list[InventoryObject]:
        """List every datacenter on the endpoint."""
        def _datacenters() -> list[InventoryObject]:
            return [self._wrap(dc) for dc in self._list(vim.Datacenter)]

        return await self._call(_datacenters)

    async def find_vm_by_name(self, name: str) -> InventoryObject | None:
        """Find a VM anywhere in the inventory by its display name."""
        def _find() -> InventoryObject | None:
            for vm in self._list(vim.VirtualMachine):
                if vm.name == name:
                    return self._wrap(vm)
            return None

        return await self._call(_find)

    async def power_state(self, vm: InventoryObject) -> str:
        """Return the VM's power state (``poweredOn``, ``poweredOff`` ...)."""
        return await self._call(lambda: str(vm.ref.runtime.powerState))

    async def parent_folder(self, obj: InventoryObject) -> InventoryObject:
        return await self._call(lambda: self._wrap(obj.ref.parent))

    async def vmx_path(self, vm: InventoryObject) -> str:
        """Datastore path of the VM's ``.vmx`` file, e.g. ``[ds1] web/web.vmx``."""
        return await self._call(lambda: str(vm.ref.config.files.vmPathName))

    async def vm_host(self, vm: InventoryObject) -> InventoryObject:
        """Host the VM is registered on."""
        return await self._call(lambda: self._wrap(vm.ref.runtime.host))

    # -------------------------------------------------------------------------
    # Inventory changes
    # -------------------------------------------------------------------------

    async def create_folder(self, parent: InventoryObject, name: str) -> InventoryObject:
        """Create folder *name* under *parent*."""
        logger.debug("CreateFolder %s/%s", parent.path, name)
        return await self._call(lambda: self._wrap(parent.ref.CreateFolder(name)))

    async def create_snapshot(
        self,
        vm: InventoryObject,
        name: str,
        description: str,
        *,
        memory: bool = False,
        quiesce: bool = False,
    ) -> None:
        """Snapshot *vm* and wait for the task to finish."""
        logger.debug("CreateSnapshot %s name=%r", vm.path, name)

        def _snapshot() -> None:
            task = vm.ref.CreateSnapshot_Task(
                name=name, description=description, memory=memory, quiesce=quiesce,
            )
            self._wait(task)

        await self._call(_snapshot)

    async def mark_as_template(self, vm: InventoryObject) -> None:
        """Convert *vm* to a template in place."""
        logger.debug("MarkAsTemplate %s", vm.path)
        await self._call(lambda: vm.ref.MarkAsTemplate())

    async def unregister_vm(self, vm: InventoryObject) -> None:
        """Remove *vm* from the inventory, leaving its files on the datastore."""
        logger.debug("UnregisterVM %s", vm.path)
        await self._call(lambda: vm.ref.UnregisterVM())

    async def register_vm(
        self,
        folder: InventoryObject,
        vmx_path: str,
        name: str,
        host: InventoryObject,
        *,
        as_template: bool = True,
    ) -> InventoryObject:
        """Register the VM at *vmx_path* into *folder* and wait for it."""
        logger.debug("RegisterVM %s as %s in %s", vmx_path, name, folder.path)

        def _register() -> InventoryObject:
            task = folder.ref.RegisterVM_Task(
                path=vmx_path, name=name, asTemplate=as_template, pool=None, host=host.ref,
            )
            return self._wrap(self._wait(task))

        return await self._call(_register)

    async def move_into_folder(self, folder: InventoryObject, obj: InventoryObject) -> InventoryObject:
        """Move *obj* into *folder*; returns the relocated object."""
        logger.debug("MoveIntoFolder %s -> %s", obj.path, folder.path)

        def _move() -> InventoryObject:
            self._wait(folder.ref.MoveIntoFolder_Task([obj.ref]))
            return self._wrap(obj.ref)

        return await self._call(_move)
