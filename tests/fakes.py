# SPDX-FileCopyrightText: 2026 Lasath Fernando <devel@lasath.org>
#
# SPDX-License-Identifier: GPL-3.0-or-later

"""In-memory stand-in for VSphereClient that records every call."""

from __future__ import annotations

from typing import Any

from vsphere_template.vsphere_client import InventoryObject, VSphereError

# Where vCenter shows a VM built directly on an ESXi host
VM_PATH = "DC1/vm/Discovered virtual machine/packer-vm"


class FakeVSphereClient:
    """Inventory kept as a dict of inventory path -> InventoryObject.

    Set ``fail[method] = exc`` to make a method raise.  Every call is
    appended to ``calls`` as ``(method, *args)``.
    """

    def __init__(self, endpoint: Any = None, *, datacenters: tuple[str, ...] = ("DC1",)) -> None:
        self.endpoint = endpoint
        self.objects: dict[str, InventoryObject] = {}
        self.calls: list[tuple[Any, ...]] = []
        self.fail: dict[str, BaseException] = {}
        self.power_states: dict[str, list[str]] = {}
        self.templates: set[str] = set()
        self.snapshots: list[tuple[str, str, str, bool, bool]] = []
        self.connected = False
        for name in datacenters:
            self.add_datacenter(name)

    # -- inventory setup ------------------------------------------------------

    def add(self, kind: str, path: str) -> InventoryObject:
        obj = InventoryObject(kind=kind, name=path.rsplit("/", 1)[-1], path=path)
        self.objects[path] = obj
        return obj

    def add_datacenter(self, path: str) -> InventoryObject:
        dc = self.add("Datacenter", path)
        self.add("Folder", f"{path}/vm")
        return dc

    def add_folder(self, path: str) -> InventoryObject:
        return self.add("Folder", path)

    def add_vm(self, path: str, power_state: str = "poweredOff") -> InventoryObject:
        vm = self.add("VirtualMachine", path)
        self.power_states[path] = [power_state]
        return vm

    def called(self, method: str) -> list[tuple[Any, ...]]:
        return [c for c in self.calls if c[0] == method]

    def _record(self, method: str, *args: Any) -> None:
        self.calls.append((method, *args))
        if method in self.fail:
            raise self.fail[method]

    # -- VSphereClient interface ---------------------------------------------

    async def connect(self) -> None:
        self._record("connect")
        self.connected = True

    async def close(self) -> None:
        self._record("close")
        self.connected = False

    async def find_by_inventory_path(self, path: str) -> InventoryObject | None:
        self._record("find_by_inventory_path", path)
        return self.objects.get(path)

    async def list_datacenters(self) -> list[InventoryObject]:
        self._record("list_datacenters")
        return [o for o in self.objects.values() if o.kind == "Datacenter"]

    async def find_vm_by_name(self, name: str) -> InventoryObject | None:
        self._record("find_vm_by_name", name)
        for obj in self.objects.values():
            if obj.is_vm and obj.name == name:
                return obj
        return None

    async def power_state(self, vm: InventoryObject) -> str:
        self._record("power_state", vm.path)
        states = self.power_states[vm.path]
        return states.pop(0) if len(states) > 1 else states[0]

    async def parent_folder(self, obj: InventoryObject) -> InventoryObject:
        self._record("parent_folder", obj.path)
        return self.objects[obj.path.rsplit("/", 1)[0]]

    async def vmx_path(self, vm: InventoryObject) -> str:
        self._record("vmx_path", vm.path)
        return f"[datastore1] {vm.name}/{vm.name}.vmx"

    async def vm_host(self, vm: InventoryObject) -> InventoryObject:
        self._record("vm_host", vm.path)
        return InventoryObject(kind="HostSystem", name="esxi-01", path="DC1/host/esxi-01")

    async def create_folder(self, parent: InventoryObject, name: str) -> InventoryObject:
        self._record("create_folder", parent.path, name)
        path = f"{parent.path}/{name}"
        if path in self.objects:
            raise VSphereError(f"The name '{name}' already exists.", "DuplicateName")
        return self.add_folder(path)

    async def create_snapshot(
        self,
        vm: InventoryObject,
        name: str,
        description: str,
        *,
        memory: bool = False,
        quiesce: bool = False,
    ) -> None:
        self._record("create_snapshot", vm.path, name, description)
        self.snapshots.append((vm.path, name, description, memory, quiesce))

    async def mark_as_template(self, vm: InventoryObject) -> None:
        self._record("mark_as_template", vm.path)
        self.templates.add(vm.path)

    async def unregister_vm(self, vm: InventoryObject) -> None:
        self._record("unregister_vm", vm.path)
        del self.objects[vm.path]

    async def register_vm(
        self,
        folder: InventoryObject,
        vmx_path: str,
        name: str,
        host: InventoryObject,
        *,
        as_template: bool = True,
    ) -> InventoryObject:
        self._record("register_vm", folder.path, vmx_path, name, host.name)
        vm = self.add_vm(f"{folder.path}/{name}")
        if as_template:
            self.templates.add(vm.path)
        return vm

    async def move_into_folder(self, folder: InventoryObject, obj: InventoryObject) -> InventoryObject:
        self._record("move_into_folder", folder.path, obj.path)
        del self.objects[obj.path]
        moved = self.add(obj.kind, f"{folder.path}/{obj.name}")
        if obj.path in self.templates:
            self.templates.discard(obj.path)
            self.templates.add(moved.path)
        return moved
