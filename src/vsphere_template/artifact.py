# SPDX-FileCopyrightText: 2026 Lasath Fernando <devel@lasath.org>
#
# SPDX-License-Identifier: GPL-3.0-or-later

"""Build artifacts and the compatibility gate run before connecting.

An :class:`Artifact` is what the upstream builder hands over: a producer
identity (``builder_id``), the VM identity (``id``) and a string-keyed
``state`` lookup.  :func:`validate_artifact` decides whether this stage
can work with it at all.  It is pure and must run before any
connection to vSphere is opened.

Producers are kept in a :class:`ProducerRegistry` rather than a
hard-coded mapping so that plugins shipping their own builders can
register them::

    DEFAULT_PRODUCERS.register("example.my-builder", ProducerKind.VMWARE)
"""

from __future__ import annotations

import enum
from dataclasses import dataclass

from pydantic import BaseModel, Field

from .constants import (
    ARTIFACT_CONF_FORMAT,
    ARTIFACT_CONF_KEEP_REGISTERED,
    ARTIFACT_CONF_SKIP_EXPORT,
    ARTIFACT_CONF_TEMPLATE,
    BUILDER_ID_ARTIFICE,
    BUILDER_ID_ESX,
    BUILDER_ID_VSPHERE,
    BUILDER_ID_VSPHERE_POST,
    DISCOVERED_VM_FOLDER,
    VSPHERE_ID_SEPARATOR,
)
from .errors import ConflictingExportConfig, UnsupportedArtifact


class Artifact(BaseModel):
    """Upstream build result.

    Upstream stages usually pass a plain dict; use
    ``Artifact.model_validate(data)`` to load it.
    """

    builder_id: str
    id: str
    files: list[str] = Field(default_factory=list)
    state: dict[str, str] = Field(default_factory=dict)
    template: bool = False

    def state_value(self, key: str) -> str:
        """Return the state entry for *key*, or ``""`` when absent."""
        return self.state.get(key, "")

    def mark_as_template(self) -> None:
        """Flag the artifact as a template; it's no longer runnable."""
        self.template = True
        self.state[ARTIFACT_CONF_TEMPLATE] = "true"


class ProducerKind(enum.Enum):
    VMWARE = "vmware"
    VSPHERE = "vsphere"
    ARTIFICE = "artifice"


class ProducerRegistry:
    """Enumerated, extensible set of accepted upstream producers."""

    def __init__(self, producers: dict[str, ProducerKind] | None = None) -> None:
        self._producers: dict[str, ProducerKind] = dict(producers or {})

    def register(self, builder_id: str, kind: ProducerKind) -> None:
        self._producers[builder_id] = kind

    def unregister(self, builder_id: str) -> None:
        self._producers.pop(builder_id, None)

    def kind_of(self, builder_id: str) -> ProducerKind | None:
        return self._producers.get(builder_id)

    def copy(self) -> ProducerRegistry:
        return ProducerRegistry(self._producers)

    def __contains__(self, builder_id: object) -> bool:
        return builder_id in self._producers

    def __iter__(self):
        return iter(sorted(self._producers))

    def __len__(self) -> int:
        return len(self._producers)


DEFAULT_PRODUCERS = ProducerRegistry({
    BUILDER_ID_VSPHERE_POST: ProducerKind.VMWARE,
    BUILDER_ID_ESX: ProducerKind.VMWARE,
    BUILDER_ID_VSPHERE: ProducerKind.VSPHERE,
    BUILDER_ID_ARTIFICE: ProducerKind.ARTIFICE,
})


def validate_artifact(artifact: Artifact, registry: ProducerRegistry = DEFAULT_PRODUCERS) -> None:
    """Check that *artifact* can be turned into a template.

    Raises:
        UnsupportedArtifact: The producer isn't in *registry*.
        ConflictingExportConfig: The VM is exported but not kept registered.
    """
    if artifact.builder_id not in registry:
        raise UnsupportedArtifact(artifact.builder_id)

    fmt = artifact.state_value(ARTIFACT_CONF_FORMAT)
    keep = artifact.state_value(ARTIFACT_CONF_KEEP_REGISTERED)
    skip = artifact.state_value(ARTIFACT_CONF_SKIP_EXPORT)

    # Exporting unregisters the VM unless keep_registered is set
    if fmt != "" and keep != "true" and skip == "false":
        raise ConflictingExportConfig()


@dataclass(frozen=True)
class VMLocation:
    """Where the artifact's VM lives, relative to the datacenter's VM root."""

    folder: str
    name: str


def locate_vm(artifact: Artifact, registry: ProducerRegistry = DEFAULT_PRODUCERS) -> VMLocation:
    """Work out the folder and name of the VM behind *artifact*.

    vSphere builder ids look like ``<datacenter>::<folder>::<vm>``; other
    producers give just the VM name, and the VM sits in the folder
    vCenter uses for VMs discovered on its hosts.
    """
    if registry.kind_of(artifact.builder_id) is ProducerKind.VSPHERE:
        parts = artifact.id.split(VSPHERE_ID_SEPARATOR)
        if len(parts) == 3:
            return VMLocation(folder=parts[1].strip("/"), name=parts[2])
    return VMLocation(folder=DISCOVERED_VM_FOLDER, name=artifact.id)
