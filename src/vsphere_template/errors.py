# SPDX-FileCopyrightText: 2026 Lasath Fernando <devel@lasath.org>
#
# SPDX-License-Identifier: GPL-3.0-or-later

"""Exception hierarchy for the template post-processor.

Every error the post-processor can terminate with derives from
:class:`PostProcessError`.  The step runner treats any
``PostProcessError`` raised by a step as a halt and records it on the
context; anything else is a bug and propagates.
"""

from __future__ import annotations


class PostProcessError(Exception):
    """Base class for all post-processor failures."""


class ConfigurationError(PostProcessError):
    """One or more configuration values are missing or invalid.

    All problems found during validation are collected in ``errors`` so
    they can be reported together.
    """

    def __init__(self, errors: list[str]):
        self.errors = list(errors)
        super().__init__("; ".join(self.errors))


class UnsupportedArtifact(PostProcessError):
    """The artifact was produced by a builder this stage can't handle."""

    def __init__(self, builder_id: str):
        self.builder_id = builder_id
        super().__init__(
            "The vSphere template post-processor can only take an artifact "
            "from the VMware builder built on ESXi (i.e. remote), the "
            "vSphere builder, or the vSphere post-processor. "
            f"Artifact type {builder_id} does not fit this requirement"
        )


class ConflictingExportConfig(PostProcessError):
    """The artifact is exported but the VM was not kept registered."""

    def __init__(self) -> None:
        super().__init__(
            "To use this post-processor with exporting behavior "
            "you need to set keep_registered to true"
        )


class VSphereConnectionError(PostProcessError, ConnectionError):
    """Could not connect or authenticate to the vSphere endpoint."""


class NotFoundError(PostProcessError):
    """An inventory object (datacenter, VM, folder root) doesn't exist."""


class AmbiguousDatacenter(PostProcessError):
    """No datacenter was configured and several exist."""

    def __init__(self, candidates: list[str]):
        self.candidates = list(candidates)
        super().__init__(
            f"{len(self.candidates)} datacenters found "
            f"({', '.join(self.candidates)}); set 'datacenter' to pick one"
        )


class FolderCreationError(PostProcessError):
    """A destination folder could not be found or created."""


class SnapshotError(PostProcessError):
    """Creating the VM snapshot failed."""


class TemplateConversionError(PostProcessError):
    """Converting the VM into a template failed."""


class StepHalted(PostProcessError):
    """A step halted the run without recording a more specific error."""

    def __init__(self, step: str):
        self.step = step
        super().__init__(f"Step '{step}' halted the run")


class Cancelled(PostProcessError):
    """The run was cancelled before it completed."""
