# SPDX-FileCopyrightText: 2026 Lasath Fernando <devel@lasath.org>
#
# SPDX-License-Identifier: GPL-3.0-or-later

"""Constants shared across the post-processor."""

from __future__ import annotations

# Builder ids of the upstream producers understood out of the box
BUILDER_ID_ESX = "mitchellh.vmware-esx"
BUILDER_ID_VSPHERE_POST = "packer.post-processor.vsphere"
BUILDER_ID_VSPHERE = "jetbrains.vsphere"
BUILDER_ID_ARTIFICE = "packer.post-processor.artifice"

# Artifact state keys written by the upstream builders
ARTIFACT_CONF_FORMAT = "artifact.conf.format"
ARTIFACT_CONF_KEEP_REGISTERED = "artifact.conf.keep_registered"
ARTIFACT_CONF_SKIP_EXPORT = "artifact.conf.skip_export"

# Written by this stage once the VM is a template
ARTIFACT_CONF_TEMPLATE = "artifact.conf.template"

# vCenter places VMs registered directly on an ESXi host here
DISCOVERED_VM_FOLDER = "Discovered virtual machine"

# Separator used in vSphere builder artifact ids: "<dc>::<folder>::<vm>"
VSPHERE_ID_SEPARATOR = "::"

# Every datacenter keeps its VMs and templates under this child folder
VM_ROOT_FOLDER = "vm"

SDK_PATH = "/sdk"
DEFAULT_PORT = 443

POWERED_OFF = "poweredOff"
