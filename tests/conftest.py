# SPDX-FileCopyrightText: 2026 Lasath Fernando <devel@lasath.org>
#
# SPDX-License-Identifier: GPL-3.0-or-later

"""Shared fixtures for the post-processor unit tests."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import replace
from typing import Any

import pytest

from fakes import VM_PATH, FakeVSphereClient
from vsphere_template.artifact import Artifact, locate_vm
from vsphere_template.config import PostProcessorConfig
from vsphere_template.constants import BUILDER_ID_ESX
from vsphere_template.context import TemplateContext


@pytest.fixture
def fake_client() -> FakeVSphereClient:
    client = FakeVSphereClient()
    client.add_folder("DC1/vm/Discovered virtual machine")
    client.add_vm(VM_PATH)
    return client


@pytest.fixture
def config() -> PostProcessorConfig:
    return PostProcessorConfig(host="vcenter.example.com", username="admin", password="secret")


@pytest.fixture
def artifact() -> Artifact:
    return Artifact(builder_id=BUILDER_ID_ESX, id="packer-vm")


@pytest.fixture
def make_ctx(
    fake_client: FakeVSphereClient,
    config: PostProcessorConfig,
    artifact: Artifact,
) -> Callable[..., TemplateContext]:
    """Build a TemplateContext over the fake client, overriding config fields."""

    def _make(**overrides: Any) -> TemplateContext:
        return TemplateContext(
            config=replace(config, **overrides),
            artifact=artifact,
            location=locate_vm(artifact),
            client=fake_client,  # type: ignore[arg-type]
        )

    return _make
