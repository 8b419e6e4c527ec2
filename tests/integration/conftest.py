# SPDX-FileCopyrightText: 2026 Lasath Fernando <devel@lasath.org>
#
# SPDX-License-Identifier: GPL-3.0-or-later

"""Pytest configuration for the live vCenter integration tests."""

from __future__ import annotations

import os

import pytest

from vsphere_template.config import PostProcessorConfig, parse_config

# ---------------------------------------------------------------------------
# vCenter configuration
# ---------------------------------------------------------------------------

TEST_HOST = os.environ.get("VSPHERE_TEST_HOST", "")
TEST_USERNAME = os.environ.get("VSPHERE_TEST_USERNAME", "")
TEST_PASSWORD = os.environ.get("VSPHERE_TEST_PASSWORD", "")
TEST_VM = os.environ.get("VSPHERE_TEST_VM", "")
TEST_DATACENTER = os.environ.get("VSPHERE_TEST_DATACENTER", "")
TEST_INSECURE = os.environ.get("VSPHERE_TEST_INSECURE", "true") == "true"


def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    if TEST_HOST and TEST_VM:
        return
    skip = pytest.mark.skip(reason="VSPHERE_TEST_HOST and VSPHERE_TEST_VM not set")
    for item in items:
        if "integration" in item.path.parts:
            item.add_marker(skip)


@pytest.fixture
def live_config() -> PostProcessorConfig:
    return parse_config({
        "host": TEST_HOST,
        "username": TEST_USERNAME,
        "password": TEST_PASSWORD,
        "insecure": TEST_INSECURE,
        "datacenter": TEST_DATACENTER,
        "folder": "vsphere-template-tests",
    })


@pytest.fixture
def live_vm() -> str:
    return TEST_VM
