# SPDX-FileCopyrightText: 2026 Lasath Fernando <devel@lasath.org>
#
# SPDX-License-Identifier: GPL-3.0-or-later

"""Post-processor configuration: option table, parsing and validation.

The surrounding build pipeline hands the post-processor a flat mapping
of already-decoded values (strings, booleans, ``None``).  This module
turns it into an immutable :class:`PostProcessorConfig`.

Validation rules
----------------
- Unknown keys are rejected.
- Missing keys get their defaults from :data:`OPTIONS`.
- Every value is type-checked against the table.
- ``host``, ``username`` and ``password`` must be non-empty.
- ``host`` must form a valid ``https://<host>/sdk`` endpoint.

All problems are collected and raised together in a single
:class:`~vsphere_template.errors.ConfigurationError`, so a user fixing
their template sees every missing field at once rather than one per run.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import urlsplit

from .constants import DEFAULT_PORT, SDK_PATH
from .errors import ConfigurationError


class Trilean(enum.Enum):
    """Three-valued flag distinguishing "not set" from explicit values."""

    UNSET = "unset"
    TRUE = "true"
    FALSE = "false"

    @classmethod
    def from_value(cls, value: bool | str | None) -> Trilean:
        if value is None:
            return cls.UNSET
        if isinstance(value, bool):
            return cls.TRUE if value else cls.FALSE
        try:
            return cls(value.strip().lower())
        except ValueError:
            raise ValueError(f"expected true, false or unset, got {value!r}") from None

    def is_true(self) -> bool:
        return self is Trilean.TRUE

    def is_false(self) -> bool:
        return self is Trilean.FALSE


# =============================================================================
# Option table
# =============================================================================
#
# key -> (expected python type, default).  ``reregister_vm`` is handled
# separately since it accepts bool, str or None.

OPTIONS: dict[str, tuple[type | tuple[type, ...], Any]] = {
    "host": (str, ""),
    "insecure": (bool, False),
    "username": (str, ""),
    "password": (str, ""),
    "datacenter": (str, ""),
    "folder": (str, ""),
    "snapshot_enable": (bool, False),
    "snapshot_name": (str, ""),
    "snapshot_description": (str, ""),
    "reregister_vm": ((bool, str, type(None)), None),
}

REQUIRED = ("host", "username", "password")


@dataclass(frozen=True)
class Endpoint:
    """Connection address of the vSphere SDK endpoint."""

    host: str
    port: int
    path: str
    username: str
    password: str = field(repr=False)
    insecure: bool = False

    @property
    def url(self) -> str:
        """Endpoint URL without credentials, safe for logging."""
        if self.port == DEFAULT_PORT:
            return f"https://{self.host}{self.path}"
        return f"https://{self.host}:{self.port}{self.path}"


@dataclass(frozen=True)
class PostProcessorConfig:
    """Validated, immutable post-processor configuration.

    Construct it through :func:`parse_config` so that validation runs;
    direct construction is reserved for tests and callers that already
    hold validated values.
    """

    host: str
    username: str
    password: str = field(repr=False)
    insecure: bool = False
    datacenter: str = ""
    folder: str = ""
    snapshot_enable: bool = False
    snapshot_name: str = ""
    snapshot_description: str = ""
    reregister_vm: Trilean = Trilean.UNSET

    @property
    def endpoint(self) -> Endpoint:
        return build_endpoint(self.host, self.username, self.password, self.insecure)


def build_endpoint(host: str, username: str, password: str, insecure: bool) -> Endpoint:
    """Build the ``https://<host>/sdk`` endpoint for *host*.

    Raises:
        ValueError: If *host* is not a valid network location.
    """
    if not host or "/" in host or "@" in host or any(c.isspace() for c in host):
        raise ValueError(f"invalid vSphere sdk endpoint: {host!r}")
    parts = urlsplit(f"https://{host}{SDK_PATH}")
    try:
        port = parts.port or DEFAULT_PORT
    except ValueError as e:
        raise ValueError(f"invalid vSphere sdk endpoint: {e}") from None
    if not parts.hostname:
        raise ValueError(f"invalid vSphere sdk endpoint: {host!r}")
    return Endpoint(
        host=parts.hostname,
        port=port,
        path=parts.path,
        username=username,
        password=password,
        insecure=insecure,
    )


def parse_config(raw: dict[str, Any]) -> PostProcessorConfig:
    """Parse and validate a raw option mapping into :class:`PostProcessorConfig`.

    Args:
        raw: Option values keyed by name; omitted keys get defaults.

    Returns:
        Validated configuration.

    Raises:
        ConfigurationError: Listing every problem found.
    """
    errors: list[str] = []

    unknown = set(raw) - set(OPTIONS)
    if unknown:
        errors.append(f"Unknown options: {', '.join(sorted(unknown))}")

    merged: dict[str, Any] = {key: default for key, (_t, default) in OPTIONS.items()}
    merged.update({k: v for k, v in raw.items() if k in OPTIONS})

    for key, (expected, _default) in OPTIONS.items():
        value = merged[key]
        if not isinstance(value, expected):
            errors.append(f"{key} has invalid type {type(value).__name__}")
            merged[key] = OPTIONS[key][1]

    for key in REQUIRED:
        if not merged[key]:
            errors.append(f"{key} must be set")

    try:
        reregister = Trilean.from_value(merged["reregister_vm"])
    except ValueError as e:
        errors.append(f"reregister_vm: {e}")
        reregister = Trilean.UNSET

    if merged["host"]:
        try:
            build_endpoint(merged["host"], merged["username"], merged["password"], merged["insecure"])
        except ValueError as e:
            errors.append(f"Error {e}")

    if errors:
        raise ConfigurationError(errors)

    return PostProcessorConfig(
        host=merged["host"],
        username=merged["username"],
        password=merged["password"],
        insecure=merged["insecure"],
        datacenter=merged["datacenter"],
        folder=merged["folder"].strip("/"),
        snapshot_enable=merged["snapshot_enable"],
        snapshot_name=merged["snapshot_name"],
        snapshot_description=merged["snapshot_description"],
        reregister_vm=reregister,
    )
