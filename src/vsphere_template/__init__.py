# SPDX-FileCopyrightText: 2026 Lasath Fernando <devel@lasath.org>
#
# SPDX-License-Identifier: GPL-3.0-or-later

"""vSphere template post-processor: public API re-exports."""

from .artifact import DEFAULT_PRODUCERS, Artifact, ProducerKind, ProducerRegistry, validate_artifact
from .config import PostProcessorConfig, Trilean, parse_config
from .errors import (
    AmbiguousDatacenter,
    Cancelled,
    ConfigurationError,
    ConflictingExportConfig,
    FolderCreationError,
    NotFoundError,
    PostProcessError,
    SnapshotError,
    StepHalted,
    TemplateConversionError,
    UnsupportedArtifact,
    VSphereConnectionError,
)
from .post_processor import PostProcessor, PostProcessResult
from .session import SessionManager, SettlePolicy

__version__ = "0.1.0"

__all__ = [
    "DEFAULT_PRODUCERS",
    "AmbiguousDatacenter",
    "Artifact",
    "Cancelled",
    "ConfigurationError",
    "ConflictingExportConfig",
    "FolderCreationError",
    "NotFoundError",
    "PostProcessError",
    "PostProcessResult",
    "PostProcessor",
    "PostProcessorConfig",
    "ProducerKind",
    "ProducerRegistry",
    "SessionManager",
    "SettlePolicy",
    "SnapshotError",
    "StepHalted",
    "TemplateConversionError",
    "Trilean",
    "UnsupportedArtifact",
    "VSphereConnectionError",
    "parse_config",
    "validate_artifact",
]
