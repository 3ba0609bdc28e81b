# SPDX-License-Identifier: MIT
"""Release pipeline services.

Each stage is a small class with a single operation returning a Result;
``ReleaseService`` chains them.
"""

from relkit.services.artifacts import ArtifactResolver, ArtifactSet
from relkit.services.build import BuildOrchestrator, BuildResult
from relkit.services.envbridge import EnvironmentBridge, EnvironmentSnapshot
from relkit.services.package import ReleaseManifest, ReleasePackager
from relkit.services.release import ReleaseService
from relkit.services.toolchain import ToolchainInstallation, ToolchainLocator

__all__ = [
    "ArtifactResolver",
    "ArtifactSet",
    "BuildOrchestrator",
    "BuildResult",
    "EnvironmentBridge",
    "EnvironmentSnapshot",
    "ReleaseManifest",
    "ReleasePackager",
    "ReleaseService",
    "ToolchainInstallation",
    "ToolchainLocator",
]
