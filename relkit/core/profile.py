"""Release profile and artifact role enums."""

from __future__ import annotations

from enum import Enum

__all__ = ["ArtifactRole", "ReleaseProfile"]


class ArtifactRole(Enum):
    """Role a built binary plays in a release."""

    CLIENT = "client"
    SERVER = "server"

    def __str__(self) -> str:
        return self.value


class ReleaseProfile(Enum):
    """How many binaries a release is made of.

    SINGLE ships the client binary only. DUAL ships the client plus an
    optional ``<name>-server`` binary.
    """

    SINGLE = "single"
    DUAL = "dual"

    def __str__(self) -> str:
        return self.value

    @property
    def roles(self) -> tuple[ArtifactRole, ...]:
        """Roles resolved for this profile, mandatory role first."""
        if self == ReleaseProfile.DUAL:
            return (ArtifactRole.CLIENT, ArtifactRole.SERVER)
        return (ArtifactRole.CLIENT,)

    @classmethod
    def parse(cls, value: str) -> ReleaseProfile:
        """Parse a profile name case-insensitively.

        Raises:
            ValueError: If the name is not a known profile.
        """
        try:
            return cls(value.strip().lower())
        except ValueError:
            known = ", ".join(p.value for p in cls)
            raise ValueError(f"unknown release profile '{value}' (expected: {known})") from None
