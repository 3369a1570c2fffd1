"""Storage vendor profiles and endpoint resolution."""

from .profile import (
    AlternateHost,
    MatchKind,
    Provider,
    ProviderProfile,
    RegionInfo,
    RegionPolicy,
)
from .catalog import PROFILES, create_provider, get_profile

__all__ = [
    "AlternateHost",
    "MatchKind",
    "Provider",
    "ProviderProfile",
    "RegionInfo",
    "RegionPolicy",
    "PROFILES",
    "create_provider",
    "get_profile",
]
