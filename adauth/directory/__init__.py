"""Directory (LDAP) client package.

Public API:
    - DirectoryConfig, DirectoryEndpoint
    - DirectoryEntry, GroupMembership
    - DirectoryClient
"""

from .models import (
    AD_CONTROLLER,
    DIRECTORY,
    DirectoryConfig,
    DirectoryEndpoint,
    DirectoryEntry,
    GroupMembership,
)
from .errors import DirectoryConfigurationError, DirectoryError
from .client import DirectoryClient

__all__ = [
    "AD_CONTROLLER",
    "DIRECTORY",
    "DirectoryConfig",
    "DirectoryEndpoint",
    "DirectoryEntry",
    "GroupMembership",
    "DirectoryError",
    "DirectoryConfigurationError",
    "DirectoryClient",
]
