"""
Service layer for business logic operations.

This package provides services that coordinate between the transfer
subsystem, the profile store and the file system.
"""

from bookmark_profiles.services.transfer_service import ProfileTransferService

__all__ = [
    "ProfileTransferService",
]
