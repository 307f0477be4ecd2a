"""External service integrations for the Sideout platform."""

from .uploadthing_client import UploadthingClient, UploadthingError

__all__ = ["UploadthingClient", "UploadthingError"]
