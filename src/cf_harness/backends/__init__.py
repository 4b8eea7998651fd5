"""Platform client implementations."""

from .cloud_controller import CloudControllerClient
from .factory import ClientFactory, PlatformClientFactory

__all__ = ["ClientFactory", "CloudControllerClient", "PlatformClientFactory"]
