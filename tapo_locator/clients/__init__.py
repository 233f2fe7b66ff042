"""
Collaborator clients: cloud account service and local device protocol.
"""

from .base_client import CloudAccountClient, LocalDeviceClient
from .cloud_client import TapoCloudClient

__all__ = ['CloudAccountClient', 'LocalDeviceClient', 'TapoCloudClient']
