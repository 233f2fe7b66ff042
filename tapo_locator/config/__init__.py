"""
Configuration module for the Tapo locator.
Provides discovery settings and credentials loading.
"""

from .config_loader import (
    ConfigLoader, DiscoveryConfig, PrescanConfig, BroadcastConfig, NeighborTableConfig
)

__all__ = ['ConfigLoader', 'DiscoveryConfig', 'PrescanConfig', 'BroadcastConfig', 'NeighborTableConfig']
