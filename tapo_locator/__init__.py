"""
Tapo Locator

Finds a Tapo smart device on the local network from its MAC address
(ICMP prescan, UDP broadcast discovery, neighbor table lookup) and toggles
its power over the local protocol.
"""

__version__ = "1.0.0"
__author__ = "Tapo Locator Team"
