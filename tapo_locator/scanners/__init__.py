"""
Discovery phases.

This package contains the three discovery phases run by the orchestrator:
the ICMP prescan, the UDP broadcast query and the neighbor table lookup.
"""

from .base_scanner import BaseScanner
from .subnet_prescanner import SubnetPrescanner
from .broadcast_scanner import BroadcastScanner
from .neighbor_table_scanner import NeighborTableScanner

__all__ = [
    'BaseScanner',
    'SubnetPrescanner',
    'BroadcastScanner',
    'NeighborTableScanner'
]
