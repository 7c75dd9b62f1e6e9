"""
Traffic Module
==============
Nguồn requests cho simulation.

Classes:
- RequestGenerator: Sinh requests với random IPs và processing time
"""

from .generator import RequestGenerator

__all__ = ['RequestGenerator']
