"""
overlapfinder - find time ranges where meeting participants are available together.
"""

__version__ = "0.1.0"
