"""
copperview -- copper list, bitmap and palette inspection for Amiga debugging.
"""

__version__ = "1.0.0"
