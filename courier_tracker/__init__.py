"""
Courier tracker: dispatch API with real-time courier location distribution.
"""

__version__ = "1.0.0"
