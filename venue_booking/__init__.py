"""
Venue, event and booking management service
"""

__version__ = "1.0.0"
