"""
availabilityfinder - free meeting slot resolution for calendar assistants.
"""

__version__ = "0.1.0"
