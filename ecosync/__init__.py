"""
ecosync — Fan one canonical branch out to a fleet of mirror remotes.
"""

__version__ = "0.1.0"
