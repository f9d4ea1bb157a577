"""
modpkg: a package manager for game add-ons backed by a local catalog mirror.
"""

__version__ = "0.3.0"
