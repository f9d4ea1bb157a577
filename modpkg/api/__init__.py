"""
Metadata API Layer.

This package handles all communication with the remote add-on metadata service.
"""

from .client import MetaAPIClient, create_session

__all__ = ["MetaAPIClient", "create_session"]
