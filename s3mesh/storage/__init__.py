"""
Storage module: concrete object store clients behind the provider contracts.
"""

from s3mesh.storage.boto_store import BotoObjectStore, create_s3_client

__all__ = [
    "BotoObjectStore",
    "create_s3_client",
]
