"""
Durable object storage: locators, backend interface and implementations.
"""

from .base import ObjectInfo, ObjectStorage
from .local_storage import LocalObjectStorage
from .locator import ObjectLocator
from .registry import StorageRegistry, build_default_registry

__all__ = [
    "ObjectInfo",
    "ObjectStorage",
    "LocalObjectStorage",
    "ObjectLocator",
    "StorageRegistry",
    "build_default_registry",
]
