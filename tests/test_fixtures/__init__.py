"""
Test Fixtures Package

Shared test utilities: in-memory Motor stand-ins and a scripted establisher.
"""

from .establisher_factory import ScriptedEstablisher
from .mongo_factory import (
    PRIMARY_URI,
    SECONDARY_URI,
    FakeClientFactory,
    FakeMongoClient,
    InMemoryCollection,
    InMemoryDatabase,
)

__all__ = [
    "PRIMARY_URI",
    "SECONDARY_URI",
    "FakeClientFactory",
    "FakeMongoClient",
    "InMemoryCollection",
    "InMemoryDatabase",
    "ScriptedEstablisher",
]
