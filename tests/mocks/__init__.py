"""
Mock implementations for testing without a Redis server.
"""

from tests.mocks.zset import MockRedis, UnreachableRedis

__all__ = [
    "MockRedis",
    "UnreachableRedis",
]
