"""
Connection configuration for redis-zset-ts.

Settings come from keyword arguments or from the environment. A local
``.env`` file is loaded by ``RedisSettings.from_env``, never at import.
``REDIS_URL`` wins over the individual ``REDIS_*`` variables when both
are set.
"""

import os
from typing import Any, Dict, Optional
from urllib.parse import quote, urlparse

from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, Field

from redis_zset_ts.errors import ConnectionError

DEFAULT_HOST = "localhost"
DEFAULT_PORT = 6379
DEFAULT_DB = 0
DEFAULT_MAX_CONNECTIONS = 50

KEY_SEPARATOR = ":"

SUPPORTED_SCHEMES = ("redis", "rediss", "unix")


class RedisSettings(BaseModel):
    """Parameters used to reach a Redis server."""

    url: Optional[str] = None
    host: str = DEFAULT_HOST
    port: int = Field(default=DEFAULT_PORT, ge=1, le=65535)
    db: int = Field(default=DEFAULT_DB, ge=0)
    username: Optional[str] = None
    password: Optional[str] = None
    ssl: bool = False
    socket_timeout: Optional[float] = None
    max_connections: int = Field(default=DEFAULT_MAX_CONNECTIONS, ge=1)

    @classmethod
    def from_env(cls) -> "RedisSettings":
        """
        Build settings from ``REDIS_*`` environment variables.

        Variables from a ``.env`` file in the working directory are loaded
        first; variables already set in the environment take precedence.

        Returns:
            Settings with defaults for anything not set

        Raises:
            ConnectionError: If a variable holds an invalid value
        """
        load_dotenv(find_dotenv(usecwd=True))

        timeout = os.getenv("REDIS_SOCKET_TIMEOUT")
        try:
            return cls(
                url=os.getenv("REDIS_URL") or None,
                host=os.getenv("REDIS_HOST", DEFAULT_HOST),
                port=int(os.getenv("REDIS_PORT", str(DEFAULT_PORT))),
                db=int(os.getenv("REDIS_DB", str(DEFAULT_DB))),
                username=os.getenv("REDIS_USERNAME") or None,
                password=os.getenv("REDIS_PASSWORD") or None,
                ssl=os.getenv("REDIS_SSL", "false").lower() == "true",
                socket_timeout=float(timeout) if timeout else None,
                max_connections=int(
                    os.getenv("REDIS_MAX_CONNECTIONS", str(DEFAULT_MAX_CONNECTIONS))
                ),
            )
        except ValueError as e:
            raise ConnectionError(f"Invalid Redis settings in environment: {e}") from e

    def to_uri(self) -> str:
        """
        Render the settings as a connection URI.

        Credentials are percent-encoded. An explicit ``url`` is returned as-is.
        """
        if self.url:
            return self.url

        scheme = "rediss" if self.ssl else "redis"
        auth = ""
        if self.password is not None:
            user = quote(self.username or "", safe="")
            auth = f"{user}:{quote(self.password, safe='')}@"
        elif self.username is not None:
            auth = f"{quote(self.username, safe='')}@"

        return f"{scheme}://{auth}{self.host}:{self.port}/{self.db}"

    def client_options(self) -> Dict[str, Any]:
        """Keyword arguments passed to the Redis client factory."""
        options: Dict[str, Any] = {
            "max_connections": self.max_connections,
            "decode_responses": False,
        }
        if self.socket_timeout is not None:
            options["socket_timeout"] = self.socket_timeout
        return options


def build_host_uri(host: str) -> str:
    """Build the URI for a bare host (optionally ``host:port``)."""
    if not host:
        raise ConnectionError("Host cannot be empty")
    return f"redis://{host}/"


def validate_uri(uri: str) -> str:
    """
    Check that a connection URI is usable.

    Args:
        uri: Connection URI (redis://, rediss:// or unix://)

    Returns:
        The URI unchanged

    Raises:
        ConnectionError: If the scheme is unsupported or the URI is malformed
    """
    try:
        parsed = urlparse(uri)
        # Accessing the port validates it
        parsed.port
    except ValueError as e:
        raise ConnectionError(f"Malformed Redis URI '{uri}': {e}") from e

    if parsed.scheme not in SUPPORTED_SCHEMES:
        raise ConnectionError(
            f"Unsupported Redis URI scheme '{parsed.scheme}' "
            f"(expected one of: {', '.join(SUPPORTED_SCHEMES)})"
        )

    if parsed.scheme == "unix":
        if not parsed.path:
            raise ConnectionError(f"Unix socket URI '{uri}' has no path")
    elif not parsed.hostname:
        raise ConnectionError(f"Redis URI '{uri}' has no host")

    return uri


def make_key(namespace: str, name: str) -> str:
    """
    Build the sorted-set key for a series.

    The key is ``namespace + ":" + name``, or just ``name`` when the
    namespace is empty. Separators inside either part are kept verbatim.

    Raises:
        ConnectionError: If the name is empty
    """
    if not name:
        raise ConnectionError("Time series name cannot be empty")
    if not namespace:
        return name
    return f"{namespace}{KEY_SEPARATOR}{name}"
