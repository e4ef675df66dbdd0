"""Data-service environment variables.

``DataServiceEnv`` is a frozen dataclass — read once, passed around,
never a string-key dict lookup at the call site.
"""

import os
from collections.abc import Mapping
from dataclasses import dataclass

from supaedge.errors import ConfigurationError

URL_VAR = "SUPABASE_URL"
ANON_KEY_VAR = "SUPABASE_ANON_KEY"
SERVICE_ROLE_KEY_VAR = "SUPABASE_SERVICE_ROLE_KEY"


@dataclass(frozen=True, slots=True)
class DataServiceEnv:
    """Credentials for the backing data service.

    ``url`` and ``anon_key`` are always required. ``service_role_key``
    is only needed for the elevated (admin) client.
    """

    url: str
    anon_key: str
    service_role_key: str | None = None

    @classmethod
    def from_environ(cls, environ: Mapping[str, str] | None = None) -> "DataServiceEnv":
        """Read credentials from the process environment (or *environ*).

        Raises ``ConfigurationError`` naming the first missing variable.
        """
        env = os.environ if environ is None else environ

        url = env.get(URL_VAR)
        if not url:
            msg = f"Missing environment variable: {URL_VAR}"
            raise ConfigurationError(msg)

        anon_key = env.get(ANON_KEY_VAR)
        if not anon_key:
            msg = f"Missing environment variable: {ANON_KEY_VAR}"
            raise ConfigurationError(msg)

        return cls(url=url, anon_key=anon_key, service_role_key=env.get(SERVICE_ROLE_KEY_VAR) or None)
