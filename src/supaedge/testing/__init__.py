"""Test utilities for supaedge applications.

Provides a test client and stand-ins for the data service::

    from supaedge.testing import MockSupabase, TestClient, auth_headers
"""

from supaedge.testing.client import TestClient
from supaedge.testing.mocks import (
    TEST_ENV,
    MockAPIError,
    MockAuthError,
    MockClient,
    MockSupabase,
    MockUser,
    QueryResult,
    auth_headers,
    create_mock_user,
    mock_env,
)

__all__ = [
    "TEST_ENV",
    "MockAPIError",
    "MockAuthError",
    "MockClient",
    "MockSupabase",
    "MockUser",
    "QueryResult",
    "TestClient",
    "auth_headers",
    "create_mock_user",
    "mock_env",
]
