"""Unit test fixtures with mocked dependencies."""

import pytest
from pydantic import SecretStr


@pytest.fixture
def mock_db_settings():
    """Provide test database settings."""
    from infrastructure.settings import DatabaseSettings

    return DatabaseSettings(
        host="testhost",
        port=5432,
        database="testdb",
        username="testuser",
        password=SecretStr("testpass"),
    )


@pytest.fixture
def branching_settings():
    """Provide fully configured branching settings."""
    from infrastructure.settings import BranchingSettings

    return BranchingSettings(
        api_key=SecretStr("neon-test-key"),
        project_id="parent-project",
        database_name="neondb",
        role_name="neondb_owner",
        role_password=SecretStr("branch-secret"),
        api_base_url="https://neon.test/api/v2",
    )


@pytest.fixture
def unconfigured_branching_settings():
    """Provide branching settings without an API key."""
    from infrastructure.settings import BranchingSettings

    return BranchingSettings(api_key=None, project_id=None)
