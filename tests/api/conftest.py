from collections.abc import Iterator

import pytest
from fastapi.testclient import TestClient

from livehub.main import create_app
from livehub.runtime import LiveRuntime


@pytest.fixture
def client(live_runtime: LiveRuntime) -> Iterator[TestClient]:
    """Test client running the full app (lifespan included) around a fake-OBS runtime."""
    with TestClient(create_app(runtime=live_runtime)) as test_client:
        yield test_client
