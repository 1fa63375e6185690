import os
import warnings

# Keep local env files and a developer's OBS out of test runs
os.environ.update({"OBS_ENABLED": "false", "LOGFIRE_ENABLE": "false"})

warnings.filterwarnings("ignore", category=DeprecationWarning, module="logfire.*")

from tests.fixtures.live_fixtures import *  # noqa: E402, F403
