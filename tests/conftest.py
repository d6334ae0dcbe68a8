import os

# Config loading in tests must never pick up a developer's config.yaml.
os.environ.setdefault("APP_ENVIRONMENT", "test")
os.environ.setdefault("STORE_PROVISIONER_CONFIG", "tests/config.test.yaml")

from tests.fixtures import *  # noqa: E402,F401,F403
