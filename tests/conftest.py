"""Root test configuration: isolate every test from ambient METAMARK_* settings"""

import os

import pytest

from metamark.config import ENV_PREFIX


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Drop METAMARK_* env vars so load_config only sees what a test sets."""
    for name in list(os.environ):
        if name.startswith(ENV_PREFIX):
            monkeypatch.delenv(name, raising=False)
