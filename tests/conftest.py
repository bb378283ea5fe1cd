"""Pytest configuration for tests.

No sys.path hacks - tests should import from installed learnosity_sdk package.
"""

import pytest


CONSUMER_KEY = "yis0TYCu7U9V4o7M"
DOMAIN = "localhost"
TIMESTAMP = "20140626-0528"
SECRET = "74c5fd430cf1242a527f6223aebd42d30464be22"


@pytest.fixture
def secret():
    return SECRET


@pytest.fixture
def security():
    """Security packet with a fixed timestamp so signatures are reproducible."""
    return {
        "consumer_key": CONSUMER_KEY,
        "domain": DOMAIN,
        "timestamp": TIMESTAMP,
    }


@pytest.fixture
def security_with_user(security):
    return {**security, "user_id": "u1"}
