# credential test configuration
# Fixtures shared by unit, integration and fuzz tests

import pytest
import sys
import os

# Add python-core to path so tests run from a plain checkout
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'python-core'))

from credential import CredentialEngine, EngineConfig, LegacyScheme, WorkFactorPolicy
from credential.work import EPOCH

pytest_plugins = ['pytest_asyncio']


# Pinning the clock to the policy epoch keeps stretching at 1000 iterations.
FIXED_NOW = EPOCH


@pytest.fixture(scope="session")
def project_root():
    """Return the project root directory."""
    return os.path.dirname(os.path.dirname(__file__))


@pytest.fixture
def fixed_clock():
    """Clock frozen at the work-policy epoch."""
    return lambda: FIXED_NOW


@pytest.fixture
def policy(fixed_clock):
    """Work-factor policy reading the frozen clock."""
    return WorkFactorPolicy(clock=fixed_clock)


@pytest.fixture
def engine(fixed_clock):
    """Engine with default configuration and a frozen clock."""
    return CredentialEngine(clock=fixed_clock, legacy=LegacyScheme())


@pytest.fixture
def small_engine(fixed_clock):
    """Engine with a short key for fast property tests."""
    return CredentialEngine(EngineConfig(key_length=16), clock=fixed_clock, legacy=LegacyScheme())
