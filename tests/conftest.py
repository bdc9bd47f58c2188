"""Pytest configuration and shared fixtures."""

import pytest
from fakes import FakeProviderClient, make_provisioner
from hypothesis import Verbosity, settings

# Configure Hypothesis for property-based testing
settings.register_profile("default", max_examples=100, verbosity=Verbosity.normal)
settings.register_profile("ci", max_examples=1000, verbosity=Verbosity.verbose)
settings.register_profile("dev", max_examples=10, verbosity=Verbosity.verbose)

# Load the default profile
settings.load_profile("default")


@pytest.fixture
def fake_client():
    """Provider client with one SSH key named key1 and no machines."""
    return FakeProviderClient()


@pytest.fixture
def provisioner(fake_client):
    """Provisioner for cluster 'test' backed by fake_client."""
    return make_provisioner(fake_client)
