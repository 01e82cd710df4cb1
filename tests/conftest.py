"""Shared test fixtures for finlit."""

import os
import random
import tempfile

import pytest


@pytest.fixture
def tmp_dir():
    """Provide a temporary directory that is cleaned up after the test."""
    with tempfile.TemporaryDirectory() as d:
        yield d


@pytest.fixture
def tmp_config_file(tmp_dir):
    """Create a temporary YAML config file."""
    import yaml

    config_data = {
        "monte_carlo": {"trials": 200, "batch_size": 20},
        "portfolio": {"rebalance_threshold": 3.0},
        "logging": {"level": "info"},
    }
    config_path = os.path.join(tmp_dir, "config.yaml")
    with open(config_path, "w") as f:
        yaml.dump(config_data, f)
    return config_path


@pytest.fixture
def seeded_rng():
    """Deterministic uniform source for the Monte Carlo simulator."""
    return random.Random(42).random
