"""
Shared pytest fixtures.
"""

import pytest

from binding_engine.cluster.memory import ManifestClusterReader

from .fixtures import ANNOTATED, config_map, credentials_secret, database_cr


@pytest.fixture
def annotated_db():
    return database_cr(ANNOTATED)


@pytest.fixture
def reader(annotated_db):
    return ManifestClusterReader([annotated_db, credentials_secret(), config_map()])
