"""
Shared fixtures.
"""

from datetime import date

import pytest

from tasksync.engine import FieldTransformer, PairReconciler
from tasksync.models.config import SyncPairing

from fakes import FakeClickUp, FakeMotion, InMemoryStore


@pytest.fixture
def pairing():
    return SyncPairing(id="p1", clickup_list_id="L1", motion_workspace_id="W1", description="Team board")


@pytest.fixture
def transformer():
    return FieldTransformer(today=lambda: date(2024, 3, 1))


@pytest.fixture
def store(pairing):
    return InMemoryStore([pairing], user_mappings={"101": "mu_101"})


@pytest.fixture
def clickup():
    return FakeClickUp()


@pytest.fixture
def motion():
    return FakeMotion()


@pytest.fixture
def reconciler(store, clickup, motion, transformer):
    return PairReconciler(store, clickup, motion, transformer)
