import pytest

from routemap.app import AppState
from routemap.storage import MemoryStorage


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def state(storage):
    return AppState(storage)
