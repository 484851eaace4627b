import pytest

from fep.db.memory import MemoryEnrichmentLogStore, MemoryEventRepository


@pytest.fixture
def repo() -> MemoryEventRepository:
    return MemoryEventRepository()


@pytest.fixture
def logs() -> MemoryEnrichmentLogStore:
    return MemoryEnrichmentLogStore()
