"""Pytest fixtures for testing."""

import pytest

from sectionstore.services.section_service import SectionService
from tests.fakes import FakeSectionDatabase


@pytest.fixture
def fake_db() -> FakeSectionDatabase:
    return FakeSectionDatabase()


@pytest.fixture
def section_service(fake_db) -> SectionService:
    return SectionService(fake_db)
