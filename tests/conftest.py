import pytest

from tests.helpers import FakeTMDB


@pytest.fixture
def fake_tmdb():
    return FakeTMDB()
