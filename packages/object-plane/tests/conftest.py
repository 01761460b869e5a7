import pytest

from tests.test_repo_common import TickingClock


@pytest.fixture
def clock() -> TickingClock:
    return TickingClock()
