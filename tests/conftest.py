import matplotlib
matplotlib.use('Agg')

import pytest

from dynamicwalking.gait import findgait
from dynamicwalking.walker import WalkRW2l, multistep


@pytest.fixture
def walker():
    """Periodic gait at the default mid-stance speed"""
    return findgait(WalkRW2l())


@pytest.fixture
def steady_walk(walker):
    return multistep(walker, [walker.P] * 4)
