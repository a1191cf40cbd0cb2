from typing import List

import pytest

from lineup.players import OpponentProfile, PlayerProfile
from lineup.tactical_config import DEFAULT_CONFIG

from tests.helpers import OPPONENT_433_SLOTS, build_own_roster, make_opponent


@pytest.fixture
def own_roster() -> List[PlayerProfile]:
    return build_own_roster()


@pytest.fixture
def opponent_433() -> List[OpponentProfile]:
    return [make_opponent(code) for code in OPPONENT_433_SLOTS]


@pytest.fixture
def config():
    return DEFAULT_CONFIG
