import logging

import pytest

from lineup.formations import FORMATION_433_DM
from lineup.lineup_optimizer import LineupResult, SlotAssignment
from lineup.matchup import (
    CATEGORIES,
    FALLBACK_INSIGHT,
    FALLBACK_SUGGESTION,
    SUGGESTION_PHRASES,
    analyze_matchups,
    matchup_deltas,
)
from lineup.tactical_config import TacticalConfig, tactical_preset

from tests.helpers import OPPONENT_433_SLOTS, build_own_roster, make_opponent, make_player


def _lineup(players):
    """Players in FORMATION_433_DM slot order."""
    assignments = tuple(
        SlotAssignment(player=p, slot=slot, cost=0.0)
        for p, slot in zip(players, FORMATION_433_DM.slots)
    )
    return LineupResult(
        formation_code=FORMATION_433_DM.code,
        formation_name=FORMATION_433_DM.name,
        shape=FORMATION_433_DM.shape,
        assignments=assignments,
        total_cost=0.0,
    )


def _native_433_lineup():
    by_id = {p.player_id: p for p in build_own_roster()}
    order = ["gk", "rb", "cb1", "cb2", "lb", "dm", "cm1", "cm2", "rw", "st", "lw"]
    return _lineup([by_id[pid] for pid in order])


def test_pace_edge_on_the_wing_is_reported(opponent_433):
    analysis = analyze_matchups(_native_433_lineup(), opponent_433)
    wing = [i for i in analysis.insights if "wing advantage" in i.lower()]
    assert wing
    assert any("Right Winger" in i and "11R" in i and "38-point" in i for i in wing)


def test_suggestions_come_from_top_categories(opponent_433):
    analysis = analyze_matchups(_native_433_lineup(), opponent_433)
    assert analysis.best_suggestion == analysis.suggestions[0]
    assert 1 <= len(analysis.suggestions) <= 2
    scores = [score for _, score in analysis.category_scores]
    assert scores == sorted(scores, reverse=True)
    assert {c for c, _ in analysis.category_scores} == set(CATEGORIES)
    top = analysis.category_scores[0][0]
    assert analysis.best_suggestion == SUGGESTION_PHRASES[top]


def test_evenly_matched_lineup_gets_fallbacks(opponent_433):
    plain = [make_player(f"p{i}", "GK" if i == 0 else "CM", base=50.0) for i in range(11)]
    analysis = analyze_matchups(_lineup(plain), opponent_433)
    assert analysis.insights == (FALLBACK_INSIGHT,)
    assert analysis.suggestions == (FALLBACK_SUGGESTION,)
    assert analysis.best_suggestion == FALLBACK_SUGGESTION
    assert all(score == 0.0 for _, score in analysis.category_scores)
    # ties keep the fixed category order
    assert tuple(c for c, _ in analysis.category_scores) == CATEGORIES


def test_missing_opponent_slot_uses_midpoint_benchmark():
    opponents = [make_opponent(code) for code in OPPONENT_433_SLOTS if code != "11R"]
    analysis = analyze_matchups(_native_433_lineup(), opponents)
    assert any("11R" in i and "midpoint benchmark" in i for i in analysis.insights)


def test_deltas_are_normalised_differences():
    me = make_player("a", "ST", speed=80, stamina=70, strength=60, jumping=90, heading=90, aerial=90)
    them = make_opponent("9", speed=60, stamina=70, strength=70, jumping=60, heading=60, aerial=60)
    d = matchup_deltas(me, them)
    assert d.pace == pytest.approx(0.2)
    assert d.stamina == pytest.approx(0.0)
    assert d.strength == pytest.approx(-0.1)
    assert d.aerial == pytest.approx(0.3)


def test_style_preset_reweights_categories(opponent_433):
    lineup = _native_433_lineup()
    balanced = dict(analyze_matchups(lineup, opponent_433).category_scores)
    counter = dict(analyze_matchups(lineup, opponent_433, tactical_preset("counter")).category_scores)
    assert counter["wings"] > balanced["wings"]


def test_stronger_mirrored_opponent_is_called_a_threat():
    players = [make_player(f"p{i}", "GK" if i == 0 else "CM", base=50.0) for i in range(11)]
    players[9] = make_player("weak_st", "ST", name="Weak Striker", base=50.0, quality=60)
    opponents = [make_opponent(code) for code in OPPONENT_433_SLOTS if code != "9"]
    opponents.append(make_opponent("9", quality=90))
    analysis = analyze_matchups(_lineup(players), opponents)
    assert "Opponent 9 poses a threat to Weak Striker at position 9" in analysis.insights
    assert FALLBACK_INSIGHT not in analysis.insights


def test_quality_advantage_needs_a_real_gap(opponent_433):
    players = [make_player(f"p{i}", "GK" if i == 0 else "CM", base=50.0) for i in range(11)]
    players[0] = make_player("gk", "GK", name="Wall", base=50.0, quality=70)
    players[1] = make_player("rb", "RB", name="Steady", base=50.0, quality=60)
    analysis = analyze_matchups(_lineup(players), opponent_433)
    assert "Wall has a significant advantage over Opponent 1 at position 1" in analysis.insights
    assert not any("Steady" in i for i in analysis.insights)
    assert not any("poses a threat" in i for i in analysis.insights)


def test_quality_calls_skip_the_midpoint_benchmark():
    players = [make_player(f"p{i}", "GK" if i == 0 else "CM", base=50.0) for i in range(11)]
    players[9] = make_player("poor_st", "ST", base=50.0, quality=10)
    opponents = [make_opponent(code) for code in OPPONENT_433_SLOTS if code != "9"]
    analysis = analyze_matchups(_lineup(players), opponents)
    assert not any("poses a threat" in i or "significant advantage" in i for i in analysis.insights)


def test_gap_threshold_is_configurable(opponent_433):
    players = [make_player(f"p{i}", "GK" if i == 0 else "CM", base=50.0) for i in range(11)]
    players[0] = make_player("gk", "GK", name="Wall", base=50.0, quality=60)
    assert analyze_matchups(_lineup(players), opponent_433).insights == (FALLBACK_INSIGHT,)
    loose = TacticalConfig.from_dict({"matchup_thresholds": {"gap": 0.05}})
    assert any("significant advantage" in i for i in analyze_matchups(_lineup(players), opponent_433, loose).insights)


def test_duplicate_opponent_slot_warns_and_keeps_first(opponent_433, caplog):
    duplicate = make_opponent("11R", speed=99)
    with caplog.at_level(logging.WARNING, logger="lineup.players"):
        analysis = analyze_matchups(_native_433_lineup(), list(opponent_433) + [duplicate])
    assert any("Duplicate opponent slot code '11R'" in r.getMessage() for r in caplog.records)
    # the first 11R opponent (pace 50) is still the one compared against
    assert any("Right Winger" in i and "38-point" in i for i in analysis.insights)
