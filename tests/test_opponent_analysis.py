import pytest

from lineup.opponent_analysis import (
    FALLBACK_SUGGESTION,
    OpponentInsights,
    analyze_opponent,
    compute_insights,
    derive_suggestions,
    infer_formation,
    opponent_frame,
)
from lineup.tactical_config import INSIGHT_METRICS

from tests.helpers import OPPONENT_433_SLOTS, make_opponent


def _slow_aerially_weak_433():
    opponents = []
    for code in OPPONENT_433_SLOTS:
        if code in {"2R", "3R", "3L", "2L"}:
            opponents.append(make_opponent(code, speed=60, agility=50, jumping=55, heading=55, aerial=55))
        elif code in {"6", "8R", "8L"}:
            opponents.append(make_opponent(code, stamina=60, tackling=55, positioning=55))
        else:
            opponents.append(make_opponent(code))
    return opponents


def test_backline_pace_blends_speed_and_agility_for_defenders():
    opponents = _slow_aerially_weak_433()
    insights = compute_insights(opponent_frame(opponents))
    assert insights.backline_pace == pytest.approx((60 + 50) / 2)
    assert insights.backline_aerial == pytest.approx(55.0)
    assert insights.midfield_stamina == pytest.approx(60.0)
    assert insights.midfield_pressing == pytest.approx(55.0)
    assert insights.attack_speed == pytest.approx(50.0)


def test_goalkeeper_is_excluded_from_unit_means():
    opponents = [make_opponent(code) for code in OPPONENT_433_SLOTS]
    opponents[0] = make_opponent("1", speed=0, agility=0, jumping=0, heading=0, aerial=0)
    insights = compute_insights(opponent_frame(opponents))
    assert insights.backline_pace == pytest.approx(50.0)
    assert insights.backline_aerial == pytest.approx(50.0)


def test_empty_units_fall_back_to_neutral_value():
    # keeper plus midfield only: no defenders, no attackers
    opponents = [make_opponent("1")] + [make_opponent(code, stamina=30) for code in ("6", "8R", "8L", "10")]
    analysis = analyze_opponent(opponents)
    assert analysis.insights.backline_pace == 50.0
    assert analysis.insights.attack_finishing == 50.0
    assert analysis.insights.midfield_stamina == pytest.approx(30.0)
    assert analysis.group_counts == {"goalkeeper": 1, "defender": 0, "midfielder": 4, "attacker": 0}


def test_shape_is_inferred_from_slot_codes(opponent_433):
    assert infer_formation(opponent_433) == "4-3-3"
    back_three = ["1", "3R", "4", "3L", "2R", "6", "8R", "8L", "2L", "9R", "9L"]
    assert infer_formation([make_opponent(c) for c in back_three]) == "5-3-2"


def test_suggestions_follow_thresholds():
    analysis = analyze_opponent(_slow_aerially_weak_433())
    assert analysis.suggestions[:4] == (
        "Exploit flank pace against a slow back line",
        "Target aerial duels and set pieces",
        "Press high to exploit low midfield stamina",
        "Play through a loose midfield press",
    )
    assert analysis.final_suggestion == (
        "Focus on exploit flank pace against a slow back line and target aerial duels and set pieces"
    )
    assert analysis.shape == "4-3-3"


def test_dangerous_attack_triggers_defensive_suggestions():
    insights = OpponentInsights(
        backline_pace=80.0,
        backline_aerial=80.0,
        midfield_stamina=80.0,
        midfield_pressing=80.0,
        attack_speed=90.0,
        attack_finishing=88.0,
    )
    assert derive_suggestions(insights) == [
        "Hold a deeper line against their pace up front",
        "Deny central chances to clinical finishers",
    ]


def test_well_rounded_opponent_gets_fallback():
    strong = [make_opponent(code, base=80.0) for code in OPPONENT_433_SLOTS]
    analysis = analyze_opponent(strong)
    assert analysis.suggestions == (FALLBACK_SUGGESTION,)
    assert analysis.final_suggestion == FALLBACK_SUGGESTION


def test_insight_fields_match_configured_metrics(opponent_433):
    insights = analyze_opponent(opponent_433).insights
    assert tuple(insights.as_dict()) == INSIGHT_METRICS


def test_frame_has_one_row_per_opponent(opponent_433):
    df = opponent_frame(opponent_433)
    assert len(df) == 11
    assert list(df["slot_code"]) == OPPONENT_433_SLOTS
    assert set(df["bucket"]) == {"goalkeeper", "defender", "midfielder", "attacker"}
