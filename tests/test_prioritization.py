"""Property-based and unit tests for the Prioritization Engine.

Uses Hypothesis to verify:
    1. test_scores_always_bounded      – value and readiness stay in [1, 10]
    2. test_value_score_monotonic      – larger benefit ⇒ value score ≥
    3. test_quadrant_matches_threshold – quadrant agrees with the inclusive split
    4. test_matrix_deterministic       – same inputs ⇒ identical matrix
"""
from datetime import datetime, timezone

import pytest
from hypothesis import HealthCheck, given, settings as h_settings
from hypothesis import strategies as st

from conftest import make_readiness, make_use_case

from app.models.enums import Quadrant, Track
from app.models.validation import ValidationResult, ValidationSummary
from app.scoring.prioritization import PrioritizationEngine, assign_quadrant, assign_track

# ── Hypothesis configuration ──────────────────────────────────────────────────
h_settings.register_profile(
    "ci",
    max_examples=300,
    suppress_health_check=[HealthCheck.too_slow],
)
h_settings.load_profile("ci")

_benefit = st.floats(min_value=0.0, max_value=1e9, allow_nan=False, allow_infinity=False)
_effort = st.one_of(st.none(), st.floats(min_value=1.0, max_value=10.0, allow_nan=False))
_maturity = st.one_of(st.none(), st.floats(min_value=1.0, max_value=5.0, allow_nan=False))
_score = st.floats(min_value=1.0, max_value=10.0, allow_nan=False)


@pytest.fixture
def engine():
    return PrioritizationEngine()


# ── Quadrants and tracks ─────────────────────────────────────────────────────

class TestQuadrants:

    def test_boundary_is_champion(self):
        assert assign_quadrant(7.0, 7.0) == Quadrant.CHAMPION

    def test_just_below_boundary(self):
        assert assign_quadrant(6.99, 7.0) == Quadrant.QUICK_WIN
        assert assign_quadrant(7.0, 6.99) == Quadrant.STRATEGIC
        assert assign_quadrant(6.99, 6.99) == Quadrant.FOUNDATION

    def test_custom_threshold(self):
        assert assign_quadrant(5.0, 5.0, threshold=5.0) == Quadrant.CHAMPION

    @pytest.mark.parametrize("quadrant,complexity,expected", [
        (Quadrant.CHAMPION, 3.0, Track.T1),
        (Quadrant.CHAMPION, 8.0, Track.T2),
        (Quadrant.QUICK_WIN, 5.0, Track.T1),
        (Quadrant.QUICK_WIN, 6.0, Track.T2),
        (Quadrant.STRATEGIC, 6.0, Track.T2),
        (Quadrant.STRATEGIC, 7.0, Track.T3),
        (Quadrant.FOUNDATION, 3.0, Track.T2),
        (Quadrant.FOUNDATION, 4.0, Track.T3),
        (Quadrant.CHAMPION, None, Track.T1),
    ])
    def test_tracks(self, quadrant, complexity, expected):
        assert assign_track(quadrant, complexity) == expected


# ── Scores ────────────────────────────────────────────────────────────────────

class TestScores:

    def test_value_score_floor_and_ceiling(self, engine):
        assert engine.value_score(0.0) == 1.0
        assert engine.value_score(50_000.0) == 1.0
        assert engine.value_score(10_000_000.0) == 10.0
        assert engine.value_score(50_000_000.0) == 10.0

    def test_value_score_is_logarithmic(self, engine):
        assert engine.value_score(1_000_000.0) == pytest.approx(6.09, abs=0.01)

    def test_readiness_best_case(self, engine):
        use_case = make_use_case(data_readiness=10.0, complexity=1.0, integration_effort=1.0)
        assert engine.readiness_score(use_case) == 10.0

    def test_missing_inputs_use_midpoint(self, engine):
        # 0.4 × 5 + 0.3 × 6 + 0.3 × 6
        assert engine.readiness_score(make_use_case()) == 5.6

    def test_survey_blend(self, engine):
        # 0.7 × 5.6 + 0.3 × 10
        assert engine.readiness_score(make_use_case(), make_readiness(5.0)) == 6.92

    def test_invalid_range_rejected(self):
        with pytest.raises(ValueError):
            PrioritizationEngine(value_floor=0)
        with pytest.raises(ValueError):
            PrioritizationEngine(value_floor=1_000_000, value_ceiling=500_000)

    def test_score_use_cases_returns_copies(self, engine):
        original = make_use_case(cost_savings=2_000_000.0)
        [scored] = engine.score_use_cases([original])
        assert original.value_score == 1.0
        assert scored.value_score > 1.0


# ── Matrix ────────────────────────────────────────────────────────────────────

class TestMatrix:

    def test_counts_cover_every_bucket(self, engine):
        matrix = engine.build_matrix([
            make_use_case("UC-001", cost_savings=9_000_000.0, data_readiness=10.0,
                          complexity=1.0, integration_effort=1.0),
            make_use_case("UC-002", cost_savings=10_000.0),
        ])

        assert matrix.assignments[0].quadrant == Quadrant.CHAMPION
        assert matrix.assignments[0].track == Track.T1
        assert matrix.assignments[1].quadrant == Quadrant.FOUNDATION
        assert set(matrix.quadrant_counts) == {q.value for q in Quadrant}
        assert sum(matrix.quadrant_counts.values()) == 2
        assert sum(matrix.track_counts.values()) == 2
        assert matrix.ranked()[0].use_case_id == "UC-001"

    def test_validated_benefit_preferred(self, engine):
        use_case = make_use_case(cost_savings=1_000_000.0)
        validation = ValidationSummary(
            results=[ValidationResult(
                use_case_id="UC-001", original_benefit=1_000_000.0,
                validated_benefit=200_000.0, confidence_level=10.0,
                confidence_factor=0.2,
            )],
            total_original_value=1_000_000.0,
            total_validated_value=200_000.0,
            generated_at=datetime.now(timezone.utc),
        )

        [assignment] = engine.build_matrix([use_case], validation=validation).assignments

        assert assignment.benefit_basis == "validated"
        assert assignment.benefit == 200_000.0
        assert assignment.value_score < engine.value_score(1_000_000.0)

    def test_empty_matrix(self, engine):
        matrix = engine.build_matrix([])
        assert matrix.assignments == []
        assert all(count == 0 for count in matrix.quadrant_counts.values())


# ── Properties ────────────────────────────────────────────────────────────────

@given(benefit=_benefit, dr=_effort, cx=_effort, ie=_effort, maturity=_maturity)
def test_scores_always_bounded(benefit, dr, cx, ie, maturity):
    engine = PrioritizationEngine()
    use_case = make_use_case(cost_savings=benefit, data_readiness=dr,
                             complexity=cx, integration_effort=ie)
    readiness = make_readiness(maturity) if maturity is not None else None

    assert 1.0 <= engine.value_score(use_case.total_benefit) <= 10.0
    assert 1.0 <= engine.readiness_score(use_case, readiness) <= 10.0


@given(a=_benefit, b=_benefit)
def test_value_score_monotonic(a, b):
    engine = PrioritizationEngine()
    low, high = sorted((a, b))
    assert engine.value_score(low) <= engine.value_score(high)


@given(value=_score, readiness=_score)
def test_quadrant_matches_threshold(value, readiness):
    quadrant = assign_quadrant(value, readiness)
    assert (quadrant in (Quadrant.CHAMPION, Quadrant.STRATEGIC)) == (value >= 7.0)
    assert (quadrant in (Quadrant.CHAMPION, Quadrant.QUICK_WIN)) == (readiness >= 7.0)


@given(benefits=st.lists(_benefit, min_size=1, max_size=6), maturity=_maturity)
def test_matrix_deterministic(benefits, maturity):
    engine = PrioritizationEngine()
    use_cases = [
        make_use_case(f"UC-{i + 1:03d}", cost_savings=b) for i, b in enumerate(benefits)
    ]
    readiness = make_readiness(maturity) if maturity is not None else None

    first = engine.build_matrix(use_cases, readiness)
    second = engine.build_matrix(use_cases, readiness)

    assert [a.model_dump() for a in first.assignments] == [
        a.model_dump() for a in second.assignments
    ]
