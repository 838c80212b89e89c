"""
Unit Tests for Composite Risk Scoring

Tests for RiskScoringEngine contributions, tiers and invariants.
"""
from datetime import timedelta

import pytest

from bedside_cds.core.clinical import PatientSnapshot, RiskLevel, RiskScoringEngine
from bedside_cds.core.clinical.risk_scoring import (
    age_contribution,
    classify_risk,
    heart_rate_contribution,
    next_review_interval,
    systolic_bp_contribution,
    temperature_contribution,
)


@pytest.fixture
def engine() -> RiskScoringEngine:
    return RiskScoringEngine()


class TestContributions:
    """Tests for per-factor contributions."""

    @pytest.mark.parametrize("age,expected", [
        (0, 0.0), (49, 0.0), (50, 0.1), (64, 0.1), (65, 0.2), (79, 0.2), (80, 0.3), (101, 0.3),
    ])
    def test_age(self, age, expected):
        assert age_contribution(age) == expected

    @pytest.mark.parametrize("hr,expected", [
        (None, 0.0), (75, 0.0), (60, 0.0), (100, 0.0),
        (101, 0.1), (59, 0.1), (121, 0.2), (49, 0.2),
    ])
    def test_heart_rate(self, hr, expected):
        assert heart_rate_contribution(hr) == expected

    @pytest.mark.parametrize("sbp,expected", [
        (None, 0.0), (120, 0.0), (100, 0.0), (160, 0.0),
        (161, 0.15), (99, 0.15), (181, 0.25), (89, 0.25),
    ])
    def test_systolic_bp(self, sbp, expected):
        assert systolic_bp_contribution(sbp) == expected

    @pytest.mark.parametrize("temp,expected", [
        (None, 0.0), (98.6, 0.0), (100.4, 0.0), (100.5, 0.1),
        (101.6, 0.2), (95.9, 0.2), (97.0, 0.0),
    ])
    def test_temperature(self, temp, expected):
        assert temperature_contribution(temp) == expected


class TestClassification:
    """Tests for risk tiers and review intervals."""

    @pytest.mark.parametrize("score,level,hours", [
        (0.0, RiskLevel.LOW, 8),
        (0.4, RiskLevel.LOW, 8),
        (0.41, RiskLevel.MODERATE, 4),
        (0.6, RiskLevel.MODERATE, 4),
        (0.61, RiskLevel.HIGH, 2),
        (0.8, RiskLevel.HIGH, 2),
        (0.81, RiskLevel.CRITICAL, 1),
        (1.0, RiskLevel.CRITICAL, 1),
    ])
    def test_tiers(self, score, level, hours):
        assert classify_risk(score) == level
        assert next_review_interval(score) == timedelta(hours=hours)


class TestRiskScoringEngine:
    """Tests for RiskScoringEngine."""

    def test_empty_snapshot(self, engine, empty_snapshot):
        """Test no data means no risk."""
        result = engine.score(empty_snapshot)

        assert result.risk_score == 0.0
        assert result.risk_level == RiskLevel.LOW
        assert result.next_review_in == timedelta(hours=8)

    def test_stable_patient_low(self, engine, stable_snapshot):
        result = engine.score(stable_snapshot)
        assert result.risk_score == 0.0
        assert result.risk_level == RiskLevel.LOW

    def test_critical_patient(self, engine):
        """Test 0.3 + 0.2 + 0.25 + 0.2 = 0.95 is CRITICAL."""
        snapshot = PatientSnapshot(
            age=85,
            vitals={"heartRate": 130.0, "systolicBP": 85.0, "temperature": 102.0},
        )
        result = engine.score(snapshot)

        assert result.risk_score == pytest.approx(0.95)
        assert result.risk_level == RiskLevel.CRITICAL
        assert result.next_review_in == timedelta(hours=1)

    def test_score_capped_at_one(self, engine, deteriorating_snapshot):
        result = engine.score(deteriorating_snapshot)
        assert result.risk_score == 1.0

    def test_boundary_not_affected_by_float_drift(self, engine):
        """Test 0.2 + 0.1 + 0.1 lands exactly on 0.4 and stays LOW."""
        snapshot = PatientSnapshot(
            age=65,
            vitals={"heartRate": 110.0, "temperature": 100.5},
        )
        result = engine.score(snapshot)

        assert result.risk_score == 0.4
        assert result.risk_level == RiskLevel.LOW

    def test_history_weights(self, engine):
        """Test 0.05 per comorbidity and 0.02 per medication."""
        snapshot = PatientSnapshot(
            age=30,
            comorbidities=("diabetes", "COPD"),
            medications=("metformin", "salbutamol", "lisinopril"),
        )
        assert engine.score(snapshot).risk_score == pytest.approx(0.16)

    def test_contributions_breakdown(self, engine):
        snapshot = PatientSnapshot(age=70, vitals={"heartRate": 55.0})
        contributions = engine.contributions(snapshot)

        assert contributions["age"] == 0.2
        assert contributions["heart_rate"] == 0.1
        assert contributions["systolic_bp"] == 0.0

    def test_score_bounds(self, engine):
        """Test the score stays in [0, 1] across a grid of inputs."""
        for age in (0, 55, 70, 90):
            for hr in (30, 80, 110, 180):
                for sbp in (60, 95, 120, 170, 220):
                    snapshot = PatientSnapshot(
                        age=age,
                        vitals={"heartRate": float(hr), "systolicBP": float(sbp)},
                        comorbidities=tuple(f"c{i}" for i in range(age % 7)),
                    )
                    score = engine.score(snapshot).risk_score
                    assert 0.0 <= score <= 1.0

    def test_monotonic_in_comorbidities(self, engine):
        """Test adding a comorbidity never lowers the score."""
        previous = 0.0
        for count in range(25):
            snapshot = PatientSnapshot(
                age=60,
                vitals={"heartRate": 105.0},
                comorbidities=tuple(f"c{i}" for i in range(count)),
            )
            score = engine.score(snapshot).risk_score
            assert score >= previous
            previous = score

    def test_monotonic_in_medications(self, engine):
        previous = 0.0
        for count in range(60):
            snapshot = PatientSnapshot(age=82, medications=tuple(f"m{i}" for i in range(count)))
            score = engine.score(snapshot).risk_score
            assert score >= previous
            previous = score

    def test_idempotent(self, engine, deteriorating_snapshot):
        assert engine.score(deteriorating_snapshot) == engine.score(deteriorating_snapshot)

    def test_to_dict(self, engine, empty_snapshot):
        data = engine.score(empty_snapshot).to_dict()
        assert data == {"risk_score": 0.0, "risk_level": "LOW", "next_review_in_hours": 8.0}
