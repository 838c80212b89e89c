"""
Unit Tests for Pressure Ulcer Risk Assessment (Braden Scale)
"""
from datetime import timedelta

import pytest

from bedside_cds.core.clinical import PressureUlcerRisk, PressureUlcerRiskAssessor
from bedside_cds.core.clinical.pressure_ulcer import classify_pressure_ulcer_risk


@pytest.fixture
def assessor() -> PressureUlcerRiskAssessor:
    return PressureUlcerRiskAssessor()


class TestClassification:
    """Tests for Braden tier boundaries (lower is worse)."""

    @pytest.mark.parametrize("score,expected", [
        (6, PressureUlcerRisk.VERY_HIGH),
        (9, PressureUlcerRisk.VERY_HIGH),
        (10, PressureUlcerRisk.HIGH),
        (12, PressureUlcerRisk.HIGH),
        (13, PressureUlcerRisk.MODERATE),
        (14, PressureUlcerRisk.MODERATE),
        (15, PressureUlcerRisk.MILD),
        (18, PressureUlcerRisk.MILD),
        (19, PressureUlcerRisk.LOW),
        (23, PressureUlcerRisk.LOW),
    ])
    def test_boundaries(self, score, expected):
        assert classify_pressure_ulcer_risk(score) == expected


class TestPressureUlcerRiskAssessor:
    """Tests for PressureUlcerRiskAssessor."""

    def test_minimum_score(self, assessor):
        result = assessor.assess(1, 1, 1, 1, 1, 1)

        assert result.braden_score == 6
        assert result.risk_level == PressureUlcerRisk.VERY_HIGH
        assert result.reassess_interval == timedelta(hours=8)
        assert "Turn every 1-2 hours" in result.interventions

    def test_maximum_score(self, assessor):
        result = assessor.assess(4, 4, 4, 4, 4, 3)

        assert result.braden_score == 23
        assert result.risk_level == PressureUlcerRisk.LOW
        assert result.reassessment_label == "Weekly"
        assert result.interventions == ("Standard precautions", "Skin assessment weekly")

    def test_moderate(self, assessor):
        result = assessor.assess(
            sensory_perception=3, moisture=2, activity=2,
            mobility=2, nutrition=2, friction_shear=2,
        )

        assert result.braden_score == 13
        assert result.risk_level == PressureUlcerRisk.MODERATE
        assert result.reassessment_label == "Every 24 hours"

    def test_mild_reassessed_every_48_hours(self, assessor):
        result = assessor.assess(3, 3, 3, 3, 3, 2)

        assert result.braden_score == 17
        assert result.risk_level == PressureUlcerRisk.MILD
        assert result.reassess_interval == timedelta(hours=48)

    def test_to_dict(self, assessor):
        data = assessor.assess(2, 2, 2, 2, 1, 1).to_dict()

        assert data["braden_score"] == 10
        assert data["risk_level"] == "HIGH"
        assert data["reassessment_interval"] == "Every 8 hours"
