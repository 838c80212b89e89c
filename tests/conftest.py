"""
Pytest Configuration and Fixtures

Shared fixtures for clinical decision support tests.
"""
import pytest
from pathlib import Path
import sys

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from bedside_cds.core.clinical import PatientSnapshot, VitalsLabExtractor


@pytest.fixture
def extractor() -> VitalsLabExtractor:
    return VitalsLabExtractor()


@pytest.fixture
def empty_snapshot() -> PatientSnapshot:
    """Snapshot with no vitals, labs or history."""
    return PatientSnapshot(age=0)


@pytest.fixture
def stable_snapshot(extractor) -> PatientSnapshot:
    """Middle-aged patient with unremarkable vitals (temperature in °F)."""
    return extractor.extract(
        age=40,
        vitals={
            "heartRate": 78,
            "systolicBP": 122,
            "temperature": 98.6,
            "respiratoryRate": 14,
            "glasgowComaScale": 15,
        },
        labs={
            "lactate": 1.1,
            "potassium": 4.2,
            "glucose": 105,
            "whiteBloodCells": 7500,
            "bands": 3,
            "creatinine": 0.9,
        },
    )


@pytest.fixture
def deteriorating_snapshot(extractor) -> PatientSnapshot:
    """Elderly patient with tachycardia, hypotension and fever (°F)."""
    return extractor.extract(
        age=85,
        vitals={"heartRate": 130, "systolicBP": 85, "temperature": 102.0},
        labs={"potassium": 4.0, "glucose": 110},
        medications=["Warfarin", "aspirin"],
        comorbidities=["CHF"],
    )
