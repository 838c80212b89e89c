"""
Clinical Decision Support Request Models
"""
from pydantic import BaseModel, Field
from typing import Dict, List, Optional

from bedside_cds.core.clinical import MedicationOrder, PatientSnapshot, VitalsLabExtractor


class PatientSnapshotRequest(BaseModel):
    """Patient state for risk scoring, sepsis screening and alerting."""
    patient_id: str = Field(default="ANONYMOUS")
    age: int = Field(..., ge=0, description="Age in whole years")
    vital_signs: Dict[str, float] = Field(
        default_factory=dict,
        description="heartRate, systolicBP, temperature, respiratoryRate, glasgowComaScale",
    )
    lab_results: Dict[str, float] = Field(
        default_factory=dict,
        description="lactate, potassium, glucose, whiteBloodCells, bands, creatinine",
    )
    medications: List[str] = []
    comorbidities: List[str] = []
    symptoms: List[str] = []
    allergies: List[str] = []

    def to_snapshot(self) -> PatientSnapshot:
        return VitalsLabExtractor().extract(
            age=self.age,
            vitals=self.vital_signs,
            labs=self.lab_results,
            medications=self.medications,
            comorbidities=self.comorbidities,
            symptoms=self.symptoms,
            allergies=self.allergies,
        )


class SepsisAnalysisRequest(BaseModel):
    """Inputs for the qSOFA / SIRS / lactate sepsis screen."""
    patient_id: str = Field(default="ANONYMOUS")
    vital_signs: Dict[str, float] = Field(default_factory=dict)
    lab_results: Dict[str, float] = Field(default_factory=dict)

    def to_snapshot(self) -> PatientSnapshot:
        return VitalsLabExtractor().extract(age=0, vitals=self.vital_signs, labs=self.lab_results)


class FallRiskRequest(BaseModel):
    """Morse Fall Scale items."""
    patient_id: str = Field(default="ANONYMOUS")
    history_of_falls: bool = False
    secondary_diagnosis: bool = False
    ambulatory_aid: str = Field(default="none", description="none, crutches_cane_walker or furniture")
    iv_therapy: bool = False
    gait: str = Field(default="normal", description="normal, weak or impaired")
    mental_status: str = Field(default="oriented", description="oriented or forgets_limitations")


class BradenScaleRequest(BaseModel):
    """Braden Scale sub-scores. Lower is worse."""
    patient_id: str = Field(default="ANONYMOUS")
    sensory_perception: int = Field(..., ge=1, le=4)
    moisture: int = Field(..., ge=1, le=4)
    activity: int = Field(..., ge=1, le=4)
    mobility: int = Field(..., ge=1, le=4)
    nutrition: int = Field(..., ge=1, le=4)
    friction_shear: int = Field(..., ge=1, le=3)


class MedicationOrderRequest(BaseModel):
    """A single medication order as written."""
    name: str
    dose: str = Field(..., description="Free text, e.g. '500mg'")
    frequency: str = ""
    route: Optional[str] = None

    def to_order(self) -> MedicationOrder:
        return MedicationOrder(
            name=self.name,
            dose=self.dose,
            frequency=self.frequency,
            route=self.route or "",
        )


class MedicationDosingRequest(BaseModel):
    """Inputs for renal / hepatic dose adjustment."""
    patient_id: str = Field(default="ANONYMOUS")
    age: int = Field(..., ge=0, lt=140)
    weight_kg: float = Field(..., gt=0)
    serum_creatinine: float = Field(..., gt=0, description="mg/dL")
    gender: str = Field(..., description="'female' applies the 0.85 factor")
    liver_function: str = Field(default="normal", description="normal, moderate or severe")
    medications: List[MedicationOrderRequest] = Field(..., min_length=1)
