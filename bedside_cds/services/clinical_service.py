"""
Clinical Decision Service

Async host for the bedside calculators. Each call is one non-blocking unit
of work; CRITICAL alerts from a composite analysis are handed to the
AlertPublisher in the background and the analysis is returned immediately.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from bedside_cds.config import AlertBusSettings
from bedside_cds.core.clinical import (
    ClinicalAnalysis,
    ClinicalDecisionEngine,
    FallRiskAssessor,
    FallRiskResult,
    MedicationDosingAdjuster,
    MedicationDosingResult,
    PatientSnapshot,
    PressureUlcerResult,
    PressureUlcerRiskAssessor,
    SepsisEarlyWarningCalculator,
    SepsisResult,
)
from bedside_cds.models import (
    BradenScaleRequest,
    FallRiskRequest,
    MedicationDosingRequest,
    SepsisAnalysisRequest,
)
from bedside_cds.utils import get_logger
from .alert_publisher import AlertDispatch, AlertPublisher

logger = get_logger(__name__)


@dataclass(frozen=True)
class AnalysisResponse:
    """A composite analysis plus the handle on its background alert publishes."""
    analysis: ClinicalAnalysis
    dispatch: AlertDispatch

    def to_dict(self) -> Dict[str, Any]:
        data = self.analysis.to_dict()
        data["publish_warnings"] = self.dispatch.warnings
        return data


class ClinicalDecisionService:
    """
    Service wrapper around the clinical calculators.

    1. analyze_patient()              — composite analysis + CRITICAL alert dispatch
    2. assess_sepsis()                — qSOFA / SIRS / lactate screen
    3. assess_fall_risk()             — Morse Fall Scale
    4. assess_pressure_ulcer_risk()   — Braden Scale
    5. calculate_medication_dosing()  — Cockcroft-Gault + renal/hepatic adjustment
    """

    def __init__(
        self,
        engine: Optional[ClinicalDecisionEngine] = None,
        publisher: Optional[AlertPublisher] = None,
        settings: Optional[AlertBusSettings] = None,
    ):
        self.engine = engine or ClinicalDecisionEngine()
        self.publisher = publisher or AlertPublisher.from_settings(settings)
        self.sepsis = SepsisEarlyWarningCalculator()
        self.fall_risk = FallRiskAssessor()
        self.pressure_ulcer = PressureUlcerRiskAssessor()
        self.dosing = MedicationDosingAdjuster()

    async def analyze_patient(self, snapshot: PatientSnapshot) -> AnalysisResponse:
        analysis = self.engine.analyze(snapshot)
        dispatch = self.publisher.dispatch(analysis.alerts_to_publish)
        return AnalysisResponse(analysis=analysis, dispatch=dispatch)

    async def assess_sepsis(self, request: SepsisAnalysisRequest) -> SepsisResult:
        result = self.sepsis.assess(request.to_snapshot())
        logger.info(
            f"Sepsis screen for {request.patient_id}: qSOFA {result.q_sofa_score}, "
            f"SIRS {result.sirs_score} ({result.sepsis_risk.value})"
        )
        return result

    async def assess_fall_risk(self, request: FallRiskRequest) -> FallRiskResult:
        result = self.fall_risk.assess(
            history_of_falls=request.history_of_falls,
            secondary_diagnosis=request.secondary_diagnosis,
            ambulatory_aid=request.ambulatory_aid,
            iv_therapy=request.iv_therapy,
            gait=request.gait,
            mental_status=request.mental_status,
        )
        logger.info(
            f"Fall risk for {request.patient_id}: Morse {result.morse_score} ({result.risk_level.value})"
        )
        return result

    async def assess_pressure_ulcer_risk(self, request: BradenScaleRequest) -> PressureUlcerResult:
        result = self.pressure_ulcer.assess(
            sensory_perception=request.sensory_perception,
            moisture=request.moisture,
            activity=request.activity,
            mobility=request.mobility,
            nutrition=request.nutrition,
            friction_shear=request.friction_shear,
        )
        logger.info(
            f"Pressure ulcer risk for {request.patient_id}: "
            f"Braden {result.braden_score} ({result.risk_level.value})"
        )
        return result

    async def calculate_medication_dosing(self, request: MedicationDosingRequest) -> MedicationDosingResult:
        return self.dosing.adjust(
            age=request.age,
            weight_kg=request.weight_kg,
            serum_creatinine=request.serum_creatinine,
            gender=request.gender,
            medications=[m.to_order() for m in request.medications],
            liver_function=request.liver_function,
        )

    async def aclose(self) -> None:
        """Drain outstanding alert publishes and release the bus transport."""
        await self.publisher.aclose()
