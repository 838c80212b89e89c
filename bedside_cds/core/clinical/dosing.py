"""
Medication Dosing Adjustment — Renal / Hepatic

Creatinine clearance by Cockcroft-Gault:

    CrCl = ((140 − age) × weight_kg × sex_factor) / (72 × serum_creatinine_mg_dl)
    sex_factor = 0.85 for female, 1.0 otherwise

Dose scaling is drug-independent:

    renal factor    0.5 if CrCl < 30 | 0.75 if CrCl < 60 | 1.0
    hepatic factor  0.5 severe | 0.75 moderate | 1.0

The adjusted dose is a best-effort textual rewrite: the first number in the
dose string is scaled and re-rendered with one decimal, the rest of the
string (units, route notes) is left as written. Frequencies are lengthened by
plain token substitution (q8h → q12h, q6h → q8h).

CrCl is not clamped. Age ≥ 140 or a negative creatinine gives a meaningless
negative clearance; the request models reject both before they get here.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Dict, List, Sequence, Tuple

from bedside_cds.utils import DosingInputError, get_logger

logger = get_logger(__name__)

FEMALE_FACTOR = 0.85

CRCL_SEVERE   = 30.0    # mL/min
CRCL_MODERATE = 60.0

RENAL_FACTOR_SEVERE   = 0.5
RENAL_FACTOR_MODERATE = 0.75

HEPATIC_FACTORS = {
    "severe": 0.5,
    "moderate": 0.75,
}

RENAL_WARNING   = "Severe renal impairment - monitor closely"
HEPATIC_WARNING = "Severe hepatic impairment - consider alternative"

_DOSE_NUMBER = re.compile(r"\d+(?:\.\d+)?")


@dataclass(frozen=True)
class MedicationOrder:
    name: str
    dose: str
    frequency: str = ""
    route: str = ""


@dataclass(frozen=True)
class DosingAdjustment:
    medication_name: str
    original_dose: str
    creatinine_clearance: float
    renal_factor: float
    hepatic_factor: float
    adjusted_dose: str
    adjusted_frequency: str
    warnings: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "medication_name": self.medication_name,
            "original_dose": self.original_dose,
            "creatinine_clearance": round(self.creatinine_clearance, 2),
            "renal_factor": self.renal_factor,
            "hepatic_factor": self.hepatic_factor,
            "adjusted_dose": self.adjusted_dose,
            "adjusted_frequency": self.adjusted_frequency,
            "warnings": list(self.warnings),
        }


@dataclass(frozen=True)
class MedicationDosingResult:
    creatinine_clearance: float
    adjustments: Tuple[DosingAdjustment, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "creatinine_clearance": round(self.creatinine_clearance, 2),
            "adjustments": [a.to_dict() for a in self.adjustments],
        }


def creatinine_clearance(
    age: int,
    weight_kg: float,
    serum_creatinine: float,
    gender: str,
) -> float:
    """
    Cockcroft-Gault creatinine clearance in mL/min.

    Raises:
        DosingInputError: serum_creatinine is zero.
    """
    gender_factor = FEMALE_FACTOR if (gender or "").strip().lower() == "female" else 1.0
    try:
        return ((140 - age) * weight_kg * gender_factor) / (72 * serum_creatinine)
    except ZeroDivisionError as exc:
        raise DosingInputError(
            "serum creatinine must be non-zero for Cockcroft-Gault",
            details={"serum_creatinine": serum_creatinine},
        ) from exc


def renal_factor(crcl: float) -> float:
    if crcl < CRCL_SEVERE:
        return RENAL_FACTOR_SEVERE
    if crcl < CRCL_MODERATE:
        return RENAL_FACTOR_MODERATE
    return 1.0


def hepatic_factor(liver_function: str) -> float:
    return HEPATIC_FACTORS.get((liver_function or "").lower(), 1.0)


def adjust_dose(dose: str, renal: float, hepatic: float) -> str:
    """
    Scale the first number in a free-text dose.

        >>> adjust_dose("500mg", 0.5, 1.0)
        '250.0mg'
        >>> adjust_dose("as directed", 0.5, 1.0)
        'as directed'
    """
    match = _DOSE_NUMBER.search(dose)
    if match is None:
        return dose
    scaled = float(match.group()) * renal * hepatic
    return f"{dose[:match.start()]}{scaled:.1f}{dose[match.end():]}"


def adjust_frequency(frequency: str, renal: float, hepatic: float) -> str:
    combined = renal * hepatic
    if combined <= 0.5:
        # q8h first so a q6h order is lengthened by one step only
        return frequency.replace("q8h", "q12h").replace("q6h", "q8h")
    if combined <= 0.75:
        return frequency.replace("q6h", "q8h")
    return frequency


def dosing_warnings(crcl: float, liver_function: str) -> Tuple[str, ...]:
    warnings: List[str] = []
    if crcl < CRCL_SEVERE:
        warnings.append(RENAL_WARNING)
    if liver_function == "severe":
        warnings.append(HEPATIC_WARNING)
    return tuple(warnings)


class MedicationDosingAdjuster:
    """Renal/hepatic dose adjustment for a medication list. Stateless."""

    def adjust_medication(
        self,
        order: MedicationOrder,
        crcl: float,
        liver_function: str = "normal",
    ) -> DosingAdjustment:
        renal = renal_factor(crcl)
        hepatic = hepatic_factor(liver_function)
        return DosingAdjustment(
            medication_name=order.name,
            original_dose=order.dose,
            creatinine_clearance=crcl,
            renal_factor=renal,
            hepatic_factor=hepatic,
            adjusted_dose=adjust_dose(order.dose, renal, hepatic),
            adjusted_frequency=adjust_frequency(order.frequency, renal, hepatic),
            warnings=dosing_warnings(crcl, liver_function),
        )

    def adjust(
        self,
        age: int,
        weight_kg: float,
        serum_creatinine: float,
        gender: str,
        medications: Sequence[MedicationOrder],
        liver_function: str = "normal",
    ) -> MedicationDosingResult:
        crcl = creatinine_clearance(age, weight_kg, serum_creatinine, gender)
        if crcl < 0:
            logger.warning(
                f"Negative creatinine clearance {crcl:.2f} mL/min "
                f"(age={age}, creatinine={serum_creatinine}); inputs were not validated"
            )

        adjustments = tuple(
            self.adjust_medication(order, crcl, liver_function) for order in medications
        )
        logger.info(
            f"Dosing: CrCl={crcl:.1f} mL/min, liver={liver_function}, "
            f"{sum(1 for a in adjustments if a.adjusted_dose != a.original_dose)}"
            f"/{len(adjustments)} dose(s) adjusted"
        )
        return MedicationDosingResult(creatinine_clearance=crcl, adjustments=adjustments)
