"""
Patient Snapshot and Vitals/Lab Extraction

A PatientSnapshot is the immutable, request-scoped input shared by the risk
scoring engine, the sepsis calculator and the alert generator.

VitalsLabExtractor turns the weakly-typed maps handed over by upstream
services into a snapshot. Every field it reads is declared below together
with its default; anything it cannot read is recorded in a DataCompleteness
record instead of being silently coerced.

Missing-data policy:
  - An absent vital or lab has no value (None) and never fires a rule.
  - glasgowComaScale defaults to 15, so the qSOFA mentation term cannot fire
    on missing data.
  - lactate is reported as 0.0 when absent.
  - Callers that need to know whether a low score is real should inspect
    snapshot.completeness: missing data lowers computed risk.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from bedside_cds.utils import SnapshotError, get_logger

logger = get_logger(__name__)

# ── Field vocabulary ─────────────────────────────────────────────────────────
HEART_RATE         = "heartRate"          # bpm
SYSTOLIC_BP        = "systolicBP"         # mmHg
TEMPERATURE        = "temperature"        # °F for risk scoring, °C for SIRS
RESPIRATORY_RATE   = "respiratoryRate"    # breaths/min
GLASGOW_COMA_SCALE = "glasgowComaScale"   # 3–15

LACTATE            = "lactate"            # mmol/L
POTASSIUM          = "potassium"          # mEq/L
GLUCOSE            = "glucose"            # mg/dL
WHITE_BLOOD_CELLS  = "whiteBloodCells"    # cells/µL
BANDS              = "bands"              # % of WBC
CREATININE         = "creatinine"         # mg/dL

VITAL_KEYS: Tuple[str, ...] = (
    HEART_RATE, SYSTOLIC_BP, TEMPERATURE, RESPIRATORY_RATE, GLASGOW_COMA_SCALE,
)
LAB_KEYS: Tuple[str, ...] = (
    LACTATE, POTASSIUM, GLUCOSE, WHITE_BLOOD_CELLS, BANDS, CREATININE,
)

DEFAULT_GCS = 15.0
DEFAULT_LACTATE = 0.0


@dataclass(frozen=True)
class DataCompleteness:
    """
    What the extractor could not use from the raw input.

    Attributes:
        missing:      Known vitals/labs that were absent.
        invalid:      Known vitals/labs present but not readable as a number.
        unrecognized: Keys outside the known vocabulary (dropped by the extractor).
    """
    missing: Tuple[str, ...] = ()
    invalid: Tuple[str, ...] = ()
    unrecognized: Tuple[str, ...] = ()

    @property
    def is_complete(self) -> bool:
        return not self.missing and not self.invalid

    @classmethod
    def assess(
        cls,
        vitals: Mapping[str, Any],
        labs: Mapping[str, Any],
        invalid: Iterable[str] = (),
    ) -> "DataCompleteness":
        invalid = tuple(invalid)
        missing = tuple(
            k for k in VITAL_KEYS + LAB_KEYS
            if k not in invalid and k not in vitals and k not in labs
        )
        unrecognized = tuple(k for k in vitals if k not in VITAL_KEYS) + \
                       tuple(k for k in labs if k not in LAB_KEYS)
        return cls(missing=missing, invalid=invalid, unrecognized=unrecognized)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "is_complete": self.is_complete,
            "missing": list(self.missing),
            "invalid": list(self.invalid),
            "unrecognized": list(self.unrecognized),
        }


@dataclass(frozen=True)
class PatientSnapshot:
    """
    Immutable patient state for a single scoring request.

    vitals/labs are read with the same rules as VitalsLabExtractor: numeric
    strings become floats, unreadable samples are dropped and listed in
    completeness.invalid, and keys outside the known vocabulary are dropped
    and listed in completeness.unrecognized. The list fields become tuples of
    strings. When `completeness` is not supplied it is derived from the
    input maps.

    Raises:
        SnapshotError: age is not a non-negative integer, vitals/labs are not
                       mappings, or a list field is a bare string.
    """
    age: int = 0
    vitals: Mapping[str, float] = field(default_factory=dict)
    labs: Mapping[str, float] = field(default_factory=dict)
    medications: Tuple[str, ...] = ()
    comorbidities: Tuple[str, ...] = ()
    symptoms: Tuple[str, ...] = ()
    allergies: Tuple[str, ...] = ()
    completeness: Optional[DataCompleteness] = None

    def __post_init__(self):
        if isinstance(self.age, bool) or not isinstance(self.age, int) or self.age < 0:
            raise SnapshotError(
                f"age must be a non-negative integer, got {self.age!r}", field="age"
            )

        invalid: List[str] = []
        vitals = _read_samples(self.vitals, VITAL_KEYS, "vitals", invalid)
        labs = _read_samples(self.labs, LAB_KEYS, "labs", invalid)
        if self.completeness is None:
            # judged on the raw maps: the clean ones no longer hold unrecognized keys
            object.__setattr__(
                self,
                "completeness",
                DataCompleteness.assess(self.vitals or {}, self.labs or {}, invalid=invalid),
            )

        object.__setattr__(self, "vitals", MappingProxyType(vitals))
        object.__setattr__(self, "labs", MappingProxyType(labs))
        for name in ("medications", "comorbidities", "symptoms", "allergies"):
            object.__setattr__(self, name, _to_strings(getattr(self, name), name))

    # ── Accessors ────────────────────────────────────────────────────────
    def vital(self, name: str) -> Optional[float]:
        """Value of a vital sign, or None if it was not supplied."""
        return self.vitals.get(name)

    def lab(self, name: str) -> Optional[float]:
        """Value of a lab result, or None if it was not supplied."""
        return self.labs.get(name)

    @property
    def glasgow_coma_scale(self) -> float:
        gcs = self.vital(GLASGOW_COMA_SCALE)
        return DEFAULT_GCS if gcs is None else gcs

    @property
    def lactate(self) -> float:
        lactate = self.lab(LACTATE)
        return DEFAULT_LACTATE if lactate is None else lactate

    def to_dict(self) -> Dict[str, Any]:
        return {
            "age": self.age,
            "vitals": dict(self.vitals),
            "labs": dict(self.labs),
            "medications": list(self.medications),
            "comorbidities": list(self.comorbidities),
            "symptoms": list(self.symptoms),
            "allergies": list(self.allergies),
            "completeness": self.completeness.to_dict(),
        }


def _to_number(value: Any) -> Optional[float]:
    """Read a numeric sample; None for anything that is not a finite number."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def _to_strings(values: Any, field_name: str) -> Tuple[str, ...]:
    if values is None:
        return ()
    if isinstance(values, str) or not isinstance(values, Iterable):
        raise SnapshotError(f"{field_name} must be a list of strings", field=field_name)
    return tuple(str(v).strip() for v in values if v is not None and str(v).strip())


def _read_samples(
    raw: Optional[Mapping[str, Any]],
    known: Tuple[str, ...],
    field_name: str,
    invalid: List[str],
) -> Dict[str, float]:
    """Known keys of `raw` read as floats; unreadable keys go to `invalid`."""
    if raw is None:
        return {}
    if not isinstance(raw, Mapping):
        raise SnapshotError(f"{field_name} must be a mapping", field=field_name)

    samples: Dict[str, float] = {}
    for key, value in raw.items():
        if key not in known:
            continue
        number = _to_number(value)
        if number is None:
            invalid.append(key)
        else:
            samples[key] = number
    return samples


class VitalsLabExtractor:
    """
    Builds PatientSnapshots from weakly-typed upstream maps.

    Numeric samples may arrive as int, float or numeric strings. Booleans,
    NaN/inf and non-numeric strings are rejected into
    DataCompleteness.invalid and treated as missing.
    """

    def extract(
        self,
        age: Any,
        vitals: Optional[Mapping[str, Any]] = None,
        labs: Optional[Mapping[str, Any]] = None,
        medications: Any = None,
        comorbidities: Any = None,
        symptoms: Any = None,
        allergies: Any = None,
    ) -> PatientSnapshot:
        """
        Build a snapshot from raw maps.

        Raises:
            SnapshotError: age is not a non-negative integer, vitals/labs are
                           not mappings, or a list field is not a list.
        """
        snapshot = PatientSnapshot(
            age=self._read_age(age),
            vitals=vitals,
            labs=labs,
            medications=medications,
            comorbidities=comorbidities,
            symptoms=symptoms,
            allergies=allergies,
        )

        completeness = snapshot.completeness
        if completeness.invalid:
            logger.warning(
                f"VitalsLabExtractor: unreadable values treated as missing: "
                f"{', '.join(completeness.invalid)}"
            )
        if completeness.unrecognized:
            logger.debug(
                f"VitalsLabExtractor: unrecognized keys ignored for scoring: "
                f"{', '.join(completeness.unrecognized)}"
            )
        return snapshot

    def extract_from_mapping(self, data: Mapping[str, Any]) -> PatientSnapshot:
        """
        Build a snapshot from a single request-shaped dict.

        Accepts both the upstream camelCase keys (patientAge, vitalSigns,
        labResults) and snake_case equivalents.
        """
        if not isinstance(data, Mapping):
            raise SnapshotError("snapshot payload must be a mapping", field="payload")

        def pick(*names: str) -> Any:
            for name in names:
                if name in data:
                    return data[name]
            return None

        return self.extract(
            age=pick("patientAge", "age"),
            vitals=pick("vitalSigns", "vital_signs", "vitals"),
            labs=pick("labResults", "lab_results", "labs"),
            medications=pick("medications"),
            comorbidities=pick("comorbidities"),
            symptoms=pick("symptoms"),
            allergies=pick("allergies"),
        )

    # ------------------------------------------------------------------
    @staticmethod
    def _read_age(age: Any) -> int:
        if isinstance(age, bool) or age is None:
            raise SnapshotError("age is required and must be an integer", field="age")
        if isinstance(age, float) and age.is_integer():
            age = int(age)
        if not isinstance(age, int) or age < 0:
            raise SnapshotError(f"age must be a non-negative integer, got {age!r}", field="age")
        return age
