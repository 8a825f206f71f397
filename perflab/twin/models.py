"""Digital-twin wire contracts and view state — Pydantic v2 models.

Every model is an immutable snapshot: transitions replace values, never patch them.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

RATING_MIN = 1
RATING_MAX = 10


class Modality(str, Enum):
    running = "Running"
    strength = "Strength"
    hypertrophy = "Hypertrophy"
    power = "Power"
    mixed = "Mixed"


class WorkoutLog(BaseModel):
    """A proposed or committed training event (sensor input for D(t))."""

    model_config = ConfigDict(frozen=True)

    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    modality: Modality

    duration_minutes: int = Field(gt=0)
    session_rpe: int = Field(ge=RATING_MIN, le=RATING_MAX)

    sleep_quality: int = Field(ge=RATING_MIN, le=RATING_MAX)  # 1 = terrible
    life_stress_inverse: int = Field(ge=RATING_MIN, le=RATING_MAX)  # 1 = high stress, 10 = low

    avg_rir: float | None = Field(default=None, ge=0, le=10)
    distance_meters: float | None = Field(default=None, ge=0)
    total_volume_load: float | None = Field(default=None, ge=0)

    def to_payload(self) -> dict[str, Any]:
        """JSON body for the wire. Omitted optionals are left out entirely."""
        return self.model_dump(mode="json", exclude_none=True)


class UnifiedStateVector(BaseModel):
    """Server snapshot of S(t) after a committed transition."""

    model_config = ConfigDict(frozen=True)

    timestamp: datetime

    # Capacities (ceilings)
    c_met_aerobic: float
    c_nm_force: float
    c_struct: float
    b_met_anaerobic: float

    # Fatigues, nominally 0–100 (not guaranteed by the server)
    f_met_systemic: float
    f_nm_peripheral: float
    f_nm_central: float
    f_struct_damage: float

    s_struct_signal: float

    habit_strength: float  # 0–1
    skill_state: dict[str, float] = Field(default_factory=dict)  # movement -> proficiency 0–1


class WorkoutPrescription(BaseModel):
    """Controller output u(t)."""

    model_config = ConfigDict(frozen=True)

    type: str
    focus: str
    rationale: str
    duration_min: float = Field(gt=0)


class StressDose(BaseModel):
    """Hypothetical D(t) for a log that has not been committed."""

    model_config = ConfigDict(frozen=True)

    d_met_systemic: float = Field(ge=0)
    d_nm_peripheral: float = Field(ge=0)
    d_nm_central: float = Field(ge=0)
    d_struct_damage: float = Field(ge=0)
    d_struct_signal: float = Field(ge=0)


class PingResponse(BaseModel):
    status: str


class ApiError(BaseModel):
    """Normalized failure value — every error path ends here before display."""

    model_config = ConfigDict(frozen=True)

    message: str
    status: int | None = None
    details: Any = None
    kind: str | None = None  # "configuration" | "transport" | "request" | "validation"


# ---------------------------------------------------------------------------
# 1.5-mile field test metrics
# ---------------------------------------------------------------------------


class MetricsRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    age: int = Field(ge=15, le=80)
    sex: Literal["male", "female"]
    time_300m: str = Field(pattern=r"^\d{1,2}:\d{2}$")  # mm:ss
    time_1p5mi: str = Field(pattern=r"^\d{1,2}:\d{2}$")  # mm:ss


class Zone(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    slow_pace_sec: float
    fast_pace_sec: float
    notes: str = ""


class MetricsResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    vo2_max: float
    vo2_category: str
    result_category: str
    fatigue_percent: float
    fatigue_profile: str
    race_pace_sec_per_mile: float
    zones: list[Zone] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Session output
# ---------------------------------------------------------------------------


class SessionSnapshot(BaseModel):
    """Everything the orchestrator currently exposes. Presentation reads only this."""

    model_config = ConfigDict(frozen=True)

    goal: str
    state: UnifiedStateVector | None = None
    prescription: WorkoutPrescription | None = None
    dose: StressDose | None = None
    metrics: MetricsResponse | None = None
    error: ApiError | None = None

    prescription_pending: bool = False
    commit_pending: bool = False
    simulate_pending: bool = False
    metrics_pending: bool = False


# ---------------------------------------------------------------------------
# Dashboard view state (derived, never stored)
# ---------------------------------------------------------------------------


class LabeledValue(BaseModel):
    label: str
    value: float
    display: str


class FatigueBar(BaseModel):
    label: str
    raw: float
    pct: float  # clamped 0–100
    display: str  # "42.5%"


class SkillRow(BaseModel):
    movement: str
    pct: float
    display: str  # "80%"


class PrescriptionCard(BaseModel):
    type: str
    focus: str
    rationale: str
    duration_display: str  # "45 min"


class StateCard(BaseModel):
    updated_at: datetime
    capacities: list[LabeledValue] = Field(default_factory=list)
    habit_strength_pct: float
    habit_strength_display: str
    struct_signal: LabeledValue
    skills: list[SkillRow] = Field(default_factory=list)
    fatigues: list[FatigueBar] = Field(default_factory=list)


class DosePreview(BaseModel):
    components: list[LabeledValue] = Field(default_factory=list)


class ZoneRow(BaseModel):
    name: str
    slower: str  # mm:ss
    faster: str  # mm:ss
    notes: str = ""


class MetricsCard(BaseModel):
    vo2_max: str
    vo2_category: str
    race_pace: str  # "07:45 /mi"
    result_category: str
    fatigue_percent: str
    fatigue_profile: str
    zones: list[ZoneRow] = Field(default_factory=list)


class DashboardView(BaseModel):
    goal: str
    goal_label: str
    goal_description: str = ""
    goals: list[str] = Field(default_factory=list)
    error: str | None = None
    loading_prescription: bool = False
    logging_workout: bool = False
    simulating: bool = False
    computing_metrics: bool = False

    prescription: PrescriptionCard | None = None
    state: StateCard | None = None
    dose: DosePreview | None = None
    metrics: MetricsCard | None = None
