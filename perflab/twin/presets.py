"""Hardcoded workout presets — the form's default draft and quick actions."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone

from perflab.twin.models import Modality, WorkoutLog


@dataclass(frozen=True, slots=True)
class WorkoutPreset:
    id: str
    label: str
    description: str
    modality: Modality
    duration_minutes: int
    session_rpe: int
    sleep_quality: int
    life_stress_inverse: int
    avg_rir: float | None = None

    def build_log(self, now: datetime | None = None) -> WorkoutLog:
        """Fresh log stamped with `now` (UTC wall clock by default)."""
        return WorkoutLog(
            timestamp=now or datetime.now(timezone.utc),
            modality=self.modality,
            duration_minutes=self.duration_minutes,
            session_rpe=self.session_rpe,
            sleep_quality=self.sleep_quality,
            life_stress_inverse=self.life_stress_inverse,
            avg_rir=self.avg_rir,
        )


PRESETS: dict[str, WorkoutPreset] = {
    "default": WorkoutPreset(
        id="default",
        label="Default Draft",
        description="Typical strength session.",
        modality=Modality.strength,
        duration_minutes=45,
        session_rpe=7,
        sleep_quality=5,
        life_stress_inverse=5,
        avg_rir=2,
    ),
    "crash": WorkoutPreset(
        id="crash",
        label="Crash Workout",
        description="RPE 10, low sleep, high stress.",
        modality=Modality.strength,
        duration_minutes=90,
        session_rpe=10,
        sleep_quality=2,
        life_stress_inverse=2,
        avg_rir=0,
    ),
}


def list_presets() -> list[WorkoutPreset]:
    return list(PRESETS.values())


def get_preset(preset_id: str) -> WorkoutPreset | None:
    return PRESETS.get(preset_id)
