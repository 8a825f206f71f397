"""View builders — SessionSnapshot in, DashboardView out.

Purely derived: no state of its own, so the view can always be rebuilt from
the session's latest snapshot. Missing pieces render as None, never raise.
"""

from __future__ import annotations

from perflab.twin import features
from perflab.twin.display_map import (
    CAPACITY_FIELDS,
    DOSE_FIELDS,
    FATIGUE_FIELDS,
    SIGNAL_FIELD,
    FieldDisplay,
)
from perflab.twin.goals_config import get_goal, list_goals
from perflab.twin.models import (
    DashboardView,
    DosePreview,
    FatigueBar,
    LabeledValue,
    MetricsCard,
    MetricsResponse,
    PrescriptionCard,
    SessionSnapshot,
    SkillRow,
    StateCard,
    StressDose,
    UnifiedStateVector,
    WorkoutPrescription,
    ZoneRow,
)


def _labeled(source: object, cfg: FieldDisplay, digits: int = 1) -> LabeledValue:
    value = float(getattr(source, cfg.field))
    if cfg.clamp:
        value = features.clamp_pct(value)
    return LabeledValue(label=cfg.label, value=value, display=features.format_fixed(value, digits))


def build_fatigue_bar(label: str, raw: float | None) -> FatigueBar:
    pct = features.clamp_pct(raw)
    return FatigueBar(label=label, raw=raw or 0.0, pct=pct, display=features.format_pct(pct, 1))


def build_skill_rows(skill_state: dict[str, float] | None) -> list[SkillRow]:
    """One row per movement, sorted by name. Empty mapping -> empty list."""
    rows: list[SkillRow] = []
    for movement, proficiency in sorted((skill_state or {}).items()):
        pct = features.to_pct(proficiency)
        rows.append(SkillRow(movement=movement, pct=pct, display=features.format_pct(pct, 0)))
    return rows


def build_prescription_card(rx: WorkoutPrescription | None) -> PrescriptionCard | None:
    if rx is None:
        return None
    return PrescriptionCard(
        type=rx.type,
        focus=rx.focus,
        rationale=rx.rationale,
        duration_display=features.format_minutes(rx.duration_min),
    )


def build_state_card(state: UnifiedStateVector | None) -> StateCard | None:
    if state is None:
        return None
    habit_pct = features.to_pct(state.habit_strength)
    return StateCard(
        updated_at=state.timestamp,
        capacities=[_labeled(state, cfg) for cfg in CAPACITY_FIELDS],
        habit_strength_pct=habit_pct,
        habit_strength_display=features.format_pct(habit_pct, 0),
        struct_signal=_labeled(state, SIGNAL_FIELD),
        skills=build_skill_rows(state.skill_state),
        fatigues=[build_fatigue_bar(cfg.label, getattr(state, cfg.field)) for cfg in FATIGUE_FIELDS],
    )


def build_dose_preview(dose: StressDose | None) -> DosePreview | None:
    if dose is None:
        return None
    return DosePreview(components=[_labeled(dose, cfg) for cfg in DOSE_FIELDS])


def build_metrics_card(metrics: MetricsResponse | None) -> MetricsCard | None:
    if metrics is None:
        return None
    return MetricsCard(
        vo2_max=features.format_fixed(metrics.vo2_max, 1),
        vo2_category=metrics.vo2_category,
        race_pace=f"{features.format_mmss(metrics.race_pace_sec_per_mile)} /mi",
        result_category=metrics.result_category,
        fatigue_percent=features.format_pct(metrics.fatigue_percent, 1),
        fatigue_profile=metrics.fatigue_profile,
        zones=[
            ZoneRow(
                name=z.name,
                slower=features.format_mmss(z.slow_pace_sec),
                faster=features.format_mmss(z.fast_pace_sec),
                notes=z.notes,
            )
            for z in metrics.zones
        ],
    )


def build_dashboard_view(snapshot: SessionSnapshot) -> DashboardView:
    # Free-text goals outside the picker render as-is.
    option = get_goal(snapshot.goal)
    return DashboardView(
        goal=snapshot.goal,
        goal_label=option.label if option is not None else snapshot.goal,
        goal_description=option.description if option is not None else "",
        goals=[g.id for g in list_goals()],
        error=snapshot.error.message if snapshot.error is not None else None,
        loading_prescription=snapshot.prescription_pending,
        logging_workout=snapshot.commit_pending,
        simulating=snapshot.simulate_pending,
        computing_metrics=snapshot.metrics_pending,
        prescription=build_prescription_card(snapshot.prescription),
        state=build_state_card(snapshot.state),
        dose=build_dose_preview(snapshot.dose),
        metrics=build_metrics_card(snapshot.metrics),
    )
