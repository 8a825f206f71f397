"""Goal choices offered by the dashboard — config only.

The service accepts any goal string; this list only drives the picker.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class GoalOption:
    id: str
    label: str
    description: str = ""


GOALS: dict[str, GoalOption] = {
    "Strength": GoalOption(id="Strength", label="Strength", description="Maximal force, low reps."),
    "Hypertrophy": GoalOption(id="Hypertrophy", label="Hypertrophy", description="Muscle growth, moderate reps."),
    "Power": GoalOption(id="Power", label="Power", description="Rate of force development."),
    "General": GoalOption(id="General", label="General", description="Balanced fitness."),
}

DEFAULT_GOAL = "Strength"


def list_goals() -> list[GoalOption]:
    return list(GOALS.values())


def get_goal(goal_id: str) -> GoalOption | None:
    return GOALS.get(goal_id)
