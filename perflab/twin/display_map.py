"""Display labels for state and dose fields.

Field names are the wire names on UnifiedStateVector / StressDose.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class FieldDisplay:
    field: str
    label: str
    clamp: bool = False  # clamp to [0, 100] before rendering


CAPACITY_FIELDS: tuple[FieldDisplay, ...] = (
    FieldDisplay(field="c_met_aerobic", label="Met Aerobic"),
    FieldDisplay(field="c_nm_force", label="NM Force"),
    FieldDisplay(field="c_struct", label="Struct"),
    FieldDisplay(field="b_met_anaerobic", label="W'"),
)

FATIGUE_FIELDS: tuple[FieldDisplay, ...] = (
    FieldDisplay(field="f_met_systemic", label="Systemic", clamp=True),
    FieldDisplay(field="f_nm_peripheral", label="NM Peripheral", clamp=True),
    FieldDisplay(field="f_nm_central", label="NM Central", clamp=True),
    FieldDisplay(field="f_struct_damage", label="Structural", clamp=True),
)

SIGNAL_FIELD = FieldDisplay(field="s_struct_signal", label="Struct Signal")

DOSE_FIELDS: tuple[FieldDisplay, ...] = (
    FieldDisplay(field="d_met_systemic", label="Metabolic"),
    FieldDisplay(field="d_nm_peripheral", label="NM Peripheral"),
    FieldDisplay(field="d_nm_central", label="NM Central"),
    FieldDisplay(field="d_struct_damage", label="Struct Damage"),
    FieldDisplay(field="d_struct_signal", label="Struct Signal"),
)
