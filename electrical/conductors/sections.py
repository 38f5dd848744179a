# electrical/conductors/sections.py
"""
Selección de sección sobre catálogo discreto.

- AC: objetivo ΔU ≤ 1 % con protección "ok"; si no, se acepta "info" pero nunca "danger".
- DC (opción B): Auto arranca en 6 mm², objetivo ΔU ≤ 3 % (aviso > 1 %).
"""
from __future__ import annotations

from typing import Literal, Optional, Sequence

from electrical.protections import protection_status
from .voltage_drop import compute_dc_drop, voltage_drop_percent

AC_SECTIONS_MM2: Sequence[float] = (2.5, 6, 10, 16, 25)
# 2.5 queda disponible sólo en forzado manual
DC_SECTIONS_MM2: Sequence[float] = (2.5, 6, 10, 16)
DC_AUTO_MIN_SECTION_MM2 = 6

AC_TARGET_DROP_PCT = 1.0
DROP_WARN_PCT = 1.0
DROP_LIMIT_PCT = 3.0

DcSizingStatus = Literal["ok", "warn", "danger", "missing"]
DropStatus = Literal["ok", "warn", "danger"]


def pick_auto_section(
    *,
    power_va: float,
    length_m: float,
    is_three_phase: bool,
    breaker_a: float,
    sections: Sequence[float] = AC_SECTIONS_MM2,
    min_section: float = 2.5,
    target_drop_pct: float = AC_TARGET_DROP_PCT,
) -> float:
    candidatos = [float(s) for s in sections if float(s) >= float(min_section)]
    if not candidatos:
        return float(sections[-1])

    # 1) conservador: ΔU <= objetivo Y protección "ok"
    for s in candidatos:
        dup = voltage_drop_percent(power_va, length_m, s, is_three_phase)
        if dup <= target_drop_pct and protection_status(s, breaker_a) == "ok":
            return s

    # 2) se acepta "info" (condiciones de pose), nunca "danger"
    chosen = candidatos[0]
    for s in candidatos:
        chosen = s
        dup = voltage_drop_percent(power_va, length_m, s, is_three_phase)
        if dup <= target_drop_pct and protection_status(s, breaker_a) != "danger":
            break
    return chosen


def pick_auto_ac_section(
    power_va: float,
    length_m: float,
    is_three_phase: bool,
    breaker_a: float,
    min_auto_section_mm2: float = 2.5,
) -> float:
    return pick_auto_section(
        power_va=power_va,
        length_m=length_m,
        is_three_phase=is_three_phase,
        breaker_a=breaker_a,
        min_section=min_auto_section_mm2,
    )


def pick_auto_dc_section(length_m: float, current_a: float, base_v: float) -> float:
    auto_s = float(DC_AUTO_MIN_SECTION_MM2)
    if length_m <= 0 or current_a <= 0 or base_v <= 0:
        return auto_s
    for s in (x for x in DC_SECTIONS_MM2 if x >= DC_AUTO_MIN_SECTION_MM2):
        auto_s = float(s)
        if compute_dc_drop(length_m, current_a, s, base_v).du_pct <= DROP_LIMIT_PCT:
            break
    return auto_s


def dc_sizing_status(length_m: float, du_pct: float) -> DcSizingStatus:
    if length_m <= 0:
        return "missing"
    if du_pct > DROP_LIMIT_PCT:
        return "danger"
    if du_pct > DROP_WARN_PCT:
        return "warn"
    return "ok"


def drop_status(du_pct: float) -> DropStatus:
    if du_pct > DROP_LIMIT_PCT:
        return "danger"
    if du_pct > DROP_WARN_PCT:
        return "warn"
    return "ok"


def snap_section_to_catalog(section_mm2: Optional[float], sections: Sequence[float] = AC_SECTIONS_MM2) -> Optional[float]:
    """Primera sección de catálogo >= la pedida (4 mm² -> 6 mm²)."""
    if section_mm2 is None:
        return None
    return next((float(s) for s in sections if float(s) >= float(section_mm2)), None)


__all__ = [
    "AC_SECTIONS_MM2",
    "DC_SECTIONS_MM2",
    "DC_AUTO_MIN_SECTION_MM2",
    "DROP_WARN_PCT",
    "DROP_LIMIT_PCT",
    "DcSizingStatus",
    "DropStatus",
    "pick_auto_section",
    "pick_auto_ac_section",
    "pick_auto_dc_section",
    "dc_sizing_status",
    "drop_status",
    "snap_section_to_catalog",
]
