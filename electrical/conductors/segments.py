"""
Dimensionamiento de tramos (Motor FV).

Responsabilidad:
- AC2 (coffret AC → tableau) y AC1 (onduleur → coffret AC, sólo centralizado).
- DC por MPPT (liaison string → coffret DC / onduleur).
- Regla de orden AC2 ≥ AC1 en sistemas centralizados.

Notas:
- El calibre de AC2 es el comercial AGCP si existe; si no, el normalizado de ceil(1.25 × I).
- Reglas de negocio en monofásico: AC2 no baja de 10 mm² con 32/40 A,
  AC1 no baja de 10 mm² con 40 A.
- Una sección forzada se respeta tal cual para las comprobaciones; la referencia
  de cable del BOM usa la sección de catálogo inmediatamente superior.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Literal, Mapping, Optional, Sequence, Tuple

from electrical.protections import (
    ProtectionStatus,
    is_dc_cable_too_small_for_current,
    is_section_oversized_for_rating,
    max_dc_current_for_section,
    min_section_for_rating,
    normalize_breaker_rating,
    protection_status,
    subscribed_capacity_to_commercial_breaker,
    theoretical_min_rating,
)
from .sections import (
    AC_SECTIONS_MM2,
    DcSizingStatus,
    DropStatus,
    dc_sizing_status,
    drop_status,
    pick_auto_dc_section,
    pick_auto_section,
)
from .voltage_drop import ac_current_from_power, compute_dc_drop, voltage_drop_percent

logger = logging.getLogger(__name__)

SegmentRole = Literal["AC1", "AC2"]
BreakerBasis = Literal["AGCP", "NORMALIZED"]


@dataclass(frozen=True)
class AcSegmentSizing:
    role: SegmentRole
    power_va: float
    length_m: float
    current_a: float
    breaker_min_a: int
    breaker_a: int
    breaker_basis: BreakerBasis
    min_auto_section_mm2: float
    auto_section_mm2: float
    forced_section_mm2: Optional[float]
    effective_section_mm2: float
    drop_pct: float
    auto_drop_pct: float
    protection_status: ProtectionStatus

    @property
    def drop_status(self) -> DropStatus:
        return drop_status(self.drop_pct)

    @property
    def is_forced(self) -> bool:
        return self.forced_section_mm2 is not None

    @property
    def is_oversized(self) -> bool:
        # surdimensionnement (chute de tension) : aviso pedagógico
        return self.effective_section_mm2 > self.auto_section_mm2

    @property
    def is_oversized_for_breaker(self) -> bool:
        return is_section_oversized_for_rating(self.effective_section_mm2, self.breaker_a)


@dataclass(frozen=True)
class AcSizing:
    ac2: AcSegmentSizing
    ac1: Optional[AcSegmentSizing] = None
    is_central: bool = False

    @property
    def section_order_violation(self) -> bool:
        if not self.is_central or self.ac1 is None:
            return False
        return self.ac2.effective_section_mm2 < self.ac1.effective_section_mm2


def _segment(
    *,
    role: SegmentRole,
    power_va: float,
    length_m: float,
    is_three_phase: bool,
    current_a: float,
    breaker_min_a: int,
    breaker_a: int,
    breaker_basis: BreakerBasis,
    min_auto_section: float,
    forced_section: Optional[float],
    auto_floor: Optional[float] = None,
) -> AcSegmentSizing:
    auto = pick_auto_section(
        power_va=power_va,
        length_m=length_m,
        is_three_phase=is_three_phase,
        breaker_a=breaker_a,
        min_section=min_auto_section,
    )
    if auto_floor is not None:
        auto = max(auto, auto_floor)
    effective = float(forced_section) if forced_section is not None else auto

    return AcSegmentSizing(
        role=role,
        power_va=float(power_va),
        length_m=float(length_m),
        current_a=round(current_a, 3),
        breaker_min_a=int(breaker_min_a),
        breaker_a=int(breaker_a),
        breaker_basis=breaker_basis,
        min_auto_section_mm2=float(min_auto_section),
        auto_section_mm2=float(auto),
        forced_section_mm2=None if forced_section is None else float(forced_section),
        effective_section_mm2=float(effective),
        drop_pct=voltage_drop_percent(power_va, length_m, effective, is_three_phase),
        auto_drop_pct=voltage_drop_percent(power_va, length_m, auto, is_three_phase),
        protection_status=protection_status(effective, breaker_a),
    )


def compute_ac1_segment(
    *,
    ac_power_va: float,
    length_m: float,
    is_three_phase: bool,
    forced_section: Optional[float] = None,
    safety_factor: float = 1.25,
) -> AcSegmentSizing:
    """AC1 (onduleur → coffret AC): basado en la potencia AC máx. del onduleur."""
    current = ac_current_from_power(ac_power_va, is_three_phase)
    breaker_min = theoretical_min_rating(current, safety_factor)
    breaker = normalize_breaker_rating(breaker_min, is_three_phase)
    min_auto = 10.0 if (not is_three_phase and breaker == 40) else AC_SECTIONS_MM2[0]
    return _segment(
        role="AC1",
        power_va=ac_power_va,
        length_m=length_m,
        is_three_phase=is_three_phase,
        current_a=current,
        breaker_min_a=breaker_min,
        breaker_a=breaker,
        breaker_basis="NORMALIZED",
        min_auto_section=min_auto,
        forced_section=forced_section,
    )


def compute_ac_section(
    *,
    pv_power_w: float,
    ac_power_va: float,
    length_m: float,
    is_three_phase: bool,
    agcp_a: Optional[float] = None,
    forced_section: Optional[float] = None,
    min_section_floor: Optional[float] = None,
    safety_factor: float = 1.25,
) -> AcSegmentSizing:
    """
    AC2 (coffret AC → tableau).

    - Calibre: AGCP comercial si existe, si no normalize(ceil(1.25 × I_pv)).
    - ΔU calculada con la potencia AC de referencia del sistema.
    - min_section_floor: sección mínima impuesta (AC1 efectiva en centralizado).
    """
    current = ac_current_from_power(pv_power_w, is_three_phase)
    breaker_min = theoretical_min_rating(current, safety_factor)
    agcp_breaker = subscribed_capacity_to_commercial_breaker(agcp_a, is_three_phase)
    if agcp_breaker is not None:
        breaker, basis = agcp_breaker, "AGCP"
    else:
        breaker, basis = normalize_breaker_rating(breaker_min, is_three_phase), "NORMALIZED"

    min_auto = 10.0 if (not is_three_phase and breaker in (32, 40)) else AC_SECTIONS_MM2[0]
    return _segment(
        role="AC2",
        power_va=ac_power_va,
        length_m=length_m,
        is_three_phase=is_three_phase,
        current_a=current,
        breaker_min_a=breaker_min,
        breaker_a=breaker,
        breaker_basis=basis,
        min_auto_section=min_auto,
        forced_section=forced_section,
        auto_floor=min_section_floor,
    )


def compute_ac_segments(
    *,
    is_central: bool,
    pv_power_w: float,
    ac_power_va: float,
    distance_to_panel_m: float,
    distance_inverter_to_ac_box_m: float,
    is_three_phase: bool,
    agcp_a: Optional[float] = None,
    ac2_forced_section: Optional[float] = None,
    ac1_forced_section: Optional[float] = None,
    safety_factor: float = 1.25,
) -> AcSizing:
    ac1: Optional[AcSegmentSizing] = None
    floor: Optional[float] = None
    if is_central:
        ac1 = compute_ac1_segment(
            ac_power_va=ac_power_va,
            length_m=distance_inverter_to_ac_box_m,
            is_three_phase=is_three_phase,
            forced_section=ac1_forced_section,
            safety_factor=safety_factor,
        )
        floor = ac1.effective_section_mm2

    ac2 = compute_ac_section(
        pv_power_w=pv_power_w,
        ac_power_va=ac_power_va,
        length_m=distance_to_panel_m,
        is_three_phase=is_three_phase,
        agcp_a=agcp_a,
        forced_section=ac2_forced_section,
        min_section_floor=floor,
        safety_factor=safety_factor,
    )
    sizing = AcSizing(ac2=ac2, ac1=ac1, is_central=is_central)
    if sizing.section_order_violation:
        logger.debug(
            "AC2 %.1fmm² < AC1 %.1fmm² (centralisé)",
            ac2.effective_section_mm2,
            ac1.effective_section_mm2 if ac1 else 0.0,
        )
    return sizing


def ac_section_order_violation(*, is_central: bool, ac1_section_mm2: float, ac2_section_mm2: float) -> bool:
    return bool(is_central) and ac2_section_mm2 < ac1_section_mm2


# ==========================================================
# DC por MPPT
# ==========================================================

@dataclass(frozen=True)
class DcRunSizing:
    mppt_index: int
    length_m: float
    current_a: float
    base_v: float
    auto_section_mm2: float
    forced_section_mm2: Optional[float]
    effective_section_mm2: float
    du_v: float
    du_pct: float
    status: DcSizingStatus
    max_current_a: Optional[int]
    cable_too_small: bool

    @property
    def recommended_min_section_mm2(self) -> float:
        return min_section_for_rating(self.current_a)


def compute_dc_auto_section(length_m: float, current_a: float, base_v: float) -> float:
    return pick_auto_dc_section(length_m, current_a, base_v)


def size_dc_run(
    *,
    mppt_index: int,
    length_m: float,
    current_a: float,
    base_v: float,
    forced_section: Optional[float] = None,
) -> DcRunSizing:
    """current_a = Isc corregido del MPPT, base_v = Vmp caliente del MPPT."""
    v = base_v if base_v and base_v > 0 else 1.0
    auto = compute_dc_auto_section(length_m, current_a, v)
    effective = float(forced_section) if forced_section is not None else auto
    drop = compute_dc_drop(length_m, current_a, effective, v)
    return DcRunSizing(
        mppt_index=int(mppt_index),
        length_m=float(length_m),
        current_a=float(current_a),
        base_v=float(v),
        auto_section_mm2=float(auto),
        forced_section_mm2=None if forced_section is None else float(forced_section),
        effective_section_mm2=float(effective),
        du_v=drop.du_v,
        du_pct=drop.du_pct,
        status=dc_sizing_status(length_m, drop.du_pct),
        max_current_a=max_dc_current_for_section(effective),
        cable_too_small=current_a > 0 and is_dc_cable_too_small_for_current(effective, current_a),
    )


def size_dc_runs(
    mppt_electrical: Iterable[Tuple[int, float, float]],
    runs_by_mppt: Mapping[int, Tuple[float, Optional[float]]],
) -> Tuple[DcRunSizing, ...]:
    """
    mppt_electrical: (mppt_index, Isc corregido, Vmp caliente) por MPPT.
    runs_by_mppt: mppt_index -> (longitud, sección forzada o None).
    """
    out = []
    for idx, current, vmp_hot in mppt_electrical:
        length, forced = runs_by_mppt.get(int(idx), (0.0, None))
        out.append(
            size_dc_run(
                mppt_index=idx,
                length_m=length,
                current_a=current,
                base_v=vmp_hot,
                forced_section=forced,
            )
        )
    return tuple(out)


def worst_dc_drop_pct(runs: Sequence[DcRunSizing]) -> float:
    return max((r.du_pct for r in runs), default=0.0)


__all__ = [
    "AcSegmentSizing",
    "AcSizing",
    "DcRunSizing",
    "compute_ac1_segment",
    "compute_ac_section",
    "compute_ac_segments",
    "ac_section_order_violation",
    "compute_dc_auto_section",
    "size_dc_run",
    "size_dc_runs",
    "worst_dc_drop_pct",
]
