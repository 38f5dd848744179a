# bom/cables.py
"""
Câbles du chiffrage: AC (AC1 / AC2), branches micro-onduleurs, DC par MPPT.

Responsabilidad:
- Sección → referencia de couronne (C50 / C100 / T500) y número de couronnes.
- Agregar longitudes por sección (branches, runs DC).
- Referencia ausente del catálogo: línea "à chiffrer" con la longitud estimada.
"""
from __future__ import annotations

import logging
import math
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from core.model import MicroBranch
from electrical.catalogs import Catalogs
from electrical.conductors import (
    AC_SECTIONS_MM2,
    RHO_CU,
    ac_current_from_power,
    ac_voltage,
    snap_section_to_catalog,
)
from electrical.protections import min_section_for_rating

from .material import Material, material_from
from .rules import (
    AC_COILS_MONO,
    AC_COILS_TRI,
    DC_BLACK_6MM,
    DC_COIL_M,
    DC_RED_6MM,
    MICRO_BRANCH_COILS,
    CoilOption,
)

logger = logging.getLogger(__name__)

AC_TARGET_DROP_RATIO = 0.01


def _g(x: float) -> str:
    return f"{float(x):g}"


# ==========================================================
# AC1 / AC2
# ==========================================================

def _thermal_min_section(current_a: float) -> float:
    section = 2.5
    for limit, s in ((25, 6.0), (32, 10.0), (45, 16.0), (63, 25.0)):
        if current_a > limit:
            section = s
    return section


def required_ac_section(power_va: float, length_m: float, is_three_phase: bool) -> float:
    """Sección mínima (térmica, ΔU 1 %, protección 1.25 × Ib) sobre {2.5, 6, 10, 16, 25}."""
    current = ac_current_from_power(power_va, is_three_phase)
    u = ac_voltage(is_three_phase)
    factor = math.sqrt(3) if is_three_phase else 2.0
    by_drop = factor * RHO_CU * length_m * current / (u * AC_TARGET_DROP_RATIO)
    by_protection = min_section_for_rating(math.ceil(current * 1.25))
    required = max(_thermal_min_section(current), by_drop, by_protection)
    return snap_section_to_catalog(required, AC_SECTIONS_MM2) or AC_SECTIONS_MM2[-1]


def ac_coil_options(section_mm2: float, is_three_phase: bool) -> Tuple[CoilOption, ...]:
    table = AC_COILS_TRI if is_three_phase else AC_COILS_MONO
    for max_section, options in table:
        if section_mm2 <= max_section:
            return options
    return ()


def pick_coil(options: Sequence[CoilOption], length_m: float) -> CoilOption:
    """La couronne más pequeña que cubre la longitud; si ninguna, la mayor."""
    ordered = sorted(options, key=lambda o: o.coil_m)
    return next((o for o in ordered if length_m <= o.coil_m), ordered[-1])


def ac_cable_line(
    power_va: float,
    length_m: float,
    catalogs: Catalogs,
    is_three_phase: bool = False,
    section_mm2: Optional[float] = None,
) -> Optional[Material]:
    """
    Línea de câble R2V para un tramo AC.

    section_mm2: sección efectiva del tramo (Auto o forzada); se redondea a la
    sección de catálogo inmediatamente superior. None = cálculo propio.
    """
    if power_va <= 0 or length_m <= 0:
        return None

    selected = required_ac_section(power_va, length_m, is_three_phase)
    if section_mm2 is not None:
        selected = snap_section_to_catalog(section_mm2, AC_SECTIONS_MM2) or selected

    options = ac_coil_options(selected, is_three_phase)
    conductors = "5G" if is_three_phase else "3G"
    if options:
        chosen = pick_coil(options, length_m)
        coil_id, coil_m = chosen.id, chosen.coil_m
    else:
        coil_id, coil_m = f"CABLE-R2V-{conductors}{_g(selected)}-MANUEL", 50.0

    qty = max(1, math.ceil(length_m / (coil_m or 50)))
    comp = catalogs.cables.get(coil_id)
    if comp is not None:
        return material_from(comp, qty)

    logger.debug("Câble AC absent du catalogue: %s", coil_id)
    if options:
        desc = f"CABLE R2V {conductors}{_g(selected)} C{_g(coil_m)}"
    else:
        desc = f"Câble R2V {conductors}{_g(selected)} (longueur estimée {math.ceil(length_m)} m) – À chiffrer"
    return Material(id=coil_id, description=desc, quantity=qty, price="")


# ==========================================================
# Branches micro-onduleurs
# ==========================================================

def branch_lengths_by_section(branches: Iterable[MicroBranch]) -> Dict[float, float]:
    """Longitud total por sección; se ignoran branches sin micros, longitud o sección."""
    out: Dict[float, float] = {}
    for b in branches:
        length = float(b.cable_length_m or 0)
        section = float(b.cable_section_mm2 or 0)
        if length <= 0 or section <= 0 or int(b.micro_count or 0) <= 0:
            continue
        out[section] = out.get(section, 0.0) + length
    return out


def _branch_coil(section: float, length_m: float) -> Tuple[str, int, str]:
    meters = math.ceil(length_m)
    label = f"Câble AC branches micro : R2V 3G{_g(section)} – longueur estimée {meters} m"
    manual = (f"CABLE-AC-BRANCH-{_g(section)}MM-MANUEL", 1, f"{label} (à chiffrer)")

    rule = MICRO_BRANCH_COILS.get(section)
    if rule is None:
        return manual
    if rule.other:
        return rule.other, 1, f"{label} (à chiffrer)"
    if meters <= 50 and rule.c50:
        return rule.c50, 1, f"{label} (C50)"
    if rule.c100:
        return rule.c100, max(1, math.ceil(meters / 100)), f"{label} (C100)"
    if rule.c50:
        return rule.c50, max(1, math.ceil(meters / 50)), f"{label} (C50)"
    return manual


def micro_branch_cable_lines(branches: Iterable[MicroBranch], catalogs: Catalogs) -> List[Material]:
    out: List[Material] = []
    for section, length in branch_lengths_by_section(branches).items():
        coil_id, qty, fallback = _branch_coil(section, length)
        comp = catalogs.cables.get(coil_id)
        if comp is not None:
            desc = f"{comp.description} (branches micro – total ≈ {math.ceil(length)} m)"
            out.append(material_from(comp, qty, description=desc))
        else:
            logger.debug("Câble branche absent du catalogue: %s", coil_id)
            out.append(Material(id=coil_id, description=fallback, quantity=qty, price=""))
    return out


# ==========================================================
# DC
# ==========================================================

def dc_lengths_by_section(runs: Iterable[Tuple[float, float]]) -> Dict[float, float]:
    """runs: (longitud, sección efectiva); longitudes nulas se ignoran."""
    out: Dict[float, float] = {}
    for length, section in runs:
        if length <= 0 or section <= 0:
            continue
        out[float(section)] = out.get(float(section), 0.0) + float(length)
    return out


def dc_cable_lines(runs: Iterable[Tuple[float, float]], catalogs: Catalogs) -> List[Material]:
    """Un conducteur rouge + un noir par liaison; 6 mm² en couronnes de 100 m."""
    out: List[Material] = []
    for section, length in dc_lengths_by_section(runs).items():
        meters = math.ceil(length)
        if section == 6:
            qty = max(1, math.ceil(length / DC_COIL_M))
            for coil_id, color in ((DC_RED_6MM, "rouge"), (DC_BLACK_6MM, "noir")):
                comp = catalogs.cables.get(coil_id)
                if comp is not None:
                    out.append(material_from(comp, qty))
                else:
                    out.append(
                        Material(
                            id=coil_id,
                            description=f"Câble solaire DC H1Z2Z2-K 1x6 ({color}) – {meters} m (à chiffrer)",
                            quantity=qty,
                        )
                    )
        else:
            out.append(
                Material(
                    id=f"CABLE-DC-{_g(section)}MM-MANUEL",
                    description=(
                        f"Câble solaire DC H1Z2Z2-K 1x{_g(section)} (rouge + noir) – longueur estimée "
                        f"{meters} m par conducteur (à chiffrer)"
                    ),
                    quantity=1,
                )
            )
    return out


__all__ = [
    "required_ac_section",
    "ac_coil_options",
    "pick_coil",
    "ac_cable_line",
    "branch_lengths_by_section",
    "micro_branch_cable_lines",
    "dc_lengths_by_section",
    "dc_cable_lines",
]
