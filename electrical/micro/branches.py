# electrical/micro/branches.py
"""
Branches AC des micro-onduleurs (Motor FV).

Responsabilidad:
- Branches por defecto cuando el proyecto micro no tiene ninguna configurada.
- Por branche: corriente (n × P_unit / 230 V), caída de tensión, estado.
- Límite de micros por branche según el modelo (tabla fija del fabricante).
- Peor caída de branche y caída "production" acumulada (peor branche + AC2).

Notas:
- Cada branche es monofásica (Mono, L1, L2 o L3): tensión 230 V, fórmula 2·L·I·ρ/S.
- Un modelo ausente de la tabla no tiene límite (no se inventa ninguno).
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Mapping, Optional, Sequence, Tuple

from core.model import BranchPhase, MicroBranch, Project
from electrical.conductors import (
    DROP_LIMIT_PCT,
    DROP_WARN_PCT,
    U_MONO_V,
    DropStatus,
    drop_status,
    voltage_drop_percent_from_current,
)

logger = logging.getLogger(__name__)

DEFAULT_BRANCH_SECTION_MM2 = 2.5


@dataclass(frozen=True)
class BranchLimit:
    max_micros: int
    breaker_a: int
    cable_section_mm2: float


# Recomendaciones de fabricante por modelo (id exacto del catálogo)
BRANCH_LIMITS: Mapping[str, BranchLimit] = {
    "FOX-MICRO-1000": BranchLimit(max_micros=7, breaker_a=32, cable_section_mm2=6.0),
    "ENP-IQ8MC-72-M-INT": BranchLimit(max_micros=11, breaker_a=20, cable_section_mm2=2.5),
    "ENP-IQ8HC-72-M-INT": BranchLimit(max_micros=9, breaker_a=20, cable_section_mm2=2.5),
    "ENP-IQ8P-72-2-INT": BranchLimit(max_micros=7, breaker_a=20, cable_section_mm2=2.5),
    "APS-DS3": BranchLimit(max_micros=5, breaker_a=20, cable_section_mm2=2.5),
    "APS-DS3-H": BranchLimit(max_micros=4, breaker_a=20, cable_section_mm2=2.5),
}


@dataclass(frozen=True)
class BranchAnalysis:
    branch_index: int
    branch_id: str
    name: str
    phase: BranchPhase
    micro_count: int
    length_m: float
    section_mm2: float
    current_a: float
    drop_v: float
    drop_pct: float
    max_micros: Optional[int]

    @property
    def status(self) -> DropStatus:
        return drop_status(self.drop_pct)

    @property
    def is_over_limit(self) -> bool:
        return self.max_micros is not None and self.micro_count > self.max_micros


@dataclass(frozen=True)
class MicroBranchesReport:
    branches: Tuple[BranchAnalysis, ...] = ()
    errors: Tuple[str, ...] = ()
    warnings: Tuple[str, ...] = ()
    worst_drop_pct: float = 0.0
    micro_unit_power_va: float = 0.0

    @property
    def is_ok(self) -> bool:
        return not self.errors

    def production_drop_pct(self, trunk_drop_pct: float) -> float:
        """Caída acumulada lado producción: peor branche + tramo AC2."""
        return self.worst_drop_pct + (trunk_drop_pct or 0.0)


def _f(x, default: float = 0.0) -> float:
    try:
        return float(x)
    except (TypeError, ValueError):
        return default


def _i(x, default: int = 0) -> int:
    try:
        return int(x)
    except (TypeError, ValueError):
        return default


# ==========================================================
# Branches por defecto
# ==========================================================

def default_micro_branches(
    project: Project,
    micro_count: int,
    *,
    cable_length_m: Optional[float] = None,
    section_mm2: float = DEFAULT_BRANCH_SECTION_MM2,
) -> Tuple[MicroBranch, ...]:
    """
    Una branche por fase con todos los micros.

    - Mono: una branche "Mono".
    - Tri: reparto equilibrado L1/L2/L3 (el resto va a las primeras fases);
      las fases sin micro se omiten.
    - Longitud por defecto = longitud AC2 del proyecto.
    """
    n = max(0, _i(micro_count))
    if n == 0:
        return ()
    length = project.distance_to_panel if cable_length_m is None else cable_length_m

    if not project.is_three_phase:
        return (
            MicroBranch(
                id="branch-1",
                name="Branche 1",
                micro_count=n,
                cable_length_m=length,
                cable_section_mm2=section_mm2,
                phase="Mono",
            ),
        )

    base, rest = divmod(n, 3)
    out: List[MicroBranch] = []
    for k, phase in enumerate(("L1", "L2", "L3")):
        count = base + (1 if k < rest else 0)
        if count <= 0:
            continue
        out.append(
            MicroBranch(
                id=f"branch-{phase}",
                name=f"Branche {phase}",
                micro_count=count,
                cable_length_m=length,
                cable_section_mm2=section_mm2,
                phase=phase,  # type: ignore[arg-type]
            )
        )
    return tuple(out)


def ensure_micro_branches(project: Project, micro_count: int) -> Tuple[MicroBranch, ...]:
    configured = project.inverter_config.micro_branches
    if configured:
        return tuple(configured)
    return default_micro_branches(project, micro_count)


# ==========================================================
# Informe
# ==========================================================

def analyze_branch(
    index: int,
    branch: MicroBranch,
    micro_unit_power_va: float,
    limit: Optional[BranchLimit] = None,
) -> BranchAnalysis:
    count = max(0, _i(branch.micro_count))
    length = max(0.0, _f(branch.cable_length_m))
    section = max(0.0, _f(branch.cable_section_mm2))
    current = count * max(0.0, _f(micro_unit_power_va)) / U_MONO_V
    drop_pct = voltage_drop_percent_from_current(current, length, section, U_MONO_V)
    return BranchAnalysis(
        branch_index=index,
        branch_id=branch.id,
        name=branch.name or f"Branche {index}",
        phase=branch.phase or "Mono",
        micro_count=count,
        length_m=length,
        section_mm2=section,
        current_a=current,
        drop_v=drop_pct * U_MONO_V / 100,
        drop_pct=drop_pct,
        max_micros=limit.max_micros if limit else None,
    )


def compute_micro_branches_report(
    project: Project,
    micro_unit_power_va: float,
    *,
    branches: Optional[Sequence[MicroBranch]] = None,
    model_id: Optional[str] = None,
    expected_micro_count: Optional[int] = None,
) -> MicroBranchesReport:
    """
    Analiza las branches AC de un sistema micro-onduleur.

    Args:
        branches: branches a analizar (por defecto las del proyecto).
        model_id: modelo de micro-onduleur para el límite por branche
            (por defecto el modelo configurado).
        expected_micro_count: si se indica, la suma de micros de las branches debe coincidir.

    Errores bloqueantes: micros por encima del límite del modelo, caída > 3 %,
    reparto que no cubre los micros previstos.
    """
    items = tuple(project.inverter_config.micro_branches if branches is None else branches)
    model = model_id if model_id is not None else project.inverter_config.model
    limit = BRANCH_LIMITS.get(model or "")

    analyses: List[BranchAnalysis] = []
    errors: List[str] = []
    warnings: List[str] = []

    for idx, b in enumerate(items, start=1):
        a = analyze_branch(idx, b, micro_unit_power_va, limit)
        analyses.append(a)

        if a.is_over_limit:
            errors.append(
                f"Branche {idx} ({a.name}) : {a.micro_count} micro-onduleurs > max {a.max_micros} "
                f"par branche pour {model} (disjoncteur {limit.breaker_a} A, câble {limit.cable_section_mm2:g} mm²)."
            )
        if a.micro_count > 0 and a.length_m <= 0:
            warnings.append(f"Branche {idx} ({a.name}) : longueur de câble manquante (à renseigner).")
        if a.micro_count > 0 and a.section_mm2 <= 0:
            warnings.append(f"Branche {idx} ({a.name}) : section de câble manquante (à renseigner).")

        if a.drop_pct > DROP_LIMIT_PCT:
            errors.append(
                f"Branche {idx} ({a.name}) : chute de tension trop élevée (ΔU={a.drop_pct:.2f}% > 3%). "
                "Augmenter la section ou réduire la longueur."
            )
        elif a.drop_pct > DROP_WARN_PCT:
            warnings.append(f"Branche {idx} ({a.name}) : chute de tension {a.drop_pct:.2f}% (> 1%).")

    if expected_micro_count is not None and items:
        assigned = sum(a.micro_count for a in analyses)
        if assigned != expected_micro_count:
            errors.append(
                f"Branches AC : {assigned} micro-onduleurs répartis sur {expected_micro_count} prévus."
            )

    worst = max((a.drop_pct for a in analyses), default=0.0)
    logger.debug("Branches micro: %d, pire ΔU=%.2f%%", len(analyses), worst)
    return MicroBranchesReport(
        branches=tuple(analyses),
        errors=tuple(errors),
        warnings=tuple(warnings),
        worst_drop_pct=worst,
        micro_unit_power_va=float(micro_unit_power_va or 0.0),
    )


__all__ = [
    "DEFAULT_BRANCH_SECTION_MM2",
    "BranchLimit",
    "BRANCH_LIMITS",
    "BranchAnalysis",
    "MicroBranchesReport",
    "default_micro_branches",
    "ensure_micro_branches",
    "analyze_branch",
    "compute_micro_branches_report",
]
