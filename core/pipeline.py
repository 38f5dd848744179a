# core/pipeline.py
"""
Pipeline de recálculo del proyecto (Motor FV).

Responsabilidad:
- Encadenar, de forma explícita y sin estado, todos los pasos del motor:
  clima → onduleur activo → (reequilibrado de strings) → compatibilidad →
  tramos AC1 / AC2 / DC → branches micro → BOM → agrupación → conformidad.
- Reunir las razones bloqueantes (export) y los avisos.

Notas:
- El llamador (UI, CLI) invoca recompute() tras cada edición.
- Mismas entradas → mismo RecomputeResult.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Dict, List, Optional, Tuple

from bom import MaterialGroup, Material, build_bill_of_materials, default_ac_sizing, group_materials_by_category
from core.configuration import EngineConfig
from core.model import Climate, Project
from electrical.catalogs import Catalogs, InverterComponent
from electrical.conductors import (
    DROP_LIMIT_PCT,
    DROP_WARN_PCT,
    AcSegmentSizing,
    AcSizing,
    DcRunSizing,
    size_dc_runs,
)
from electrical.micro import MicroBranchesReport, compute_micro_branches_report, ensure_micro_branches
from electrical.panels import (
    CompatibilityReport,
    assignment_mismatch_report,
    compute_compatibility_report,
    rebalance_strings,
    string_assignment_error,
)
from electrical.protections import SubscriptionStatus
from electrical.topology import (
    field_panel,
    is_micro_system,
    main_panel,
    micro_count_for_panels,
    requires_string_config,
    resolve_active_inverter,
    total_panel_count,
    total_power_w,
)

from .climate import StandardSubscriptionLookup
from .ports import ClimateProvider, SubscriptionLookup

logger = logging.getLogger(__name__)

NO_PANEL_MESSAGE = "Aucun panneau configuré : au moins un champ avec des panneaux est requis."

_SEGMENT_LABELS = {
    "AC1": "AC1 (onduleur → coffret AC)",
    "AC2": "AC2 (coffret AC → point de raccordement)",
}


@dataclass(frozen=True)
class ElectricalSizing:
    ac: Optional[AcSizing] = None
    dc_runs: Tuple[DcRunSizing, ...] = ()


@dataclass(frozen=True)
class RecomputeResult:
    project: Project
    climate: Climate
    inverter: Optional[InverterComponent]
    report: CompatibilityReport
    sizing: ElectricalSizing
    micro_branches: Optional[MicroBranchesReport]
    materials: Tuple[Material, ...]
    groups: Tuple[MaterialGroup, ...]
    blocking_reasons: Tuple[str, ...]
    advisories: Tuple[str, ...]
    subscription: Optional[SubscriptionStatus]
    can_export: bool


# ==========================================================
# Pasos
# ==========================================================

def _climate(project: Project, provider: Optional[ClimateProvider], cfg: EngineConfig) -> Climate:
    found = provider.lookup(project.postal_code, project.altitude) if provider is not None else None
    return found or Climate(temp_min=cfg.default_temp_min_c, temp_max_amb=cfg.default_temp_max_amb_c)


def _rebalanced(project: Project, inverter: Optional[InverterComponent]) -> Project:
    config = project.inverter_config
    strings = rebalance_strings(
        project.fields,
        config.configured_strings,
        mppt_count=inverter.mppt_count if inverter is not None else None,
    )
    if strings == tuple(config.configured_strings):
        return project
    logger.debug("Strings reequilibrados: %d", len(strings))
    return replace(project, inverter_config=replace(config, configured_strings=strings))


def _uses_strings(project: Project, catalogs: Catalogs) -> bool:
    config = project.inverter_config
    return requires_string_config(config) and not is_micro_system(config, catalogs)


def _compatibility(
    project: Project,
    catalogs: Catalogs,
    inverter: Optional[InverterComponent],
    climate: Climate,
    cfg: EngineConfig,
) -> CompatibilityReport:
    config = project.inverter_config
    uses_strings = _uses_strings(project, catalogs)
    if uses_strings and inverter is not None:
        mismatch = string_assignment_error(project)
        if mismatch:
            return assignment_mismatch_report(mismatch)

    panels_by_field = {}
    for f in project.fields:
        p = field_panel(f, catalogs)
        if p is not None:
            panels_by_field[f.id] = p

    return compute_compatibility_report(
        main_panel(project, catalogs),
        inverter,
        climate,
        config.configured_strings if uses_strings else (),
        phase=config.phase,
        dc_cabling_runs=config.dc_cabling_runs,
        total_panels=total_panel_count(project),
        panels_by_field=panels_by_field,
        field_names={f.id: f.name for f in project.fields},
        default_temp_min_c=cfg.default_temp_min_c,
        default_temp_max_amb_c=cfg.default_temp_max_amb_c,
        cell_temp_offset_c=cfg.cell_temp_offset_c,
        default_temp_coeff_voc=cfg.default_temp_coeff_voc,
        voc_warn_ratio=cfg.voc_warn_ratio,
        vmp_warn_ratio=cfg.vmp_warn_ratio,
    )


def _dc_sizing(project: Project, report: CompatibilityReport) -> Tuple[DcRunSizing, ...]:
    details = report.details
    if details is None or details.is_micro or not details.strings_analysis:
        return ()
    runs: Dict[int, Tuple[float, Optional[float]]] = {
        int(r.mppt_index): (float(r.length_m or 0), r.section_mm2) for r in project.inverter_config.dc_cabling_runs
    }
    return size_dc_runs(
        ((a.mppt_index, a.isc_calculation, a.vmp_hot) for a in details.strings_analysis),
        runs,
    )


# ==========================================================
# Conformidad
# ==========================================================

def _ac_segments(sizing: ElectricalSizing) -> List[AcSegmentSizing]:
    if sizing.ac is None:
        return []
    return [s for s in (sizing.ac.ac1, sizing.ac.ac2) if s is not None]


def compute_blocking_reasons(
    report: CompatibilityReport,
    sizing: ElectricalSizing,
    micro_branches: Optional[MicroBranchesReport] = None,
) -> Tuple[str, ...]:
    """Razones que impiden el export (lista vacía = exportable)."""
    reasons: List[str] = []

    if not report.is_compatible:
        reasons.extend(report.errors or ("Configuration non conforme.",))

    if micro_branches is not None:
        reasons.extend(e for e in micro_branches.errors if e)

    for seg in _ac_segments(sizing):
        label = _SEGMENT_LABELS[seg.role]
        if seg.drop_pct > DROP_LIMIT_PCT:
            reasons.append(f"Tronçon {label} : chute de tension trop élevée (ΔU={seg.drop_pct:.2f}% > 3%).")
        if seg.protection_status == "danger":
            reasons.append(
                f"{label} : In={seg.breaker_a}A incompatible avec {seg.effective_section_mm2:g}mm²."
            )

    for run in sizing.dc_runs:
        idx = run.mppt_index
        if run.status == "missing":
            reasons.append(f"Liaison DC MPPT {idx} : longueur manquante (à renseigner).")
            continue
        if run.du_pct > DROP_LIMIT_PCT:
            reasons.append(
                f"Liaison DC MPPT {idx} : chute de tension trop élevée (ΔU={run.du_pct:.2f}% > 3%). "
                "Augmenter la section ou réduire la longueur."
            )
        if run.cable_too_small:
            reasons.append(
                f"Liaison DC MPPT {idx} : section {run.effective_section_mm2:g} mm² trop faible pour "
                f"I={run.current_a:.1f} A (max conseillé ~{run.max_current_a} A). "
                f"Recommandé ≥ {run.recommended_min_section_mm2:g} mm²."
            )

    if sizing.ac is not None and sizing.ac.section_order_violation:
        ac1 = sizing.ac.ac1
        reasons.append(
            "AC2 (coffret → tableau) doit être ≥ AC1 (onduleur → coffret) en onduleur centralisé "
            f"(AC1 = {ac1.effective_section_mm2:g} mm², AC2 = {sizing.ac.ac2.effective_section_mm2:g} mm²)."
        )

    return tuple(reasons)


def compute_advisories(
    report: CompatibilityReport,
    sizing: ElectricalSizing,
    micro_branches: Optional[MicroBranchesReport] = None,
    subscription: Optional[SubscriptionStatus] = None,
) -> Tuple[str, ...]:
    notes: List[str] = list(report.warnings)
    if micro_branches is not None:
        notes.extend(micro_branches.warnings)

    for seg in _ac_segments(sizing):
        label = _SEGMENT_LABELS[seg.role]
        if DROP_WARN_PCT < seg.drop_pct <= DROP_LIMIT_PCT:
            notes.append(f"Tronçon {label} : ΔU={seg.drop_pct:.2f}% > 1% (toléré jusqu'à 3%).")
        if seg.protection_status == "info":
            notes.append(
                f"{label} : In={seg.breaker_a}A sur {seg.effective_section_mm2:g}mm² conforme "
                "uniquement en conditions de pose favorables."
            )
        if seg.is_oversized:
            notes.append(
                f"{label} : section {seg.effective_section_mm2:g} mm² surdimensionnée "
                f"(auto {seg.auto_section_mm2:g} mm²)."
            )

    for run in sizing.dc_runs:
        if run.status == "warn":
            notes.append(f"Liaison DC MPPT {run.mppt_index} : ΔU={run.du_pct:.2f}% > 1% (toléré jusqu'à 3%).")

    if subscription is not None:
        if subscription.subscribed_kva is not None and subscription.recommended_kva is not None and not subscription.is_ok:
            notes.append(
                f"Abonnement estimé {subscription.subscribed_kva:g} kVA < {subscription.recommended_kva:g} kVA "
                "recommandés pour la puissance du projet."
            )
        if subscription.is_over_max_for_phase:
            phase = "triphasé" if subscription.phase == "Tri" else "monophasé"
            notes.append(f"Puissance du projet au-delà du maximum admis en {phase}.")

    return tuple(notes)


# ==========================================================
# API pública
# ==========================================================

def recompute(
    project: Project,
    catalogs: Catalogs,
    *,
    climate_provider: Optional[ClimateProvider] = None,
    subscription_lookup: Optional[SubscriptionLookup] = None,
    config: Optional[EngineConfig] = None,
    auto_rebalance: bool = False,
) -> RecomputeResult:
    """
    Recalcula todo lo derivado del proyecto.

    Args:
        auto_rebalance: reequilibra los strings configurados antes del análisis
            (lo que hace la UI tras un cambio de número de paneles).
    """
    cfg = config or EngineConfig()
    climate = _climate(project, climate_provider, cfg)
    inverter = resolve_active_inverter(project, catalogs, power_ratio=cfg.central_auto_power_ratio)

    if auto_rebalance and _uses_strings(project, catalogs):
        project = _rebalanced(project, inverter)

    pv_w = total_power_w(project, catalogs)
    total_panels = total_panel_count(project)
    config_inv = project.inverter_config

    if total_panels <= 0:
        report = CompatibilityReport(is_compatible=False, errors=(NO_PANEL_MESSAGE,))
    else:
        report = _compatibility(project, catalogs, inverter, climate, cfg)

    sizing = ElectricalSizing()
    if pv_w > 0:
        sizing = ElectricalSizing(
            ac=default_ac_sizing(project, catalogs, inverter, safety_factor=cfg.ac_safety_factor),
            dc_runs=_dc_sizing(project, report),
        )

    micro_report: Optional[MicroBranchesReport] = None
    branch_count = 0
    if inverter is not None and is_micro_system(config_inv, catalogs) and total_panels > 0:
        micros = micro_count_for_panels(config_inv, catalogs, total_panels)
        branches = ensure_micro_branches(project, micros)
        branch_count = len(branches)
        micro_report = compute_micro_branches_report(
            project,
            inverter.max_ac_power,
            branches=branches,
            model_id=inverter.id,
            expected_micro_count=micros,
        )

    materials = build_bill_of_materials(
        project,
        catalogs,
        climate=climate,
        ac_sizing=sizing.ac,
        dc_sizing=sizing.dc_runs,
        micro_branch_count=branch_count,
        default_temp_min_c=cfg.default_temp_min_c,
        safety_factor=cfg.ac_safety_factor,
        dc_vmp_hot_factor=cfg.dc_vmp_hot_factor,
        central_auto_power_ratio=cfg.central_auto_power_ratio,
    )
    groups = group_materials_by_category(materials)

    lookup = subscription_lookup or StandardSubscriptionLookup()
    subscription = lookup.lookup(
        phase=config_inv.phase,
        project_power_kwc=pv_w / 1000.0,
        agcp_a=config_inv.agcp_value,
    )

    blocking = compute_blocking_reasons(report, sizing, micro_report)
    advisories = compute_advisories(report, sizing, micro_report, subscription)
    logger.debug(
        "Recálculo %s: compatible=%s, %d líneas BOM, %d bloqueos, %d avisos",
        project.id,
        report.is_compatible,
        len(materials),
        len(blocking),
        len(advisories),
    )

    return RecomputeResult(
        project=project,
        climate=climate,
        inverter=inverter,
        report=report,
        sizing=sizing,
        micro_branches=micro_report,
        materials=materials,
        groups=groups,
        blocking_reasons=blocking,
        advisories=advisories,
        subscription=subscription,
        can_export=not blocking,
    )


__all__ = [
    "NO_PANEL_MESSAGE",
    "ElectricalSizing",
    "RecomputeResult",
    "compute_blocking_reasons",
    "compute_advisories",
    "recompute",
]
