# bom/assembly.py
"""
Ensamblado de la liste matériel del proyecto (Motor FV).

Responsabilidad:
- Orquestar las piezas del BOM en un orden estable:
  champs → onduleur central → câbles AC → branches micro → terre / sticker →
  accessoires de marque → câbles DC → batterie → borne VE → coffrets → AGCP.
- Aplicar los prix utilisateur y unir las couronnes de câble.

Notas:
- Las secciones AC1 / AC2 / DC vienen del mismo dimensionamiento que el informe
  (se calculan aquí sólo si el llamador no las pasa).
- Función pura: mismo proyecto + catálogos → misma lista.
"""
from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence, Tuple

from core.model import Climate, InverterBrand, MicroBranch, Project
from electrical.catalogs import Catalogs, InverterComponent, PanelComponent
from electrical.conductors import AcSizing, DcRunSizing, compute_ac_segments, pick_auto_dc_section
from electrical.micro import ensure_micro_branches
from electrical.topology import (
    field_panel,
    is_central,
    is_fox_micro_model,
    is_micro_system,
    main_panel,
    micro_count_for_panels,
    reference_ac_power_va,
    resolve_active_inverter,
    system_ac_power_va,
    total_panel_count,
    total_power_w,
)

from .accessories import battery_lines, brand_accessory_lines, ev_charger_lines, ground_and_sticker_lines
from .boxes import ac_box_id, box_lines, dc_box_id
from .cables import ac_cable_line, dc_cable_lines, micro_branch_cable_lines
from .inverters import central_inverter_line
from .material import BomLines, Material, part_line
from .merge import apply_price_overrides, merge_cable_coils
from .rules import AC1_LABEL, AC2_LABEL, MC4_CONNECTORS
from .structure import field_materials

logger = logging.getLogger(__name__)


def _labelled(line: Optional[Material], suffix: str) -> Optional[Material]:
    if line is None:
        return None
    return Material(line.id, f"{line.description}{suffix}", line.quantity, line.price, line.datasheet_url)


def _needs_dc_cabling(project: Project, catalogs: Catalogs) -> bool:
    config = project.inverter_config
    central_brand = (config.brand == InverterBrand.FOXESS and not is_fox_micro_model(config)) or (
        config.brand == InverterBrand.CUSTOM
    )
    return central_brand and not is_micro_system(config, catalogs)


def dc_run_sections(
    project: Project,
    panel: Optional[PanelComponent],
    dc_sizing: Sequence[DcRunSizing] = (),
    *,
    vmp_hot_factor: float = 0.88,
    isc_factor: float = 1.25,
) -> List[Tuple[float, float]]:
    """
    (longitud, sección efectiva) de cada liaison DC con longitud.

    Sección: forzada; si no, la del dimensionamiento DC del informe; si el MPPT
    no está dimensionado, Auto con Vmp chaud ≈ n × Vmp × 0.88 e Isc × 1.25.
    """
    config = project.inverter_config
    sized: Dict[int, DcRunSizing] = {r.mppt_index: r for r in dc_sizing}
    isc = panel.isc if panel is not None else 0.0
    vmp = panel.vmp if panel is not None else 0.0

    out: List[Tuple[float, float]] = []
    for run in config.dc_cabling_runs:
        length = float(run.length_m or 0)
        if length <= 0:
            continue
        if run.section_mm2 is not None:
            out.append((length, float(run.section_mm2)))
            continue
        sizing = sized.get(int(run.mppt_index))
        if sizing is not None:
            out.append((length, sizing.effective_section_mm2))
            continue
        mppt_panels = sum(s.panel_count for s in config.configured_strings if s.mppt_index == run.mppt_index)
        vmp_hot = max(1.0, mppt_panels * vmp * vmp_hot_factor)
        out.append((length, pick_auto_dc_section(length, isc * isc_factor if isc > 0 else 0.0, vmp_hot)))
    return out


def default_ac_sizing(
    project: Project,
    catalogs: Catalogs,
    inverter: Optional[InverterComponent],
    *,
    safety_factor: float = 1.25,
) -> AcSizing:
    config = project.inverter_config
    pv = total_power_w(project, catalogs)
    return compute_ac_segments(
        is_central=is_central(config, inverter),
        pv_power_w=pv,
        ac_power_va=reference_ac_power_va(config, inverter, pv),
        distance_to_panel_m=project.distance_to_panel,
        distance_inverter_to_ac_box_m=project.distance_inverter_to_ac_box,
        is_three_phase=project.is_three_phase,
        agcp_a=config.agcp_value,
        ac2_forced_section=project.ac_cable_section_mm2,
        ac1_forced_section=project.ac1_cable_section_mm2,
        safety_factor=safety_factor,
    )


def build_bill_of_materials(
    project: Project,
    catalogs: Catalogs,
    *,
    climate: Optional[Climate] = None,
    ac_sizing: Optional[AcSizing] = None,
    dc_sizing: Sequence[DcRunSizing] = (),
    micro_branch_count: Optional[int] = None,
    default_temp_min_c: float = -10.0,
    safety_factor: float = 1.25,
    dc_vmp_hot_factor: float = 0.88,
    central_auto_power_ratio: float = 0.8,
) -> Tuple[Material, ...]:
    """
    Liste matériel completa del proyecto.

    Args:
        ac_sizing: dimensionamiento AC1 / AC2 ya calculado (secciones efectivas).
        dc_sizing: dimensionamiento DC por MPPT ya calculado.
        micro_branch_count: nº de branches micro (elección del coffret Enphase / APS).
    """
    config = project.inverter_config
    inverter = resolve_active_inverter(project, catalogs, power_ratio=central_auto_power_ratio)
    lines = BomLines()

    # 1) champs (sumados por id)
    for f in project.fields:
        lines.merge_all(
            field_materials(f, field_panel(f, catalogs), catalogs, project.system, config, inverter)
        )

    pv_w = total_power_w(project, catalogs)
    if pv_w > 0:
        tri = project.is_three_phase
        central = is_central(config, inverter)
        ac_power = reference_ac_power_va(config, inverter, pv_w)
        sizing = ac_sizing or default_ac_sizing(project, catalogs, inverter, safety_factor=safety_factor)

        lines.push(central_inverter_line(config, catalogs, pv_w, inverter))

        # 2) câbles AC
        if central and sizing.ac1 is not None:
            ac1 = ac_cable_line(
                ac_power, project.distance_inverter_to_ac_box, catalogs, tri, sizing.ac1.effective_section_mm2
            )
            lines.push(_labelled(ac1, AC1_LABEL))
        ac2 = ac_cable_line(ac_power, project.distance_to_panel, catalogs, tri, sizing.ac2.effective_section_mm2)
        lines.push(_labelled(ac2, AC2_LABEL))

        total_panels = total_panel_count(project)
        branches = _effective_branches(project, catalogs, inverter, total_panels)
        for m in micro_branch_cable_lines(branches, catalogs):
            lines.add_or_inc(m)

        # 3) accessoires
        lines.extend(ground_and_sticker_lines(config, catalogs))
        lines.extend(brand_accessory_lines(config, catalogs))

        panel = main_panel(project, catalogs)
        if _needs_dc_cabling(project, catalogs):
            runs = dc_run_sections(project, panel, dc_sizing, vmp_hot_factor=dc_vmp_hot_factor, isc_factor=safety_factor)
            lines.extend(dc_cable_lines(runs, catalogs))
            lines.extend(part_line(catalogs, ref, 1) for ref in MC4_CONNECTORS)

        lines.extend(battery_lines(config, catalogs))
        lines.extend(ev_charger_lines(project.ev_charger, config, catalogs))

        # 4) coffrets
        system_va = system_ac_power_va(config, catalogs, inverter, pv_w, total_panels)
        if micro_branch_count is None:
            micro_branch_count = len(branches)
        ac_box = ac_box_id(
            config,
            system_ac_power_va=system_va,
            branch_count=micro_branch_count,
            safety_factor=safety_factor,
        )
        dc_box = dc_box_id(
            config,
            inverter,
            strings=config.configured_strings,
            total_panels=total_panels,
            panel=panel,
            temp_min_c=climate.temp_min if climate else default_temp_min_c,
        )
        lines.extend(box_lines(config, catalogs, ac_box=ac_box, dc_box=dc_box))

    priced = apply_price_overrides(lines.as_tuple(), project.user_prices)
    merged = merge_cable_coils(priced, catalogs)
    logger.debug("BOM: %d lignes (%d avant fusion câbles)", len(merged), len(priced))
    return merged


def _effective_branches(
    project: Project,
    catalogs: Catalogs,
    inverter: Optional[InverterComponent],
    total_panels: int,
) -> Tuple[MicroBranch, ...]:
    """Branches configuradas, o el reparto por defecto (las mismas que el informe)."""
    config = project.inverter_config
    if inverter is None or not is_micro_system(config, catalogs) or total_panels <= 0:
        return tuple(config.micro_branches)
    micros = micro_count_for_panels(config, catalogs, total_panels)
    return ensure_micro_branches(project, micros)


__all__ = ["build_bill_of_materials", "dc_run_sections", "default_ac_sizing"]
