# bom/boxes.py
"""
Coffrets AC / DC, Q-Relay Enphase y disjoncteur de tête (AGCP).

Responsabilidad:
- Elegir la referencia de coffret AC por marca, fase, stockage / backup
  y calibre requerido (1.25 × I de salida del sistema).
- Elegir el coffret DC por nº de MPPT, stockage y tensión Voc fría (600 / 1000 V).
- Un coffret ausente del catálogo sale como línea "à chiffrer" con su id.
"""
from __future__ import annotations

import logging
import math
from typing import List, Optional, Sequence

from core.model import ConfiguredString, InverterBrand, InverterConfig
from electrical.catalogs import Catalogs, InverterComponent, PanelComponent
from electrical.conductors import ac_current_from_power
from electrical.protections import head_breaker_catalog_id
from electrical.topology import is_fox_micro_model, is_micro_inverter

from .material import Material, box_line, part_line
from .rules import (
    PartRef,
    APS_MONO_BY_BRANCHES,
    APS_MONO_BY_POWER,
    APS_TRI_BOX,
    DC_BOX_1000V_THRESHOLD_V,
    DC_BOX_DEFAULT_VOC,
    DC_BOXES,
    ENPHASE_MONO_BY_BRANCHES,
    ENPHASE_MONO_BY_BREAKER,
    ENPHASE_TRI_BOX,
    FOX_BACKUP_MONO,
    FOX_BACKUP_TRI,
    FOX_BATTERY_MONO,
    FOX_BATTERY_TRI,
    FOX_PLAIN_MONO,
    FOX_PLAIN_TRI,
    Q_RELAYS_BY_BOX,
    pick_from_ladder,
)

logger = logging.getLogger(__name__)

DEFAULT_TEMP_COEFF_VOC = -0.26


def required_breaker_rating(system_ac_power_va: float, is_three_phase: bool, safety_factor: float = 1.25) -> float:
    return ac_current_from_power(system_ac_power_va, is_three_phase) * safety_factor


def ac_box_id(
    config: InverterConfig,
    *,
    system_ac_power_va: float,
    branch_count: int = 0,
    safety_factor: float = 1.25,
) -> Optional[str]:
    tri = config.is_three_phase
    required = required_breaker_rating(system_ac_power_va, tri, safety_factor)
    branches = min(int(branch_count or 0), 3)

    if config.brand == InverterBrand.ENPHASE:
        if tri:
            return ENPHASE_TRI_BOX
        if branches > 0:
            return ENPHASE_MONO_BY_BRANCHES[branches]
        return pick_from_ladder(ENPHASE_MONO_BY_BREAKER, required)

    if config.brand == InverterBrand.APSYSTEMS:
        if tri:
            return APS_TRI_BOX
        if branches > 0:
            return APS_MONO_BY_BRANCHES[branches]
        return pick_from_ladder(APS_MONO_BY_POWER, system_ac_power_va)

    if config.brand in (InverterBrand.FOXESS, InverterBrand.CUSTOM):
        if config.has_backup:
            return FOX_BACKUP_TRI if tri else pick_from_ladder(FOX_BACKUP_MONO, required)
        if config.has_battery:
            return FOX_BATTERY_TRI if tri else pick_from_ladder(FOX_BATTERY_MONO, required)
        return pick_from_ladder(FOX_PLAIN_TRI if tri else FOX_PLAIN_MONO, required)

    return None


def q_relay_lines(config: InverterConfig, box_id: Optional[str], catalogs: Catalogs) -> List[Material]:
    """Enphase: 1/2/3 Q-Relay mono selon le coffret, 1 Q-Relay tri pour 13488."""
    if config.brand != InverterBrand.ENPHASE or not box_id or box_id not in Q_RELAYS_BY_BOX:
        return []
    ref, qty = Q_RELAYS_BY_BOX[box_id]
    return [part_line(catalogs, ref, qty)]


def dc_box_id(
    config: InverterConfig,
    inverter: Optional[InverterComponent],
    *,
    strings: Sequence[ConfiguredString],
    total_panels: int,
    panel: Optional[PanelComponent],
    temp_min_c: float,
) -> Optional[str]:
    """
    Coffret DC de un onduleur centralisé FoxESS / Custom.

    Voc fría = Voc panel × (1 + coef/100 × (Tmin − 25)) × paneles del string más largo
    (si no hay strings: ceil(total / nº MPPT)). > 600 V → versión 1000 V.
    """
    if config.brand not in (InverterBrand.FOXESS, InverterBrand.CUSTOM):
        return None
    if config.brand == InverterBrand.FOXESS and is_fox_micro_model(config):
        return None
    if inverter is None or is_micro_inverter(inverter):
        return None

    mppt = inverter.mppt_count or 2
    if strings:
        max_series = max(int(s.panel_count) for s in strings)
    else:
        max_series = math.ceil(total_panels / mppt)

    voc = (panel.voc if panel is not None else 0) or DC_BOX_DEFAULT_VOC
    coeff = (panel.temp_coeff_voc if panel is not None else None) or DEFAULT_TEMP_COEFF_VOC
    voc_cold = voc * (1 + (coeff / 100) * (temp_min_c - 25)) * max_series
    use_1000v = voc_cold > DC_BOX_1000V_THRESHOLD_V

    storage = bool(config.has_battery or config.has_backup)
    if mppt == 2:
        pair = DC_BOXES[(storage, 2)]
    elif mppt >= 3:
        pair = DC_BOXES[(storage, 3)]
    else:
        return None
    return pair[1] if use_1000v else pair[0]


def box_lines(
    config: InverterConfig,
    catalogs: Catalogs,
    *,
    ac_box: Optional[str],
    dc_box: Optional[str],
) -> List[Material]:
    out: List[Material] = []
    if ac_box:
        out.append(box_line(catalogs, PartRef(ac_box, f"Coffret AC {ac_box} (à chiffrer)")))
        out.extend(q_relay_lines(config, ac_box, catalogs))

    if dc_box:
        out.append(box_line(catalogs, PartRef(dc_box, f"Coffret DC {dc_box} (à chiffrer)")))

    head = head_breaker_catalog_id(config.agcp_value, config.is_three_phase)
    logger.debug("Coffrets: AC=%s DC=%s tête=%s", ac_box, dc_box, head)
    if head:
        out.append(box_line(catalogs, PartRef(head, f"Disjoncteur de tête {head} (à chiffrer)")))
    return out


__all__ = ["required_breaker_rating", "ac_box_id", "q_relay_lines", "dc_box_id", "box_lines"]
