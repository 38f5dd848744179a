# bom/inverters.py
"""
Onduleurs: micro-onduleurs par champ et onduleur centralisé.
"""
from __future__ import annotations

import math
from typing import List, Optional

from core.model import InverterBrand, InverterConfig, RoofField
from electrical.catalogs import Catalogs, InverterComponent
from electrical.topology import (
    DEFAULT_APS_MODEL,
    DEFAULT_CUSTOM_MODEL,
    DEFAULT_ENPHASE_MODEL,
    field_panel_count,
    is_custom_micro,
    is_fox_micro_model,
    is_micro_inverter,
    is_micro_system,
    panels_per_micro,
)

from .material import Material, material_from, part_line
from .rules import (
    APS_CABLES,
    APS_CONNECTORS,
    APS_END_CAP,
    ENPHASE_Q_CABLES,
    ENPHASE_TERMINATORS,
    FOX_MICRO_AC_CABLE,
    FOX_MICRO_CAP,
    FOX_MICRO_PER_BRANCH,
    FOX_MICRO_TEE,
    MC4_EXTENSION,
    MC4_EXTENSION_KEY,
    PartRef,
)


def _model_id(config: InverterConfig, inverter: Optional[InverterComponent], default: str) -> str:
    model = (config.model or "").strip()
    if model and model != "Auto":
        return model
    return inverter.id if inverter is not None else default


def micro_inverter_parts(
    field: RoofField,
    config: InverterConfig,
    catalogs: Catalogs,
    inverter: Optional[InverterComponent] = None,
) -> List[Material]:
    """Micro-onduleurs, câbles de liaison, embouts y connectique de un champ."""
    panels = field_panel_count(field)
    if panels == 0:
        return []

    portrait = field.panels.orientation == "Portrait"
    phase = config.phase
    out: List[Material] = []

    if is_micro_system(config, catalogs):
        out.extend(part_line(catalogs, ref, 1) for ref in APS_CONNECTORS[phase])

    if config.brand == InverterBrand.ENPHASE:
        model = _model_id(config, inverter, DEFAULT_ENPHASE_MODEL)
        out.append(part_line(catalogs, PartRef(model, "Micro-onduleur Enphase"), panels))
        cable_id = ENPHASE_Q_CABLES[(phase, portrait)]
        out.append(part_line(catalogs, PartRef(cable_id, "Câble Enphase Q-Cable"), panels))
        out.append(part_line(catalogs, ENPHASE_TERMINATORS[phase], 1))

    elif config.brand == InverterBrand.APSYSTEMS:
        n = math.ceil(panels / 2)
        model = _model_id(config, inverter, DEFAULT_APS_MODEL)
        comp = catalogs.inverter_side(model, "Micro-onduleur AP Systems")
        out.append(material_from(comp, n, description=f"{comp.description} (1 pour 2 panneaux)"))
        out.append(part_line(catalogs, APS_CABLES[portrait], n))
        out.append(part_line(catalogs, APS_END_CAP, 1))

    elif is_fox_micro_model(config):
        inputs = panels_per_micro(config)
        n = math.ceil(panels / inputs)
        comp = catalogs.inverter_side(config.model, "Micro-onduleur FoxESS")
        out.append(material_from(comp, n, description=f"{comp.description} (1 pour {inputs} panneaux)"))
        out.append(part_line(catalogs, FOX_MICRO_AC_CABLE, n))
        out.append(part_line(catalogs, FOX_MICRO_TEE, n))

        # 1 branche = 7 micros max; chaque branche en plus: bouchon + paire de connecteurs
        extra = (n - 1) // FOX_MICRO_PER_BRANCH
        out.append(part_line(catalogs, FOX_MICRO_CAP, 1 + extra))
        if extra > 0:
            male, female = APS_CONNECTORS["Mono"]
            out.append(part_line(catalogs, female, extra))
            out.append(part_line(catalogs, male, extra))

    elif is_custom_micro(config, catalogs):
        model = _model_id(config, inverter, DEFAULT_CUSTOM_MODEL)
        out.append(part_line(catalogs, PartRef(model, "Micro-onduleur Perso"), panels))

    return out


def mc4_extension_line(config: InverterConfig, catalogs: Catalogs, panels: int) -> List[Material]:
    """Deux rallonges MC4 par micro (APS, FoxESS micro, micro perso)."""
    if config.brand == InverterBrand.APSYSTEMS or is_fox_micro_model(config) or is_custom_micro(config, catalogs):
        micros = math.ceil(panels / panels_per_micro(config))
    else:
        micros = 0
    if micros <= 0:
        return []
    comp = catalogs.cable(MC4_EXTENSION_KEY)
    if comp is None:
        return [Material(MC4_EXTENSION.id, MC4_EXTENSION.description, micros * 2, MC4_EXTENSION.price)]
    return [material_from(comp, micros * 2)]


def central_inverter_line(
    config: InverterConfig,
    catalogs: Catalogs,
    pv_power_w: float,
    inverter: Optional[InverterComponent],
) -> Optional[Material]:
    """
    Onduleur centralisé (FoxESS hors micro, ou Custom non micro).

    inverter: onduleur activo ya resuelto (modelo elegido o selección automática).
    """
    if pv_power_w <= 0:
        return None

    if config.brand == InverterBrand.CUSTOM:
        comp = catalogs.inverter_side(_model_id(config, inverter, DEFAULT_CUSTOM_MODEL), "Onduleur Personnalisé")
        if isinstance(comp, InverterComponent) and is_micro_inverter(comp):
            return None
        return material_from(comp, 1)

    if config.brand != InverterBrand.FOXESS or is_fox_micro_model(config):
        return None

    if inverter is not None:
        return material_from(inverter, 1)
    comp = catalogs.inverter_side(config.model, "Onduleur FoxESS")
    return material_from(comp, 1)


__all__ = ["micro_inverter_parts", "mc4_extension_line", "central_inverter_line"]
