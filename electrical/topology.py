# electrical/topology.py
"""
Topología del sistema FV (Motor FV).

Responsabilidad:
- Contar paneles (por champ y total) y potencia crête.
- Decidir si el sistema es micro-onduleur o centralizado.
- Resolver el onduleur activo (modelo elegido o selección automática).
- Potencias AC de referencia (dimensionamiento de câbles y de coffrets).

Notas:
- Funciones puras sobre el snapshot Project + Catalogs.
- Nada aquí lanza excepciones por datos incompletos: devuelve 0 / None.
"""
from __future__ import annotations

import logging
import math
from typing import Optional

from core.model import InverterBrand, InverterConfig, PanelLayout, Project, RoofField
from electrical.catalogs import Catalogs, InverterComponent, PanelComponent

logger = logging.getLogger(__name__)

DEFAULT_ENPHASE_MODEL = "ENP-IQ8MC-72-M-INT"
DEFAULT_APS_MODEL = "APS-DS3"
DEFAULT_CUSTOM_MODEL = "OND-PERSO"
DEFAULT_CENTRAL_MODEL = "FOX-S3000"

MICRO_VOLTAGE_THRESHOLD_V = 100.0


# ==========================================================
# Paneles
# ==========================================================

def panel_count(layout: PanelLayout) -> int:
    """Suma de row_configuration si existe; si no, rows × columns."""
    if layout.row_configuration:
        return sum(max(0, int(n)) for n in layout.row_configuration)
    return max(0, int(layout.rows)) * max(0, int(layout.columns))


def field_panel_count(field: RoofField) -> int:
    return panel_count(field.panels)


def total_panel_count(project: Project) -> int:
    return sum(field_panel_count(f) for f in project.fields)


def field_panel(field: RoofField, catalogs: Catalogs) -> Optional[PanelComponent]:
    return catalogs.find_panel(field.panels.panel_id)


def main_panel(project: Project, catalogs: Catalogs) -> Optional[PanelComponent]:
    """Panel del primer champ (referencia de los cálculos globales)."""
    if not project.fields:
        return None
    return field_panel(project.fields[0], catalogs)


def total_power_w(project: Project, catalogs: Catalogs) -> float:
    total = 0.0
    for f in project.fields:
        p = field_panel(f, catalogs)
        if p is not None:
            total += p.power_w * field_panel_count(f)
    return total


# ==========================================================
# Tipo de sistema
# ==========================================================

def is_micro_inverter(inverter: Optional[InverterComponent]) -> bool:
    if inverter is None:
        return False
    return bool(inverter.is_micro) or inverter.max_input_voltage < MICRO_VOLTAGE_THRESHOLD_V


def is_fox_micro_model(config: InverterConfig) -> bool:
    return config.brand == InverterBrand.FOXESS and "MICRO" in (config.model or "")


def is_custom_micro(config: InverterConfig, catalogs: Catalogs) -> bool:
    if config.brand != InverterBrand.CUSTOM:
        return False
    return is_micro_inverter(catalogs.inverter(config.model or DEFAULT_CUSTOM_MODEL))


def is_micro_system(config: InverterConfig, catalogs: Catalogs) -> bool:
    """Enphase / APSystems son micro en cuanto se elige la marca."""
    return (
        config.brand in (InverterBrand.ENPHASE, InverterBrand.APSYSTEMS)
        or is_custom_micro(config, catalogs)
        or is_fox_micro_model(config)
    )


def requires_string_config(config: InverterConfig) -> bool:
    """FoxESS centralizado o Custom: la répartition par MPPT es obligatoria."""
    return (config.brand == InverterBrand.FOXESS and "MICRO" not in (config.model or "")) or (
        config.brand == InverterBrand.CUSTOM
    )


def panels_per_micro(config: InverterConfig) -> int:
    """Entradas panel por micro-onduleur para el chiffrage (Enphase/Custom 1, APS 2, FoxESS 2 o 4)."""
    if config.brand == InverterBrand.APSYSTEMS:
        return 2
    if config.brand == InverterBrand.FOXESS:
        return 4 if "2000" in (config.model or "") else 2
    return 1


def micro_count_for_panels(config: InverterConfig, catalogs: Catalogs, panels: int) -> int:
    if panels <= 0 or not is_micro_system(config, catalogs):
        return 0
    return int(math.ceil(panels / panels_per_micro(config)))


# ==========================================================
# Onduleur activo
# ==========================================================

def auto_select_central(catalogs: Catalogs, pv_power_w: float, power_ratio: float = 0.8) -> Optional[InverterComponent]:
    """FOX-S / FOX-F más pequeño con potencia >= ratio × PV; si no, el mayor; si no, FOX-S3000."""
    candidates = sorted(
        (c for c in catalogs.inverters.values() if c.id.startswith("FOX-S") or c.id.startswith("FOX-F")),
        key=lambda c: c.power_w,
    )
    target = pv_power_w * power_ratio
    found = next((c for c in candidates if c.power_w >= target), candidates[-1] if candidates else None)
    if found is None:
        return catalogs.inverter(DEFAULT_CENTRAL_MODEL)
    return found


def resolve_active_inverter(
    project: Project,
    catalogs: Catalogs,
    *,
    power_ratio: float = 0.8,
) -> Optional[InverterComponent]:
    config = project.inverter_config
    if config.brand == InverterBrand.NONE:
        return None

    model = (config.model or "").strip()
    if model and model != "Auto":
        inv = catalogs.inverter(model)
        if inv is None:
            logger.debug("Onduleur %s absent du catalogue", model)
        return inv

    if config.brand == InverterBrand.ENPHASE:
        return catalogs.inverter(DEFAULT_ENPHASE_MODEL)
    if config.brand == InverterBrand.APSYSTEMS:
        return catalogs.inverter(DEFAULT_APS_MODEL)
    if config.brand == InverterBrand.CUSTOM:
        return catalogs.inverter(DEFAULT_CUSTOM_MODEL)

    inv = auto_select_central(catalogs, total_power_w(project, catalogs), power_ratio)
    logger.debug("Onduleur auto retenu: %s", inv.id if inv else None)
    return inv


def is_central(config: InverterConfig, inverter: Optional[InverterComponent]) -> bool:
    if inverter is None or is_micro_inverter(inverter):
        return False
    return config.brand not in (InverterBrand.ENPHASE, InverterBrand.APSYSTEMS)


# ==========================================================
# Potencias AC de referencia
# ==========================================================

def reference_ac_power_va(
    config: InverterConfig,
    inverter: Optional[InverterComponent],
    pv_power_w: float,
) -> float:
    """Potencia de dimensionamiento de AC1/AC2: AC máx. del onduleur si es centralizado, si no la PV."""
    if inverter is None or not is_central(config, inverter):
        return pv_power_w
    return inverter.max_ac_power or inverter.power_w or pv_power_w


def system_ac_power_va(
    config: InverterConfig,
    catalogs: Catalogs,
    inverter: Optional[InverterComponent],
    pv_power_w: float,
    total_panels: int,
) -> float:
    """Potencia AC del conjunto (elección de coffret AC): micros × AC unitaria, o AC del onduleur."""
    if inverter is None:
        return pv_power_w
    if is_micro_inverter(inverter) or is_micro_system(config, catalogs):
        return micro_count_for_panels(config, catalogs, total_panels) * (inverter.max_ac_power or 0.0)
    return inverter.max_ac_power or inverter.power_w or pv_power_w


__all__ = [
    "DEFAULT_ENPHASE_MODEL",
    "DEFAULT_APS_MODEL",
    "DEFAULT_CUSTOM_MODEL",
    "DEFAULT_CENTRAL_MODEL",
    "panel_count",
    "field_panel_count",
    "total_panel_count",
    "field_panel",
    "main_panel",
    "total_power_w",
    "is_micro_inverter",
    "is_fox_micro_model",
    "is_custom_micro",
    "is_micro_system",
    "requires_string_config",
    "panels_per_micro",
    "micro_count_for_panels",
    "auto_select_central",
    "resolve_active_inverter",
    "is_central",
    "reference_ac_power_va",
    "system_ac_power_va",
]
