# bom/structure.py
"""
Structure par champ (rails, brides, fixations) + micro-onduleurs du champ.

Responsabilidad:
- Geometría del champ (ancho / alto con 20 mm entre paneles).
- Reglas K2 y ESDEC por rol de pieza (SPLICE, END_CAP, MID_CLAMP...).
- Piezas micro-onduleur del champ y rallonges MC4.

Notas:
- Se usa la caja envolvente rows × columns (aunque row_configuration sea irregular)
  para no quedarse corto de rail en la línea más larga.
- Un rol ausente del catálogo de la marca no genera línea.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import List, Mapping, Optional

from core.model import InverterBrand, InverterConfig, MountingSystem, RoofField, RoofType
from electrical.catalogs import Catalogs, InverterComponent, PanelComponent, PartComponent
from electrical.topology import (
    field_panel_count,
    is_fox_micro_model,
    micro_count_for_panels,
)

from .inverters import micro_inverter_parts, mc4_extension_line
from .material import Material, material_from
from .rules import PartRef

logger = logging.getLogger(__name__)

INTER_CLAMP_GAP_MM = 20
HEAVY_DUTY_CLIP = PartRef("1008068", "ClickFit EVO - Clip métal poids lourd 2-8kg (Micro-ond)", "A0K6F7")


@dataclass(frozen=True)
class FieldGeometry:
    width_mm: float
    height_mm: float
    rail_lines: int
    line_length_mm: float
    vertical_rails: bool


def field_geometry(field: RoofField, panel: PanelComponent, system: MountingSystem) -> FieldGeometry:
    rows, cols = int(field.panels.rows), int(field.panels.columns)
    portrait = field.panels.orientation == "Portrait"
    along_cols = panel.width_mm if portrait else panel.height_mm
    along_rows = panel.height_mm if portrait else panel.width_mm
    width = cols * along_cols + max(0, cols - 1) * INTER_CLAMP_GAP_MM
    height = rows * along_rows + max(0, rows - 1) * INTER_CLAMP_GAP_MM

    vertical = (field.rail_orientation or system.rail_orientation or "Horizontal") == "Vertical"
    return FieldGeometry(
        width_mm=width,
        height_mm=height,
        rail_lines=cols * 2 if vertical else rows * 2,
        line_length_mm=height if vertical else width,
        vertical_rails=vertical,
    )


class _Adder:
    def __init__(self) -> None:
        self.lines: List[Material] = []

    def add(self, comp: Optional[PartComponent], qty: float, optional: bool = False) -> None:
        if comp is None or qty <= 0:
            return
        desc = f"{comp.description}*" if optional else comp.description
        self.lines.append(material_from(comp, qty, description=desc))


def _micro_supports(config: InverterConfig, catalogs: Catalogs, panels: int) -> int:
    """Micros del champ que necesitan soporte / clip (0 si no es sistema micro)."""
    if config.brand == InverterBrand.NONE:
        return 0
    return micro_count_for_panels(config, catalogs, panels)


def _supports_per_micro(config: InverterConfig) -> int:
    return 2 if is_fox_micro_model(config) else 1


# ==========================================================
# ESDEC
# ==========================================================

def _esdec(
    add: _Adder,
    parts: Mapping[str, PartComponent],
    rails: List[PartComponent],
    geo: FieldGeometry,
    field: RoofField,
    panels: int,
    micros: int,
    config: InverterConfig,
) -> None:
    rows, cols = int(field.panels.rows), int(field.panels.columns)
    lines, length = geo.rail_lines, geo.line_length_mm

    if rails:
        rail = rails[0]
        rail_len = float(rail.length_mm or 0)
        add.add(rail, math.ceil(lines * length / rail_len))
        per_line = math.ceil(length / rail_len)
        if per_line > 1:
            add.add(parts.get("SPLICE"), (per_line - 1) * lines)

    add.add(parts.get("END_CAP"), lines * 2)
    add.add(parts.get("UNIVERSAL_CLAMP"), panels * 2 + 4 if geo.vertical_rails else (cols + 1) * rows * 2)

    hook = parts.get("HOOK_UNIVERSAL")
    fixing = parts.get("HANGER_BOLT_FIBRO") if field.roof.type == RoofType.FIBROCIMENT else hook
    if fixing is not None:
        total = max(2, math.ceil(length / 1000)) * lines
        add.add(fixing, total)
        if fixing is hook:
            add.add(parts.get("HOOK_GASKET"), total, optional=True)

    if micros > 0:
        clip = parts.get("CLIP_HEAVY_DUTY") or PartComponent(
            id=HEAVY_DUTY_CLIP.id, description=HEAVY_DUTY_CLIP.description, price=HEAVY_DUTY_CLIP.price
        )
        add.add(clip, micros * _supports_per_micro(config))


# ==========================================================
# K2
# ==========================================================

def _k2(
    add: _Adder,
    parts: Mapping[str, PartComponent],
    rails: List[PartComponent],
    geo: FieldGeometry,
    field: RoofField,
    panels: int,
    micros: int,
    config: InverterConfig,
) -> None:
    rows, cols = int(field.panels.rows), int(field.panels.columns)
    lines, length = geo.rail_lines, geo.line_length_mm

    if rails and length > 0:
        rail = rails[0]
        per_line = math.ceil(length / float(rail.length_mm or 1))
        add.add(rail, per_line * lines)
        add.add(parts.get("SPLICE"), max(0, per_line - 1) * lines)

    add.add(parts.get("END_CAP"), lines * 2)
    add.add(parts.get("MID_CLAMP"), (rows - 1) * 2 * cols if geo.vertical_rails else (cols - 1) * 2 * rows)
    add.add(parts.get("END_CLAMP"), 4 * cols if geo.vertical_rails else 4 * rows)

    if field.roof.type == RoofType.FIBROCIMENT:
        add.add(parts.get("HANGER_BOLT_FIBRO"), max(2 * lines, math.ceil(length / 1000) * lines))
    else:
        hooks = max(2 * lines, math.ceil(length / 800) * lines)
        add.add(parts.get("HOOK_CROSSHOOK"), hooks)
        add.add(parts.get("WOOD_SCREW_8X100"), hooks * 2)

    add.add(parts.get("GROUND_LUG_K2SZ"), panels)
    if micros > 0:
        add.add(parts.get("STAIRPLATE_KIT"), micros * _supports_per_micro(config))


# ==========================================================
# API pública
# ==========================================================

def field_materials(
    field: RoofField,
    panel: Optional[PanelComponent],
    catalogs: Catalogs,
    system: MountingSystem,
    config: InverterConfig,
    inverter: Optional[InverterComponent] = None,
) -> List[Material]:
    """
    BOM de un champ: panneaux, structure y piezas micro-onduleur.

    Devuelve [] si el champ no tiene filas o columnas, o si el panel no está en catálogo.
    """
    if panel is None or int(field.panels.rows) == 0 or int(field.panels.columns) == 0:
        return []

    panels = field_panel_count(field)
    add = _Adder()
    if panels > 0:
        add.lines.append(material_from(panel, panels))

    geo = field_geometry(field, panel, system)
    parts = catalogs.mounting_parts(system.brand)
    rails = catalogs.rails(system.brand)
    micros = _micro_supports(config, catalogs, panels)

    if system.brand == "ESDEC":
        _esdec(add, parts, rails, geo, field, panels, micros, config)
    else:
        _k2(add, parts, rails, geo, field, panels, micros, config)

    if config.brand != InverterBrand.NONE:
        add.lines.extend(micro_inverter_parts(field, config, catalogs, inverter))
        add.lines.extend(mc4_extension_line(config, catalogs, panels))

    logger.debug("Champ %s: %d lignes (%s)", field.id, len(add.lines), system.brand)
    return add.lines


__all__ = ["FieldGeometry", "field_geometry", "field_materials", "INTER_CLAMP_GAP_MM"]
