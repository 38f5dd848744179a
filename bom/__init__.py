"""
Dominio liste matériel (BOM) (Motor FV)

API pública:
- build_bill_of_materials: liste complète d'un projet
- group_materials_by_category: regroupement pour affichage / export
- merge_cable_coils / apply_price_overrides: finalisation de la liste

Regla arquitectónica:
Otros módulos importan siempre desde:
    bom
"""

from .assembly import build_bill_of_materials, dc_run_sections, default_ac_sizing
from .grouping import (
    CATEGORY_ORDER,
    MaterialCategory,
    MaterialGroup,
    SubSection,
    categorize,
    group_materials_by_category,
)
from .material import BomLines, Material
from .merge import apply_price_overrides, is_cable_line, merge_cable_coils
from .structure import FieldGeometry, field_geometry, field_materials

__all__ = [
    # ensamblado
    "build_bill_of_materials",
    "dc_run_sections",
    "default_ac_sizing",

    # líneas
    "Material",
    "BomLines",
    "field_materials",
    "field_geometry",
    "FieldGeometry",

    # finalización
    "apply_price_overrides",
    "is_cable_line",
    "merge_cable_coils",

    # agrupación
    "CATEGORY_ORDER",
    "MaterialCategory",
    "MaterialGroup",
    "SubSection",
    "categorize",
    "group_materials_by_category",
]
