"""
standards.py (Motor FV)

Tablas sección ↔ calibre de protección (simplificadas / conservadoras).

Responsabilidad:
- Calibre máximo admisible por sección, en dos perfiles (estándar y pesimista).
- Sección mínima coherente con un calibre dado.
- Estado de la pareja sección/protección: ok / info / danger.
- Guardas DC (corriente máxima por sección de cable solar).
- Márgenes de seguridad recomendados en toiture.

Notas:
- "danger" = supera la tabla ESTÁNDAR (no conforme, bloquea la exportación).
- "info" = supera la tabla PESIMISTA sin superar la estándar (conforme sólo en
  condiciones de instalación favorables).
- Sobredimensionar la sección nunca es error, sólo aviso.
- Estas tablas no sustituyen un cálculo Iz completo por modo de instalación.
"""

from __future__ import annotations

from typing import Dict, Literal, Mapping, Optional

from core.model import Margins, RoofType, WindZone

ProtectionStatus = Literal["ok", "info", "danger"]

# Condiciones residenciales usuales (veredicto de conformidad).
MAX_IN_STANDARD: Mapping[float, int] = {2.5: 25, 6: 40, 10: 50, 16: 63, 25: 80}

# Hipótesis desfavorables (encastré / temperatura / agrupamiento).
MAX_IN_PESSIMISTIC: Mapping[float, int] = {2.5: 20, 6: 32, 10: 40, 16: 63, 25: 80}

# Corriente DC máxima orientativa por sección de cable solar.
MAX_IDC: Mapping[float, int] = {2.5: 20, 6: 32, 10: 40, 16: 63}

REFERENCIAS = [
    "NF C 15-100: coherencia Ib ≤ In ≤ Iz (tablas simplificadas).",
    "UTE C 15-712-1: câblage DC des installations photovoltaïques.",
]


def _lookup(table: Mapping[float, int], section: float) -> Optional[int]:
    try:
        return table.get(float(section))
    except (TypeError, ValueError):
        return None


def max_device_rating_standard(section: float) -> Optional[int]:
    return _lookup(MAX_IN_STANDARD, section)


def max_device_rating_pessimistic(section: float) -> Optional[int]:
    return _lookup(MAX_IN_PESSIMISTIC, section)


def min_section_for_rating(rating_a: float) -> float:
    """Sección mínima (mm²) razonable para un calibre de protección dado."""
    if rating_a <= 20:
        return 2.5
    if rating_a <= 32:
        return 6
    if rating_a <= 40:
        return 10
    if rating_a <= 63:
        return 16
    return 25


def is_protection_too_high_for_section(section: float, rating_a: float) -> bool:
    max_std = max_device_rating_standard(section)
    if max_std is None:
        return False
    return rating_a > max_std


def protection_status(section: float, rating_a: float) -> ProtectionStatus:
    """
    Estado pedagógico de la pareja sección / calibre.

    Returns:
      - "danger": In > tabla estándar
      - "info":   tabla pesimista < In <= tabla estándar
      - "ok":     In <= tabla pesimista (o sección fuera de tabla)
    """
    max_std = max_device_rating_standard(section)
    max_pes = max_device_rating_pessimistic(section)
    if max_std is None:
        return "ok"
    if rating_a > max_std:
        return "danger"
    if max_pes is not None and rating_a > max_pes:
        return "info"
    return "ok"


def is_section_oversized_for_rating(section: float, rating_a: float) -> bool:
    return section > min_section_for_rating(rating_a)


# ==========================================================
# DC (strings MPPT)
# ==========================================================

def max_dc_current_for_section(section: float) -> Optional[int]:
    return _lookup(MAX_IDC, section)


def is_dc_cable_too_small_for_current(section: float, idc_a: float) -> bool:
    max_i = max_dc_current_for_section(section)
    if max_i is None:
        return False
    return idc_a > max_i


def is_dc_section_oversized_for_current(section: float, idc_a: float) -> bool:
    # mismos escalones que AC
    return section > min_section_for_rating(idc_a)


# ==========================================================
# Márgenes de toiture
# ==========================================================

_BASE_MARGIN_BY_ZONE: Dict[WindZone, float] = {
    WindZone.ZONE_1: 300.0,
    WindZone.ZONE_2: 300.0,
    WindZone.ZONE_3: 400.0,
    WindZone.ZONE_4: 500.0,
    WindZone.ZONE_5: 600.0,
}

_EXTRA_SIDE_BY_ROOF: Dict[RoofType, float] = {
    RoofType.TUILE_CANAL: 50.0,
    RoofType.FIBROCIMENT: 100.0,
}


def recommended_margins(roof_type: RoofType, wind_zone: WindZone) -> Margins:
    """Márgenes (mm) recomendados: zona de viento (zona de rive) + tipo de cubierta."""
    base = _BASE_MARGIN_BY_ZONE.get(wind_zone, 300.0)
    side = base + _EXTRA_SIDE_BY_ROOF.get(roof_type, 0.0)
    return Margins(top=base, bottom=base, left=side, right=side)


__all__ = [
    "ProtectionStatus",
    "MAX_IN_STANDARD",
    "MAX_IN_PESSIMISTIC",
    "MAX_IDC",
    "max_device_rating_standard",
    "max_device_rating_pessimistic",
    "min_section_for_rating",
    "is_protection_too_high_for_section",
    "protection_status",
    "is_section_oversized_for_rating",
    "max_dc_current_for_section",
    "is_dc_cable_too_small_for_current",
    "is_dc_section_oversized_for_current",
    "recommended_margins",
]
