"""
Modelo físico del tramo (Motor FV).

Responsabilidad:
- Caída de tensión DC (ida-vuelta) y AC (mono / tri) con resistividad única.
- Corriente de referencia AC a partir de una potencia aparente.

Convenciones:
    ρ = 0.023 Ω·mm²/m (cobre, DC y AC)
    DC / AC mono : ΔU = 2 · L · I · ρ / S
    AC tri       : ΔU = √3 · L · I · ρ / S,  I = P / (400 · 1.732)

Entradas no finitas, nulas o negativas devuelven 0 (nunca se lanza excepción).
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any

RHO_CU = 0.023  # Ω·mm²/m

U_MONO_V = 230.0
U_TRI_V = 400.0
SQRT3_APPROX = 1.732


def _pos(x: Any) -> float:
    """Convierte a float finito positivo; cualquier otra cosa vale 0."""
    try:
        v = float(x)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(v) or v <= 0:
        return 0.0
    return v


@dataclass(frozen=True)
class DcDrop:
    du_v: float
    du_pct: float


def compute_dc_drop(length_m: float, current_a: float, section_mm2: float, base_v: float) -> DcDrop:
    l_m, i, s, v = _pos(length_m), _pos(current_a), _pos(section_mm2), _pos(base_v)
    if not (l_m and i and s and v):
        return DcDrop(0.0, 0.0)
    du_v = (2 * l_m * i * RHO_CU) / s
    return DcDrop(du_v=du_v, du_pct=(du_v / v) * 100)


def ac_voltage(is_three_phase: bool) -> float:
    return U_TRI_V if is_three_phase else U_MONO_V


def ac_current_from_power(power_va: float, is_three_phase: bool) -> float:
    p = _pos(power_va)
    if not p:
        return 0.0
    return p / (U_TRI_V * SQRT3_APPROX) if is_three_phase else p / U_MONO_V


def voltage_drop_percent(power_va: float, length_m: float, section_mm2: float, is_three_phase: bool) -> float:
    """Caída AC en % de la tensión de red, a partir de la potencia aparente."""
    p, l_m, s = _pos(power_va), _pos(length_m), _pos(section_mm2)
    if not (p and l_m and s):
        return 0.0
    u = ac_voltage(is_three_phase)
    i = ac_current_from_power(p, is_three_phase)
    if is_three_phase:
        drop_v = (math.sqrt(3) * l_m * i * RHO_CU) / s
    else:
        drop_v = (2 * l_m * i * RHO_CU) / s
    return (drop_v / u) * 100


def voltage_drop_percent_from_current(current_a: float, length_m: float, section_mm2: float, voltage_v: float, *, three_phase: bool = False) -> float:
    """Variante con corriente ya conocida (branches micro por fase)."""
    i, l_m, s, u = _pos(current_a), _pos(length_m), _pos(section_mm2), _pos(voltage_v)
    if not (i and l_m and s and u):
        return 0.0
    factor = math.sqrt(3) if three_phase else 2.0
    return (factor * l_m * i * RHO_CU / s) / u * 100


__all__ = [
    "RHO_CU",
    "U_MONO_V",
    "U_TRI_V",
    "SQRT3_APPROX",
    "DcDrop",
    "compute_dc_drop",
    "ac_voltage",
    "ac_current_from_power",
    "voltage_drop_percent",
    "voltage_drop_percent_from_current",
]
