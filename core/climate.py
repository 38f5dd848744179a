# core/climate.py
"""
Adaptadores de los puertos externos (clima y abonnement).

StaticClimateProvider:
- Tabla por département (2 primeros dígitos del código postal) en config/climate.yaml.
- Corrección de altitud sobre la mínima (−0.6 °C / 100 m por defecto).
- Département desconocido: temperaturas por defecto del motor.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Mapping, Optional

from core.configuration import CONFIG_DIR, _leer_yaml
from core.model import Climate, Phase
from electrical.conductors.voltage_drop import _pos
from electrical.protections import SubscriptionStatus, subscription_status

from .ports import ClimateProvider, SubscriptionLookup

logger = logging.getLogger(__name__)

DEFAULT_ALTITUDE_GRADIENT = -0.6


def _departement(postal_code: str) -> str:
    code = (postal_code or "").strip()
    if len(code) < 2:
        return ""
    # Corse: 20xxx -> 2A / 2B no se distingue en la tabla
    return code[:2]


class StaticClimateProvider(ClimateProvider):
    def __init__(
        self,
        table: Mapping[str, Climate],
        *,
        default: Climate,
        altitude_gradient_c_per_100m: float = DEFAULT_ALTITUDE_GRADIENT,
    ):
        self._table = dict(table)
        self._default = default
        self._gradient = float(altitude_gradient_c_per_100m)

    @classmethod
    def from_yaml(
        cls,
        path: Optional[Path] = None,
        *,
        default_temp_min_c: float = -10.0,
        default_temp_max_amb_c: float = 35.0,
    ) -> "StaticClimateProvider":
        doc = _leer_yaml(path or (CONFIG_DIR / "climate.yaml"))
        table: Dict[str, Climate] = {}
        for dep, row in (doc.get("departements") or {}).items():
            if not isinstance(row, dict):
                raise ValueError(f"Fila de clima inválida para {dep!r}")
            try:
                table[str(dep)] = Climate(
                    temp_min=float(row["temp_min"]),
                    temp_max_amb=float(row["temp_max_amb"]),
                )
            except KeyError as e:
                raise ValueError(f"Falta '{e.args[0]}' en clima {dep!r}") from e
        gradient = float(doc.get("altitude_gradient_c_per_100m", DEFAULT_ALTITUDE_GRADIENT))
        return cls(
            table,
            default=Climate(temp_min=default_temp_min_c, temp_max_amb=default_temp_max_amb_c),
            altitude_gradient_c_per_100m=gradient,
        )

    def lookup(self, postal_code: str, altitude_m: float) -> Optional[Climate]:
        base = self._table.get(_departement(postal_code))
        if base is None:
            logger.debug("Clima por defecto para código postal %r", postal_code)
            base = self._default

        alt = _pos(altitude_m)
        if alt == 0:
            return base
        t_min = round(base.temp_min + self._gradient * alt / 100.0, 1)
        return Climate(temp_min=t_min, temp_max_amb=base.temp_max_amb)


class StandardSubscriptionLookup(SubscriptionLookup):
    def lookup(self, *, phase: Phase, project_power_kwc: float, agcp_a: Optional[float]) -> SubscriptionStatus:
        return subscription_status(phase=phase, project_power_kwc=project_power_kwc, agcp_a=agcp_a)


__all__ = ["StaticClimateProvider", "StandardSubscriptionLookup"]
