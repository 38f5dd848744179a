# core/ports.py
"""
Puertos de los colaboradores externos del motor.

- Clima: (código postal, altitud) → temperaturas extremas.
- Abonnement: (fase, potencia proyecto, AGCP) → veredicto indicativo.
"""
from typing import Optional, Protocol

from core.model import Climate, Phase
from electrical.protections import SubscriptionStatus


class ClimateProvider(Protocol):
    def lookup(self, postal_code: str, altitude_m: float) -> Optional[Climate]: ...


class SubscriptionLookup(Protocol):
    def lookup(self, *, phase: Phase, project_power_kwc: float, agcp_a: Optional[float]) -> SubscriptionStatus: ...
