"""
breakers.py (Motor FV)

Subdominio protecciones (disjoncteurs AC).

Responsabilidad:
- Normalizar un calibre teórico a la escala comercial (mono / tri).
- Convertir un valor AGCP (calibre de abonado) al calibre comercial retenido
  para la protección de cabecera.
- Referencia catálogo del disjoncteur de cabecera según AGCP.
- Estado de abonado (aviso, nunca bloqueante).

Notas:
- Este módulo NO calcula corrientes; las recibe ya definidas.
- normalize_breaker_rating redondea HACIA ARRIBA; la conversión AGCP usa
  bandas fijas (no es el mismo criterio).
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

LADDER_THREE_PHASE: Sequence[int] = (16, 20, 25, 32, 40)
LADDER_SINGLE_PHASE: Sequence[int] = (16, 20, 32, 40, 63)

# (AGCP máx, calibre comercial)
_AGCP_BANDS_TRI: Sequence[Tuple[float, int]] = ((25, 16), (30, 20), (40, 25), (50, 32))
_AGCP_BANDS_MONO: Sequence[Tuple[float, int]] = ((30, 32), (45, 40))

# (AGCP máx, id catálogo disjoncteur)
_HEAD_BREAKER_TRI: Sequence[Tuple[float, str]] = ((25, "02048"), (30, "02050"), (40, "02052"), (50, "02054"))
_HEAD_BREAKER_MONO: Sequence[Tuple[float, str]] = ((30, "02018"), (45, "02020"))


def _ladder(is_three_phase: bool) -> Sequence[int]:
    return LADDER_THREE_PHASE if is_three_phase else LADDER_SINGLE_PHASE


def normalize_breaker_rating(theoretical_min_a: float, is_three_phase: bool) -> int:
    """Devuelve el siguiente calibre comercial >= theoretical_min_a (o el mayor)."""
    ladder = _ladder(is_three_phase)
    try:
        x = max(0.0, float(theoretical_min_a))
    except (TypeError, ValueError):
        x = 0.0
    if math.isnan(x):
        x = 0.0
    for s in ladder:
        if s >= x:
            return int(s)
    return int(ladder[-1])


def theoretical_min_rating(reference_current_a: float, factor: float = 1.25) -> int:
    """Calibre mínimo teórico = ceil(factor × I_ref)."""
    try:
        i = float(reference_current_a)
    except (TypeError, ValueError):
        return 0
    if not math.isfinite(i) or i <= 0:
        return 0
    return int(math.ceil(i * float(factor)))


def subscribed_capacity_to_commercial_breaker(agcp_a: Optional[float], is_three_phase: bool) -> Optional[int]:
    if not agcp_a or agcp_a <= 0:
        return None
    if is_three_phase:
        for limit, rating in _AGCP_BANDS_TRI:
            if agcp_a <= limit:
                return rating
        return 40
    for limit, rating in _AGCP_BANDS_MONO:
        if agcp_a <= limit:
            return rating
    return 63


def head_breaker_catalog_id(agcp_a: Optional[float], is_three_phase: bool) -> Optional[str]:
    if not agcp_a or agcp_a <= 0:
        return None
    if is_three_phase:
        for limit, ref in _HEAD_BREAKER_TRI:
            if agcp_a <= limit:
                return ref
        return "02056"
    for limit, ref in _HEAD_BREAKER_MONO:
        if agcp_a <= limit:
            return ref
    return "02024"


# ==========================================================
# Abonnement (aviso)
# ==========================================================

_KVA_PER_A = {"Mono": 0.2, "Tri": 0.6}
_STANDARD_KVA = {"Mono": (3, 6, 9, 12), "Tri": (12, 15, 18, 24, 30, 36)}
_MAX_KVA = {"Mono": 12, "Tri": 36}


@dataclass(frozen=True)
class SubscriptionStatus:
    phase: str
    subscribed_kva: Optional[float]
    recommended_kva: Optional[float]
    is_ok: bool
    is_over_max_for_phase: bool


def subscription_status(*, phase: str, project_power_kwc: float, agcp_a: Optional[float]) -> SubscriptionStatus:
    """
    Estimación del abonado a partir del AGCP y de la potencia del proyecto.

    Sólo informativo: nunca entra en el veredicto de conformidad.
    """
    ph = "Tri" if phase == "Tri" else "Mono"
    kwc = max(0.0, float(project_power_kwc or 0.0))
    subscribed = round(float(agcp_a) * _KVA_PER_A[ph], 1) if agcp_a and agcp_a > 0 else None

    recommended: Optional[float] = None
    if kwc > 0:
        recommended = next((float(k) for k in _STANDARD_KVA[ph] if k >= kwc), float(_STANDARD_KVA[ph][-1]))

    is_ok = subscribed is not None and recommended is not None and subscribed >= recommended
    return SubscriptionStatus(
        phase=ph,
        subscribed_kva=subscribed,
        recommended_kva=recommended,
        is_ok=is_ok,
        is_over_max_for_phase=kwc > _MAX_KVA[ph],
    )


__all__ = [
    "LADDER_THREE_PHASE",
    "LADDER_SINGLE_PHASE",
    "normalize_breaker_rating",
    "theoretical_min_rating",
    "subscribed_capacity_to_commercial_breaker",
    "head_breaker_catalog_id",
    "SubscriptionStatus",
    "subscription_status",
]
