"""
Dominio protecciones (Motor FV)

API pública:
- Tablas sección ↔ calibre (perfil estándar / pesimista)
- Escalas comerciales de disjoncteurs y conversión AGCP

Regla arquitectónica:
Otros módulos importan siempre desde:
    electrical.protections
"""

from .standards import (
    ProtectionStatus,
    max_device_rating_standard,
    max_device_rating_pessimistic,
    min_section_for_rating,
    is_protection_too_high_for_section,
    protection_status,
    is_section_oversized_for_rating,
    max_dc_current_for_section,
    is_dc_cable_too_small_for_current,
    is_dc_section_oversized_for_current,
    recommended_margins,
)
from .breakers import (
    normalize_breaker_rating,
    theoretical_min_rating,
    subscribed_capacity_to_commercial_breaker,
    head_breaker_catalog_id,
    SubscriptionStatus,
    subscription_status,
)

__all__ = [
    "ProtectionStatus",
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
    "normalize_breaker_rating",
    "theoretical_min_rating",
    "subscribed_capacity_to_commercial_breaker",
    "head_breaker_catalog_id",
    "SubscriptionStatus",
    "subscription_status",
]
