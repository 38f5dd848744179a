"""
Dominio paneles (Motor FV)

API pública:
- Répartition des panneaux par MPPT (strings)
- Analyse de compatibilité panneaux / onduleur

Regla arquitectónica:
Otros módulos importan siempre desde:
    electrical.panels
"""

from .strings import (
    assigned_by_field,
    rebalance_strings,
    seed_strings,
    string_assignment_error,
    total_assigned,
)
from .compatibility import (
    AcCurrentBasis,
    CompatibilityDetails,
    CompatibilityReport,
    MpptAnalysis,
    RcdType,
    ac_reference_current,
    assignment_mismatch_report,
    compute_compatibility_report,
    rcd_type_for,
    vmp_at,
    voc_at,
)

__all__ = [
    "assigned_by_field",
    "rebalance_strings",
    "seed_strings",
    "string_assignment_error",
    "total_assigned",
    "AcCurrentBasis",
    "CompatibilityDetails",
    "CompatibilityReport",
    "MpptAnalysis",
    "RcdType",
    "ac_reference_current",
    "assignment_mismatch_report",
    "compute_compatibility_report",
    "rcd_type_for",
    "vmp_at",
    "voc_at",
]
