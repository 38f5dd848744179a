"""
Dominio micro-onduleurs (Motor FV)

API pública:
- Branches AC par défaut (une par phase)
- Rapport des branches: courant, chute de tension, limite par modèle

Regla arquitectónica:
Otros módulos importan siempre desde:
    electrical.micro
"""

from .branches import (
    BRANCH_LIMITS,
    DEFAULT_BRANCH_SECTION_MM2,
    BranchAnalysis,
    BranchLimit,
    MicroBranchesReport,
    analyze_branch,
    compute_micro_branches_report,
    default_micro_branches,
    ensure_micro_branches,
)

__all__ = [
    "BRANCH_LIMITS",
    "DEFAULT_BRANCH_SECTION_MM2",
    "BranchAnalysis",
    "BranchLimit",
    "MicroBranchesReport",
    "analyze_branch",
    "compute_micro_branches_report",
    "default_micro_branches",
    "ensure_micro_branches",
]
