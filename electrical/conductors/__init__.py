"""
Dominio conductores (Motor FV)

API pública del módulo:
- Caída de tensión DC / AC
- Selección automática de sección (AC, DC opción B)
- Dimensionamiento de tramos AC1 / AC2 / DC por MPPT

Regla arquitectónica:
Otros módulos NO deben importar archivos internos.
Siempre importar desde:
    electrical.conductors
"""

from .voltage_drop import (
    RHO_CU,
    SQRT3_APPROX,
    U_MONO_V,
    U_TRI_V,
    DcDrop,
    ac_current_from_power,
    ac_voltage,
    compute_dc_drop,
    voltage_drop_percent,
    voltage_drop_percent_from_current,
)
from .sections import (
    AC_SECTIONS_MM2,
    DC_SECTIONS_MM2,
    DcSizingStatus,
    DropStatus,
    DROP_LIMIT_PCT,
    DROP_WARN_PCT,
    dc_sizing_status,
    drop_status,
    pick_auto_ac_section,
    pick_auto_dc_section,
    pick_auto_section,
    snap_section_to_catalog,
)
from .segments import (
    AcSegmentSizing,
    AcSizing,
    DcRunSizing,
    ac_section_order_violation,
    compute_ac1_segment,
    compute_ac_section,
    compute_ac_segments,
    compute_dc_auto_section,
    size_dc_run,
    size_dc_runs,
    worst_dc_drop_pct,
)

__all__ = [
    "RHO_CU",
    "SQRT3_APPROX",
    "U_MONO_V",
    "U_TRI_V",
    "DcDrop",
    "ac_current_from_power",
    "ac_voltage",
    "compute_dc_drop",
    "voltage_drop_percent",
    "voltage_drop_percent_from_current",
    "AC_SECTIONS_MM2",
    "DC_SECTIONS_MM2",
    "DcSizingStatus",
    "DropStatus",
    "DROP_LIMIT_PCT",
    "DROP_WARN_PCT",
    "dc_sizing_status",
    "drop_status",
    "pick_auto_ac_section",
    "pick_auto_dc_section",
    "pick_auto_section",
    "snap_section_to_catalog",
    "AcSegmentSizing",
    "AcSizing",
    "DcRunSizing",
    "ac_section_order_violation",
    "compute_ac1_segment",
    "compute_ac_section",
    "compute_ac_segments",
    "compute_dc_auto_section",
    "size_dc_run",
    "size_dc_runs",
    "worst_dc_drop_pct",
]
