# electrical/panels/compatibility.py
"""
Analyse de compatibilité électrique panneaux / onduleur (Motor FV).

Responsabilidad:
- Por MPPT (onduleur centralizado): Voc frío, Vmp caliente, Isc de cálculo
  frente a los límites del onduleur.
- Micro-onduleur: sólo Voc frío del panel frente a la tensión máx. del micro.
- Resumen global: ratio DC/AC, corriente AC de referencia (con su base),
  calibre recomendado, tipo de différentiel.

Notas:
- Función sin estado: todo llega por parámetros (climat, topología, specs).
- Los errores son bloqueantes (is_compatible=False); los avisos no.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, List, Literal, Mapping, Optional, Sequence, Tuple

from core.model import Climate, ConfiguredString, DcCablingRun, Phase
from electrical.catalogs import InverterComponent, PanelComponent
from electrical.conductors import SQRT3_APPROX, U_MONO_V, U_TRI_V
from electrical.topology import is_micro_inverter

AcCurrentBasis = Literal["IAC_MAX", "IAC_NOMINAL", "FALLBACK_S_OVER_U"]
RcdType = Literal["A", "F", "B"]

DEFAULT_TEMP_MIN_C = -10.0
DEFAULT_TEMP_MAX_AMB_C = 35.0
CELL_TEMP_OFFSET_C = 35.0
DEFAULT_TEMP_COEFF_VOC = -0.26
VOC_WARN_RATIO = 0.95
VMP_WARN_RATIO = 1.05
ISC_SAFETY_FACTOR = 1.25

_HYBRID_MARKERS = ("H1", "H3", "KH", "P3")


@dataclass(frozen=True)
class MpptAnalysis:
    mppt_index: int
    composition: str
    total_panel_count: int
    voc_cold: float
    vmp_hot: float
    parallel_strings: int
    isc_max: float
    isc_calculation: float
    is_voltage_warning: bool
    is_voltage_error: bool
    is_mppt_warning: bool
    is_mppt_error: bool
    is_current_error: bool


@dataclass(frozen=True)
class CompatibilityDetails:
    voc_cold: float
    vmax_inverter: float
    vmp_hot: float
    vmin_mppt: float
    isc_panel: float
    isc_calculation: float
    imax_inverter: float
    dc_ac_ratio: Optional[float]
    max_ac_power: float
    nominal_ac_current: float
    ac_current_basis: AcCurrentBasis
    ac_current_basis_detail: str
    recommended_breaker_theo: float
    recommended_breaker: int
    rcd_type: RcdType
    temp_min: float
    temp_max_cell: float
    strings_analysis: Tuple[MpptAnalysis, ...] = ()
    max_panels_in_a_string: int = 0
    is_micro: bool = False


@dataclass(frozen=True)
class CompatibilityReport:
    is_compatible: bool
    warnings: Tuple[str, ...] = ()
    errors: Tuple[str, ...] = ()
    details: Optional[CompatibilityDetails] = None


# ==========================================================
# Helpers
# ==========================================================

def _num(x: float) -> str:
    return f"{float(x):g}"


def _coeff(panel: PanelComponent, default: float) -> float:
    # un coeficiente 0 o ausente se trata como ausente
    return panel.temp_coeff_voc or default


def voc_at(panel: PanelComponent, temp_c: float, default_coeff: float = DEFAULT_TEMP_COEFF_VOC) -> float:
    return panel.voc * (1 + (_coeff(panel, default_coeff) / 100) * (temp_c - 25))


def vmp_at(panel: PanelComponent, temp_c: float, default_coeff: float = DEFAULT_TEMP_COEFF_VOC) -> float:
    return panel.vmp * (1 + (_coeff(panel, default_coeff) / 100) * (temp_c - 25))


def rcd_type_for(inverter: InverterComponent) -> RcdType:
    if is_micro_inverter(inverter):
        return "F"
    if any(m in inverter.id for m in _HYBRID_MARKERS):
        return "B"
    return "F"


def ac_reference_current(
    inverter: InverterComponent,
    max_ac_power: float,
    is_three_phase: bool,
) -> Tuple[float, AcCurrentBasis, str]:
    """Iac_max > Iac_nominal > S/U, con el detalle a mostrar."""
    if inverter.max_ac_current and inverter.max_ac_current > 0:
        return inverter.max_ac_current, "IAC_MAX", f"Iac_max={_num(inverter.max_ac_current)}A (fiche technique)"
    if inverter.nominal_ac_current and inverter.nominal_ac_current > 0:
        return (
            inverter.nominal_ac_current,
            "IAC_NOMINAL",
            f"Iac_nom={_num(inverter.nominal_ac_current)}A (fiche technique)",
        )
    return _fallback_current(max_ac_power, is_three_phase)


def _fallback_current(power_va: float, is_three_phase: bool) -> Tuple[float, AcCurrentBasis, str]:
    current = power_va / (U_TRI_V * SQRT3_APPROX) if is_three_phase else power_va / U_MONO_V
    detail = f"S={_num(power_va)}VA, U={'400V tri' if is_three_phase else '230V mono'}"
    return current, "FALLBACK_S_OVER_U", detail


def _is_three_phase(phase: Optional[Phase], inverter: InverterComponent) -> bool:
    if phase is not None:
        return phase == "Tri"
    return inverter.max_ac_power > 6000 or "TRI" in inverter.id or "T15" in inverter.id


def _parallel_by_mppt(runs: Sequence[DcCablingRun]) -> Dict[int, int]:
    out: Dict[int, int] = {}
    for r in runs:
        idx = int(r.mppt_index or 0)
        if not idx:
            continue
        try:
            n = int(round(float(r.parallel_strings or 1)))
        except (TypeError, ValueError):
            n = 1
        out[idx] = max(1, n)
    return out


# ==========================================================
# Micro-onduleur
# ==========================================================

def _micro_report(
    panel: Optional[PanelComponent],
    inverter: InverterComponent,
    *,
    total_panels: int,
    is_three_phase: bool,
    temp_min: float,
    temp_cell_hot: float,
    default_coeff: float,
) -> CompatibilityReport:
    if panel is None:
        return CompatibilityReport(is_compatible=True)

    voc_cold = voc_at(panel, temp_min, default_coeff)
    inputs = inverter.mppt_count or 1
    ac_power = inverter.max_ac_power
    if total_panels > 0:
        ac_power = math.ceil(total_panels / inputs) * inverter.max_ac_power

    current, basis, detail = _fallback_current(ac_power, is_three_phase)
    breaker = current * ISC_SAFETY_FACTOR

    errors: List[str] = []
    if voc_cold > inverter.max_input_voltage:
        errors.append(f"Tension panneau ({voc_cold:.1f}V) > Max Micro ({_num(inverter.max_input_voltage)}V)")

    details = CompatibilityDetails(
        voc_cold=round(voc_cold, 1),
        vmax_inverter=inverter.max_input_voltage,
        vmp_hot=0.0,
        vmin_mppt=inverter.min_mppt_voltage,
        isc_panel=panel.isc,
        isc_calculation=round(panel.isc * ISC_SAFETY_FACTOR, 2),
        imax_inverter=inverter.max_input_current,
        dc_ac_ratio=None,
        max_ac_power=ac_power,
        nominal_ac_current=round(current, 1),
        ac_current_basis=basis,
        ac_current_basis_detail=detail,
        recommended_breaker_theo=round(breaker, 1),
        recommended_breaker=int(math.ceil(breaker)),
        rcd_type="F",
        temp_min=temp_min,
        temp_max_cell=temp_cell_hot,
        strings_analysis=(),
        max_panels_in_a_string=1,
        is_micro=True,
    )
    return CompatibilityReport(is_compatible=not errors, errors=tuple(errors), details=details)


# ==========================================================
# API pública
# ==========================================================

def compute_compatibility_report(
    panel: Optional[PanelComponent],
    inverter: Optional[InverterComponent],
    climate: Optional[Climate] = None,
    strings: Sequence[ConfiguredString] = (),
    *,
    phase: Optional[Phase] = None,
    dc_cabling_runs: Sequence[DcCablingRun] = (),
    total_panels: int = 0,
    panels_by_field: Optional[Mapping[str, PanelComponent]] = None,
    field_names: Optional[Mapping[str, str]] = None,
    default_temp_min_c: float = DEFAULT_TEMP_MIN_C,
    default_temp_max_amb_c: float = DEFAULT_TEMP_MAX_AMB_C,
    cell_temp_offset_c: float = CELL_TEMP_OFFSET_C,
    default_temp_coeff_voc: float = DEFAULT_TEMP_COEFF_VOC,
    voc_warn_ratio: float = VOC_WARN_RATIO,
    vmp_warn_ratio: float = VMP_WARN_RATIO,
) -> CompatibilityReport:
    """
    Analiza la compatibilidad eléctrica del sistema.

    Args:
        panel: panel principal (primer champ); sirve de respaldo para segmentos sin panel.
        strings: strings configurados; vacío = un único string en MPPT 1 con total_panels.
        panels_by_field / field_names: panel y nombre de cada champ (strings heterogéneos).
    """
    if inverter is None:
        return CompatibilityReport(is_compatible=True)

    temp_min = climate.temp_min if climate else default_temp_min_c
    temp_amb_hot = climate.temp_max_amb if climate else default_temp_max_amb_c
    temp_cell_hot = temp_amb_hot + cell_temp_offset_c
    is_tri = _is_three_phase(phase, inverter)

    if is_micro_inverter(inverter):
        return _micro_report(
            panel,
            inverter,
            total_panels=total_panels,
            is_three_phase=is_tri,
            temp_min=temp_min,
            temp_cell_hot=temp_cell_hot,
            default_coeff=default_temp_coeff_voc,
        )

    panels_by_field = panels_by_field or {}
    field_names = field_names or {}

    groups: Dict[int, List[ConfiguredString]] = {}
    if not strings:
        groups[1] = [ConfiguredString(id="legacy-0", field_id="legacy", panel_count=int(total_panels), mppt_index=1)]
    else:
        for s in strings:
            groups.setdefault(int(s.mppt_index or 1), []).append(s)

    parallel = _parallel_by_mppt(dc_cabling_runs)
    errors: List[str] = []
    warnings: List[str] = []
    analyses: List[MpptAnalysis] = []
    global_max_voc = 0.0
    global_min_vmp = 10000.0
    total_pv = 0.0
    max_panels = 0
    vmax = inverter.max_input_voltage
    vmin = inverter.min_mppt_voltage

    for idx in sorted(groups):
        n_parallel = parallel.get(idx, 1)
        voc_cold = vmp_hot = isc_max = 0.0
        count = 0
        composition: List[str] = []

        for seg in groups[idx]:
            seg_panel = panels_by_field.get(seg.field_id) or panel
            if seg_panel is not None:
                voc_cold += voc_at(seg_panel, temp_min, default_temp_coeff_voc) * seg.panel_count
                vmp_hot += vmp_at(seg_panel, temp_cell_hot, default_temp_coeff_voc) * seg.panel_count
                isc_max = max(isc_max, seg_panel.isc)
                total_pv += seg_panel.power_w * seg.panel_count
            count += seg.panel_count
            composition.append(f"{field_names.get(seg.field_id) or 'Toiture'} ({seg.panel_count})")

        max_panels = max(max_panels, count)
        global_max_voc = max(global_max_voc, voc_cold)
        global_min_vmp = min(global_min_vmp, vmp_hot)

        isc_total = isc_max * n_parallel
        isc_calc = isc_total * ISC_SAFETY_FACTOR

        analyses.append(
            MpptAnalysis(
                mppt_index=idx,
                composition=" + ".join(composition),
                total_panel_count=count,
                voc_cold=round(voc_cold, 1),
                vmp_hot=round(vmp_hot, 1),
                parallel_strings=n_parallel,
                isc_max=isc_total,
                isc_calculation=round(isc_calc, 2),
                is_voltage_warning=vmax * voc_warn_ratio <= voc_cold <= vmax,
                is_voltage_error=voc_cold > vmax,
                is_mppt_warning=vmin <= vmp_hot <= vmin * vmp_warn_ratio,
                is_mppt_error=vmp_hot < vmin,
                is_current_error=isc_calc > inverter.max_input_current,
            )
        )

        if voc_cold > vmax:
            errors.append(f"MPPT {idx}: Surtension ({voc_cold:.1f}V > {_num(vmax)}V)")
        else:
            ratio = voc_cold / vmax if vmax > 0 else 0.0
            if ratio >= voc_warn_ratio:
                warnings.append(
                    f"MPPT {idx}: Voc froid proche limite ({voc_cold:.1f}V ≈ {ratio * 100:.0f}% de {_num(vmax)}V)"
                )

        if vmp_hot < vmin:
            errors.append(
                f"MPPT {idx}: Vmp chaud trop bas ({vmp_hot:.1f}V < {_num(vmin)}V) → risque de décrochage en été"
            )
        else:
            ratio_low = vmp_hot / vmin if vmin > 0 else 0.0
            if ratio_low <= vmp_warn_ratio:
                warnings.append(
                    f"MPPT {idx}: Vmp chaud proche limite basse ({vmp_hot:.1f}V ≈ {ratio_low * 100:.0f}% de {_num(vmin)}V)"
                )

        if isc_calc > inverter.max_input_current:
            suffix = f" (x{n_parallel} strings en //)" if n_parallel > 1 else ""
            errors.append(
                f"MPPT {idx}: Courant trop élevé ({isc_calc:.2f}A > {_num(inverter.max_input_current)}A){suffix}"
            )

    max_ac = inverter.max_ac_power or inverter.power_w or 0.0
    current, basis, detail = ac_reference_current(inverter, max_ac, is_tri)
    isc_panel = panel.isc if panel is not None else 0.0

    details = CompatibilityDetails(
        voc_cold=round(global_max_voc, 1),
        vmax_inverter=vmax,
        vmp_hot=round(global_min_vmp, 1),
        vmin_mppt=vmin,
        isc_panel=isc_panel,
        isc_calculation=round(isc_panel * ISC_SAFETY_FACTOR, 2),
        imax_inverter=inverter.max_input_current,
        dc_ac_ratio=total_pv / max_ac if max_ac > 0 else 0.0,
        max_ac_power=max_ac,
        nominal_ac_current=round(current, 1),
        ac_current_basis=basis,
        ac_current_basis_detail=detail,
        recommended_breaker_theo=round(current * ISC_SAFETY_FACTOR, 1),
        recommended_breaker=int(math.ceil(current * ISC_SAFETY_FACTOR)),
        rcd_type=rcd_type_for(inverter),
        temp_min=temp_min,
        temp_max_cell=temp_cell_hot,
        strings_analysis=tuple(analyses),
        max_panels_in_a_string=max_panels,
        is_micro=False,
    )
    return CompatibilityReport(
        is_compatible=not errors,
        warnings=tuple(warnings),
        errors=tuple(errors),
        details=details,
    )


def assignment_mismatch_report(message: str) -> CompatibilityReport:
    return CompatibilityReport(is_compatible=False, errors=(message,), details=None)


__all__ = [
    "AcCurrentBasis",
    "RcdType",
    "MpptAnalysis",
    "CompatibilityDetails",
    "CompatibilityReport",
    "voc_at",
    "vmp_at",
    "rcd_type_for",
    "ac_reference_current",
    "compute_compatibility_report",
    "assignment_mismatch_report",
]
