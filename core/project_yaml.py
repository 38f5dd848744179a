# core/project_yaml.py
"""
Carga de un proyecto desde un documento YAML.

Estructura esperada (claves opcionales con los valores por defecto del modelo):

    id, name, postal_code, altitude, wind_zone
    system: {brand, rail_orientation}
    fields: [{id, name, roof: {...}, panels: {...}, rail_orientation}]
    inverter: {brand, model, phase, has_battery, battery_model, has_backup,
               agcp_value, strings: [...], dc_runs: [...], micro_branches: [...]}
    ev_charger: {selected, phase, cable_ref}
    distance_to_panel, distance_inverter_to_ac_box,
    ac_cable_section_mm2, ac1_cable_section_mm2, user_prices
"""
from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Type, TypeVar

import yaml

from .model import (
    ConfiguredString,
    DcCablingRun,
    EvCharger,
    InverterBrand,
    InverterConfig,
    Margins,
    MicroBranch,
    MountingSystem,
    PanelLayout,
    Project,
    Roof,
    RoofField,
    RoofType,
    WindZone,
)

E = TypeVar("E", bound=Enum)

_PHASES = ("Mono", "Tri")
_BRANCH_PHASES = ("Mono", "L1", "L2", "L3")


def _req(d: Mapping[str, Any], k: str, ctx: str) -> Any:
    if k not in d or d[k] is None:
        raise ValueError(f"Falta '{k}' en {ctx}")
    return d[k]


def _num(d: Mapping[str, Any], k: str, ctx: str, default: Optional[float] = None) -> Optional[float]:
    if k not in d or d[k] is None:
        return default
    v = d[k]
    try:
        return float(v)
    except (TypeError, ValueError) as e:
        raise ValueError(f"'{k}' debe ser numérico en {ctx}. Valor={v!r}") from e


def _int(d: Mapping[str, Any], k: str, ctx: str, default: int = 0) -> int:
    v = _num(d, k, ctx)
    return default if v is None else int(v)


def _enum(cls: Type[E], value: Any, ctx: str) -> E:
    try:
        return cls(value)
    except ValueError as e:
        valid = ", ".join(m.value for m in cls)
        raise ValueError(f"Valor {value!r} inválido en {ctx} (valores: {valid})") from e


def _choice(value: Any, allowed, ctx: str) -> str:
    if value not in allowed:
        raise ValueError(f"Valor {value!r} inválido en {ctx} (valores: {', '.join(allowed)})")
    return value


def _dict(d: Mapping[str, Any], k: str, ctx: str) -> Dict[str, Any]:
    sec = d.get(k) or {}
    if not isinstance(sec, dict):
        raise ValueError(f"'{k}' inválido en {ctx} (debe ser dict)")
    return sec


def _list(d: Mapping[str, Any], k: str, ctx: str) -> List[Dict[str, Any]]:
    seq = d.get(k) or []
    if not isinstance(seq, list) or not all(isinstance(x, dict) for x in seq):
        raise ValueError(f"'{k}' inválido en {ctx} (debe ser lista de dicts)")
    return seq


# ==========================================================
# Parsers
# ==========================================================

def _roof(r: Dict[str, Any], ctx: str) -> Roof:
    m = _dict(r, "margins", ctx)
    defaults = Margins()
    margins = Margins(
        top=_num(m, "top", ctx, defaults.top),
        bottom=_num(m, "bottom", ctx, defaults.bottom),
        left=_num(m, "left", ctx, defaults.left),
        right=_num(m, "right", ctx, defaults.right),
    )
    return Roof(
        width=_num(r, "width", ctx, 0.0),
        height=_num(r, "height", ctx, 0.0),
        pitch=_num(r, "pitch", ctx, 30.0),
        type=_enum(RoofType, r.get("type", RoofType.TUILE_MECANIQUE.value), f"{ctx}.type"),
        margins=margins,
        pitch_unit=_choice(r.get("pitch_unit", "deg"), ("deg", "percent"), f"{ctx}.pitch_unit"),
    )


def _layout(p: Dict[str, Any], ctx: str) -> PanelLayout:
    rows_cfg = p.get("row_configuration") or []
    if not isinstance(rows_cfg, list):
        raise ValueError(f"'row_configuration' inválido en {ctx} (debe ser lista)")
    return PanelLayout(
        panel_id=str(_req(p, "panel_id", ctx)),
        rows=_int(p, "rows", ctx),
        columns=_int(p, "columns", ctx),
        orientation=_choice(p.get("orientation", "Portrait"), ("Portrait", "Paysage"), f"{ctx}.orientation"),
        row_configuration=tuple(int(x) for x in rows_cfg),
    )


def _field(f: Dict[str, Any], idx: int) -> RoofField:
    ctx = f"fields[{idx}]"
    rail = f.get("rail_orientation")
    return RoofField(
        id=str(f.get("id") or f"field-{idx + 1}"),
        name=str(f.get("name") or ""),
        roof=_roof(_dict(f, "roof", ctx), f"{ctx}.roof"),
        panels=_layout(_dict(f, "panels", ctx), f"{ctx}.panels"),
        rail_orientation=None if rail is None else _choice(rail, ("Horizontal", "Vertical"), f"{ctx}.rail_orientation"),
    )


def _inverter(inv: Dict[str, Any]) -> InverterConfig:
    ctx = "inverter"
    strings = tuple(
        ConfiguredString(
            id=str(s.get("id") or f"str-{i + 1}"),
            field_id=str(_req(s, "field_id", f"{ctx}.strings[{i}]")),
            panel_count=_int(s, "panel_count", f"{ctx}.strings[{i}]"),
            mppt_index=_int(s, "mppt_index", f"{ctx}.strings[{i}]", 1),
        )
        for i, s in enumerate(_list(inv, "strings", ctx))
    )
    runs = tuple(
        DcCablingRun(
            mppt_index=_int(r, "mppt_index", f"{ctx}.dc_runs[{i}]", 1),
            length_m=_num(r, "length_m", f"{ctx}.dc_runs[{i}]", 0.0),
            section_mm2=_num(r, "section_mm2", f"{ctx}.dc_runs[{i}]"),
            parallel_strings=_int(r, "parallel_strings", f"{ctx}.dc_runs[{i}]", 1),
        )
        for i, r in enumerate(_list(inv, "dc_runs", ctx))
    )
    branches = tuple(
        MicroBranch(
            id=str(b.get("id") or f"branch-{i + 1}"),
            micro_count=_int(b, "micro_count", f"{ctx}.micro_branches[{i}]"),
            cable_length_m=_num(b, "cable_length_m", f"{ctx}.micro_branches[{i}]", 0.0),
            cable_section_mm2=_num(b, "cable_section_mm2", f"{ctx}.micro_branches[{i}]", 2.5),
            phase=_choice(b.get("phase", "Mono"), _BRANCH_PHASES, f"{ctx}.micro_branches[{i}].phase"),
            name=str(b.get("name") or ""),
        )
        for i, b in enumerate(_list(inv, "micro_branches", ctx))
    )
    return InverterConfig(
        brand=_enum(InverterBrand, inv.get("brand", InverterBrand.NONE.value), f"{ctx}.brand"),
        model=str(inv.get("model") or "Auto"),
        phase=_choice(inv.get("phase", "Mono"), _PHASES, f"{ctx}.phase"),
        has_battery=bool(inv.get("has_battery", False)),
        battery_model=inv.get("battery_model"),
        has_backup=bool(inv.get("has_backup", False)),
        agcp_value=_num(inv, "agcp_value", ctx),
        configured_strings=strings,
        dc_cabling_runs=runs,
        micro_branches=branches,
    )


def project_from_dict(doc: Mapping[str, Any]) -> Project:
    if not isinstance(doc, Mapping):
        raise ValueError("Proyecto inválido (debe ser dict)")
    ctx = "project"
    fields_raw = _list(doc, "fields", ctx)
    if not fields_raw:
        raise ValueError("El proyecto debe tener al menos un champ ('fields')")

    sys_raw = _dict(doc, "system", ctx)
    ev_raw = _dict(doc, "ev_charger", ctx)
    prices = _dict(doc, "user_prices", ctx)

    return Project(
        id=str(doc.get("id") or "projet"),
        name=str(doc.get("name") or ""),
        fields=tuple(_field(f, i) for i, f in enumerate(fields_raw)),
        postal_code=str(doc.get("postal_code") or ""),
        altitude=_num(doc, "altitude", ctx, 0.0),
        wind_zone=_enum(WindZone, doc.get("wind_zone", WindZone.ZONE_1.value), f"{ctx}.wind_zone"),
        system=MountingSystem(
            brand=_choice(sys_raw.get("brand", "K2"), ("K2", "ESDEC"), "system.brand"),
            rail_orientation=_choice(
                sys_raw.get("rail_orientation", "Horizontal"), ("Horizontal", "Vertical"), "system.rail_orientation"
            ),
        ),
        inverter_config=_inverter(_dict(doc, "inverter", ctx)),
        ev_charger=EvCharger(
            selected=bool(ev_raw.get("selected", False)),
            phase=_choice(ev_raw.get("phase", "Mono"), _PHASES, "ev_charger.phase"),
            cable_ref=ev_raw.get("cable_ref"),
        ),
        distance_to_panel=_num(doc, "distance_to_panel", ctx, 10.0),
        distance_inverter_to_ac_box=_num(doc, "distance_inverter_to_ac_box", ctx, 2.0),
        ac_cable_section_mm2=_num(doc, "ac_cable_section_mm2", ctx),
        ac1_cable_section_mm2=_num(doc, "ac1_cable_section_mm2", ctx),
        user_prices={str(k): str(v) for k, v in prices.items()},
    )


def load_project_yaml(path: Path) -> Project:
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"No existe proyecto: {p}")
    with p.open("r", encoding="utf-8") as f:
        doc = yaml.safe_load(f) or {}
    return project_from_dict(doc)


__all__ = ["project_from_dict", "load_project_yaml"]
