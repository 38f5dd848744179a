# electrical/catalogs/catalog_yaml.py
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from .catalog import Catalogs
from .models import BoxComponent, CableComponent, InverterComponent, PanelComponent, PartComponent

logger = logging.getLogger(__name__)

DATA_DIR = Path(__file__).resolve().parents[2] / "data"


def _read_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {}
    return yaml.safe_load(path.read_text(encoding="utf-8")) or {}


def _req(d: Mapping[str, Any], k: str, ctx: str) -> Any:
    if k not in d or d[k] is None:
        raise ValueError(f"Falta '{k}' en {ctx}")
    return d[k]


def _req_num(d: Mapping[str, Any], k: str, ctx: str) -> float:
    v = _req(d, k, ctx)
    try:
        return float(v)
    except (TypeError, ValueError) as e:
        raise ValueError(f"'{k}' debe ser numérico en {ctx}. Valor={v!r}") from e


def _opt_num(d: Mapping[str, Any], k: str, ctx: str, default: Optional[float] = None) -> Optional[float]:
    if k not in d or d[k] is None:
        return default
    v = d[k]
    try:
        return float(v)
    except (TypeError, ValueError) as e:
        raise ValueError(f"'{k}' debe ser numérico en {ctx}. Valor={v!r}") from e


def _section(doc: Any, key: str) -> Dict[str, Any]:
    sec = (doc.get(key) or {}) if isinstance(doc, dict) else {}
    if not isinstance(sec, dict):
        raise ValueError(f"Sección '{key}' inválida (debe ser dict)")
    return sec


def _common(d: Mapping[str, Any], item_id: str, ctx: str) -> Dict[str, Any]:
    return {
        "id": str(d.get("id", item_id)),
        "description": str(_req(d, "description", ctx)).strip(),
        "price": str(d.get("price") or ""),
        "datasheet_url": d.get("datasheet_url"),
    }


# ==========================================================
# Parsers por tipo
# ==========================================================

def _panel(pid: str, p: Dict[str, Any]) -> PanelComponent:
    ctx = f"panels.{pid}"
    stc = _req(p, "stc", ctx)
    dims = _req(p, "dimensions_mm", ctx)
    co = p.get("temp_coefficients_pct_c") or {}
    return PanelComponent(
        **_common(p, pid, ctx),
        power_w=_req_num(p, "power_w", ctx),
        width_mm=_req_num(dims, "width", f"{ctx}.dimensions_mm"),
        height_mm=_req_num(dims, "height", f"{ctx}.dimensions_mm"),
        voc=_req_num(stc, "voc_v", f"{ctx}.stc"),
        isc=_req_num(stc, "isc_a", f"{ctx}.stc"),
        vmp=_req_num(stc, "vmp_v", f"{ctx}.stc"),
        imp=_req_num(stc, "imp_a", f"{ctx}.stc"),
        temp_coeff_voc=_opt_num(co, "voc", f"{ctx}.temp_coefficients_pct_c"),
        temp_coeff_pmax=_opt_num(co, "pmax", f"{ctx}.temp_coefficients_pct_c"),
    )


def _inverter(iid: str, inv: Dict[str, Any]) -> InverterComponent:
    ctx = f"inverters.{iid}"
    dc = _req(inv, "dc_input", ctx)
    ac = _req(inv, "ac_output", ctx)
    mppt = _opt_num(dc, "mppt_count", f"{ctx}.dc_input", 1.0)
    max_strings = _opt_num(dc, "max_strings", f"{ctx}.dc_input")
    return InverterComponent(
        **_common(inv, iid, ctx),
        power_w=_req_num(inv, "power_w", ctx),
        max_input_voltage=_req_num(dc, "max_input_voltage_v", f"{ctx}.dc_input"),
        min_mppt_voltage=_req_num(dc, "mppt_min_v", f"{ctx}.dc_input"),
        max_mppt_voltage=_req_num(dc, "mppt_max_v", f"{ctx}.dc_input"),
        max_input_current=_req_num(dc, "max_input_current_a", f"{ctx}.dc_input"),
        max_dc_power=_opt_num(dc, "max_dc_power_w", f"{ctx}.dc_input"),
        mppt_count=int(mppt or 1),
        max_strings=int(max_strings) if max_strings is not None else None,
        max_ac_power=_req_num(ac, "max_power_va", f"{ctx}.ac_output"),
        max_ac_current=_opt_num(ac, "max_current_a", f"{ctx}.ac_output"),
        nominal_ac_current=_opt_num(ac, "nominal_current_a", f"{ctx}.ac_output"),
        is_micro=bool(inv.get("is_micro", False)),
    )


def _cable(key: str, c: Dict[str, Any]) -> CableComponent:
    ctx = f"cables.{key}"
    return CableComponent(
        **_common(c, key, ctx),
        section_mm2=_opt_num(c, "section_mm2", ctx),
        coil_m=_opt_num(c, "coil_m", ctx),
        unit=str(c.get("unit") or "piece"),
    )


def _box(bid: str, b: Dict[str, Any]) -> BoxComponent:
    ctx = f"boxes.{bid}"
    return BoxComponent(**_common(b, bid, ctx), rating_a=_opt_num(b, "rating_a", ctx))


def _part(pid: str, p: Dict[str, Any], ctx: str) -> PartComponent:
    return PartComponent(
        **_common(p, pid, ctx),
        unit=str(p.get("unit") or "piece"),
        length_mm=_opt_num(p, "length_mm", ctx),
    )


# ==========================================================
# API pública
# ==========================================================

def load_panels_yaml(path: Path) -> Dict[str, PanelComponent]:
    return {str(k): _panel(str(k), v) for k, v in _section(_read_yaml(path), "panels").items()}


def load_inverters_yaml(path: Path) -> Dict[str, InverterComponent]:
    return {str(k): _inverter(str(k), v) for k, v in _section(_read_yaml(path), "inverters").items()}


def load_parts_yaml(path: Path) -> Dict[str, PartComponent]:
    return {str(k): _part(str(k), v, f"parts.{k}") for k, v in _section(_read_yaml(path), "parts").items()}


def load_cables_yaml(path: Path) -> Dict[str, CableComponent]:
    return {str(k): _cable(str(k), v) for k, v in _section(_read_yaml(path), "cables").items()}


def load_boxes_yaml(path: Path) -> Dict[str, BoxComponent]:
    return {str(k): _box(str(k), v) for k, v in _section(_read_yaml(path), "boxes").items()}


def load_mounting_yaml(path: Path) -> Dict[str, Dict[str, PartComponent]]:
    out: Dict[str, Dict[str, PartComponent]] = {}
    for brand, parts in _section(_read_yaml(path), "mounting").items():
        if not isinstance(parts, dict):
            raise ValueError(f"mounting.{brand} inválido (debe ser dict)")
        out[str(brand)] = {str(role): _part(str(role), p, f"mounting.{brand}.{role}") for role, p in parts.items()}
    return out


def load_catalogs(data_dir: Optional[Path] = None) -> Catalogs:
    base = Path(data_dir) if data_dir is not None else DATA_DIR
    catalogs = Catalogs(
        panels=load_panels_yaml(base / "panels.yaml"),
        inverters=load_inverters_yaml(base / "inverters.yaml"),
        parts=load_parts_yaml(base / "parts.yaml"),
        cables=load_cables_yaml(base / "cables.yaml"),
        boxes=load_boxes_yaml(base / "boxes.yaml"),
        mounting=load_mounting_yaml(base / "mounting.yaml"),
    )
    logger.debug(
        "Catálogos cargados desde %s: %d paneles, %d onduleurs, %d câbles, %d coffrets",
        base,
        len(catalogs.panels),
        len(catalogs.inverters),
        len(catalogs.cables),
        len(catalogs.boxes),
    )
    return catalogs


__all__ = [
    "DATA_DIR",
    "load_panels_yaml",
    "load_inverters_yaml",
    "load_parts_yaml",
    "load_cables_yaml",
    "load_boxes_yaml",
    "load_mounting_yaml",
    "load_catalogs",
]
