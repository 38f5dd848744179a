# core/configuration.py
from __future__ import annotations

import logging
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

logger = logging.getLogger(__name__)

BASE_DIR = Path(__file__).resolve().parents[1]
CONFIG_DIR = BASE_DIR / "config"


def _leer_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise FileNotFoundError(f"No existe config: {path}")
    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Config inválida (debe ser dict): {path}")
    return data


@dataclass(frozen=True)
class EngineConfig:
    default_temp_min_c: float = -10.0
    default_temp_max_amb_c: float = 35.0
    cell_temp_offset_c: float = 35.0
    default_temp_coeff_voc: float = -0.26
    voc_warn_ratio: float = 0.95
    vmp_warn_ratio: float = 1.05
    ac_safety_factor: float = 1.25
    default_distance_to_panel_m: float = 10.0
    default_distance_inverter_to_ac_box_m: float = 2.0
    dc_vmp_hot_factor: float = 0.88
    central_auto_power_ratio: float = 0.8


def _aplanar(doc: Mapping[str, Any]) -> Dict[str, Any]:
    # engine.yaml agrupa por sección; el dataclass es plano
    out: Dict[str, Any] = {}
    for k, v in doc.items():
        if isinstance(v, Mapping):
            out.update(v)
        else:
            out[k] = v
    return out


def _desde_dict(base: EngineConfig, valores: Mapping[str, Any]) -> EngineConfig:
    conocidos = {f.name for f in fields(EngineConfig)}
    cambios: Dict[str, float] = {}
    for k, v in valores.items():
        if k not in conocidos:
            logger.warning("Parámetro de configuración ignorado: %s", k)
            continue
        try:
            cambios[k] = float(v)
        except (TypeError, ValueError) as e:
            raise ValueError(f"'{k}' debe ser numérico en config. Valor={v!r}") from e
    return replace(base, **cambios) if cambios else base


def load_engine_config(path: Optional[Path] = None) -> EngineConfig:
    doc = _leer_yaml(path or (CONFIG_DIR / "engine.yaml"))
    return _desde_dict(EngineConfig(), _aplanar(doc))


def effective_config(base: EngineConfig, overrides: Optional[Mapping[str, Any]]) -> EngineConfig:
    if not overrides:
        return base
    return _desde_dict(base, _aplanar(overrides))


__all__ = ["EngineConfig", "load_engine_config", "effective_config", "CONFIG_DIR"]
