# core/model.py
"""
Modelo de datos del proyecto (valores inmutables).

Responsabilidad:
- Describir la configuración de un proyecto FV (toitures, onduleur, câblage, borne VE).
- Servir de snapshot inmutable a las funciones puras del motor.

Notas:
- Ningún valor derivado se guarda aquí (nº de paneles, secciones, BOM...).
- Las modificaciones se hacen con dataclasses.replace(), nunca in-place.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Literal, Mapping, Optional, Tuple

Phase = Literal["Mono", "Tri"]
BranchPhase = Literal["Mono", "L1", "L2", "L3"]
Orientation = Literal["Portrait", "Paysage"]
RailOrientation = Literal["Horizontal", "Vertical"]
MountingBrand = Literal["K2", "ESDEC"]


class InverterBrand(str, Enum):
    NONE = "None"
    ENPHASE = "Enphase"
    APSYSTEMS = "APSystems"
    FOXESS = "FoxESS"
    CUSTOM = "Custom"


class RoofType(str, Enum):
    TUILE_MECANIQUE = "Tuile mécanique"
    TUILE_PLATE = "Tuile plate"
    TUILE_CANAL = "Tuile Canal"
    FIBROCIMENT = "Fibrociment / PST"


class WindZone(str, Enum):
    ZONE_1 = "Zone 1"
    ZONE_2 = "Zone 2"
    ZONE_3 = "Zone 3"
    ZONE_4 = "Zone 4"
    ZONE_5 = "Zone 5"


# =============================
# Toiture
# =============================

@dataclass(frozen=True)
class Margins:
    top: float = 300.0
    bottom: float = 300.0
    left: float = 300.0
    right: float = 300.0


@dataclass(frozen=True)
class Roof:
    width: float
    height: float
    pitch: float = 30.0
    type: RoofType = RoofType.TUILE_MECANIQUE
    margins: Margins = field(default_factory=Margins)
    pitch_unit: Literal["deg", "percent"] = "deg"


@dataclass(frozen=True)
class PanelLayout:
    panel_id: str
    rows: int
    columns: int
    orientation: Orientation = "Portrait"
    # lista explícita por fila para implantaciones irregulares
    row_configuration: Tuple[int, ...] = ()


@dataclass(frozen=True)
class RoofField:
    id: str
    name: str
    roof: Roof
    panels: PanelLayout
    rail_orientation: Optional[RailOrientation] = None


@dataclass(frozen=True)
class MountingSystem:
    brand: MountingBrand = "K2"
    rail_orientation: RailOrientation = "Horizontal"


# =============================
# Onduleur / câblage
# =============================

@dataclass(frozen=True)
class ConfiguredString:
    id: str
    field_id: str
    panel_count: int
    mppt_index: int = 1


@dataclass(frozen=True)
class DcCablingRun:
    mppt_index: int
    length_m: float = 0.0
    section_mm2: Optional[float] = None  # None = Auto
    parallel_strings: int = 1


@dataclass(frozen=True)
class MicroBranch:
    id: str
    micro_count: int
    cable_length_m: float
    cable_section_mm2: float = 2.5
    phase: BranchPhase = "Mono"
    name: str = ""


@dataclass(frozen=True)
class InverterConfig:
    brand: InverterBrand = InverterBrand.NONE
    model: str = "Auto"
    phase: Phase = "Mono"
    has_battery: bool = False
    battery_model: Optional[str] = None
    has_backup: bool = False
    agcp_value: Optional[float] = None
    configured_strings: Tuple[ConfiguredString, ...] = ()
    dc_cabling_runs: Tuple[DcCablingRun, ...] = ()
    micro_branches: Tuple[MicroBranch, ...] = ()

    @property
    def is_three_phase(self) -> bool:
        return self.phase == "Tri"


@dataclass(frozen=True)
class EvCharger:
    selected: bool = False
    phase: Phase = "Mono"
    cable_ref: Optional[str] = None


# =============================
# Proyecto
# =============================

@dataclass(frozen=True)
class Project:
    id: str
    name: str
    fields: Tuple[RoofField, ...]
    postal_code: str = ""
    altitude: float = 0.0
    wind_zone: WindZone = WindZone.ZONE_1
    system: MountingSystem = field(default_factory=MountingSystem)
    inverter_config: InverterConfig = field(default_factory=InverterConfig)
    ev_charger: EvCharger = field(default_factory=EvCharger)
    distance_to_panel: float = 10.0
    # (centralisé) onduleur -> coffret AC, tronçon AC1
    distance_inverter_to_ac_box: float = 2.0
    ac_cable_section_mm2: Optional[float] = None
    ac1_cable_section_mm2: Optional[float] = None
    user_prices: Mapping[str, str] = field(default_factory=dict)

    @property
    def is_three_phase(self) -> bool:
        return self.inverter_config.is_three_phase


@dataclass(frozen=True)
class Climate:
    temp_min: float
    temp_max_amb: float


__all__ = [
    "Phase",
    "BranchPhase",
    "InverterBrand",
    "RoofType",
    "WindZone",
    "Margins",
    "Roof",
    "PanelLayout",
    "RoofField",
    "MountingSystem",
    "ConfiguredString",
    "DcCablingRun",
    "MicroBranch",
    "InverterConfig",
    "EvCharger",
    "Project",
    "Climate",
]
