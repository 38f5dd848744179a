# electrical/catalogs/models.py
from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Optional, Union


@dataclass(frozen=True)
class PanelComponent:
    KIND: ClassVar[str] = "panel"

    id: str
    description: str
    power_w: float
    width_mm: float
    height_mm: float
    voc: float
    isc: float
    vmp: float
    imp: float
    temp_coeff_voc: Optional[float] = None  # %/°C
    temp_coeff_pmax: Optional[float] = None
    price: str = ""
    datasheet_url: Optional[str] = None

    @property
    def kind(self) -> str:
        return self.KIND


@dataclass(frozen=True)
class InverterComponent:
    KIND: ClassVar[str] = "inverter"

    id: str
    description: str
    power_w: float
    max_input_voltage: float
    min_mppt_voltage: float
    max_mppt_voltage: float
    max_input_current: float
    max_ac_power: float
    max_ac_current: Optional[float] = None
    nominal_ac_current: Optional[float] = None
    mppt_count: int = 1
    max_strings: Optional[int] = None
    max_dc_power: Optional[float] = None
    is_micro: bool = False
    price: str = ""
    datasheet_url: Optional[str] = None

    @property
    def kind(self) -> str:
        return self.KIND


@dataclass(frozen=True)
class CableComponent:
    KIND: ClassVar[str] = "cable"

    id: str
    description: str
    section_mm2: Optional[float] = None
    coil_m: Optional[float] = None
    unit: str = "piece"
    price: str = ""
    datasheet_url: Optional[str] = None

    @property
    def kind(self) -> str:
        return self.KIND


@dataclass(frozen=True)
class BoxComponent:
    KIND: ClassVar[str] = "box"

    id: str
    description: str
    rating_a: Optional[float] = None
    price: str = ""
    datasheet_url: Optional[str] = None

    @property
    def kind(self) -> str:
        return self.KIND


@dataclass(frozen=True)
class PartComponent:
    """Pieza genérica: fijaciones, accesorios, pasarelas, conectores..."""

    KIND: ClassVar[str] = "part"

    id: str
    description: str
    unit: str = "piece"
    length_mm: Optional[float] = None  # rails
    price: str = ""
    datasheet_url: Optional[str] = None
    placeholder: bool = False  # referencia ausente del catálogo (à chiffrer)

    @property
    def kind(self) -> str:
        return self.KIND


CatalogComponent = Union[PanelComponent, InverterComponent, CableComponent, BoxComponent, PartComponent]


__all__ = [
    "PanelComponent",
    "InverterComponent",
    "CableComponent",
    "BoxComponent",
    "PartComponent",
    "CatalogComponent",
]
