# electrical/catalogs/catalog.py
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Optional, Union

from .models import BoxComponent, CableComponent, InverterComponent, PanelComponent, PartComponent

logger = logging.getLogger(__name__)

InverterSide = Union[InverterComponent, PartComponent]


def _by_key(items: Iterable) -> Dict[str, object]:
    return {c.id: c for c in items}


def _find(db: Mapping[str, object], search_id: str) -> Optional[object]:
    # primero por clave, luego por id (algunas claves difieren del id: MC4-EXT-2M -> 303037)
    if search_id in db:
        return db[search_id]
    return next((c for c in db.values() if getattr(c, "id", None) == search_id), None)


def placeholder_part(part_id: str, description: str, price: str = "") -> PartComponent:
    logger.debug("Référence absente du catalogue, ligne à chiffrer: %s", part_id)
    return PartComponent(id=part_id, description=description, price=price, placeholder=True)


@dataclass(frozen=True)
class Catalogs:
    """
    Snapshot inmutable de catálogos (el motor nunca los modifica).

    - panels / inverters: componentes eléctricos.
    - parts: piezas del lado onduleur (passerelles, connecteurs, bornes VE...).
    - cables / boxes: câbles et coffrets / disjoncteurs.
    - mounting: piezas de estructura por marca ("K2", "ESDEC") y por rol (SPLICE, END_CAP...).
    """

    panels: Mapping[str, PanelComponent] = field(default_factory=dict)
    inverters: Mapping[str, InverterComponent] = field(default_factory=dict)
    parts: Mapping[str, PartComponent] = field(default_factory=dict)
    cables: Mapping[str, CableComponent] = field(default_factory=dict)
    boxes: Mapping[str, BoxComponent] = field(default_factory=dict)
    mounting: Mapping[str, Mapping[str, PartComponent]] = field(default_factory=dict)

    @classmethod
    def from_components(
        cls,
        *,
        panels: Iterable[PanelComponent] = (),
        inverters: Iterable[InverterComponent] = (),
        parts: Iterable[PartComponent] = (),
        cables: Optional[Mapping[str, CableComponent]] = None,
        boxes: Iterable[BoxComponent] = (),
        mounting: Optional[Mapping[str, Mapping[str, PartComponent]]] = None,
    ) -> "Catalogs":
        return cls(
            panels=_by_key(panels),
            inverters=_by_key(inverters),
            parts=_by_key(parts),
            cables=dict(cables or {}),
            boxes=_by_key(boxes),
            mounting={k: dict(v) for k, v in (mounting or {}).items()},
        )

    # ==========================================================
    # Lookups
    # ==========================================================

    def panel(self, panel_id: str) -> PanelComponent:
        p = self.panels.get(panel_id)
        if p is None:
            raise KeyError(f"Panneau absent du catalogue: {panel_id}")
        return p

    def find_panel(self, panel_id: str) -> Optional[PanelComponent]:
        return self.panels.get(panel_id)

    def inverter(self, inverter_id: Optional[str]) -> Optional[InverterComponent]:
        if not inverter_id:
            return None
        return _find(self.inverters, inverter_id)  # type: ignore[return-value]

    def find_inverter_side(self, item_id: str) -> Optional[InverterSide]:
        return self.inverter(item_id) or _find(self.parts, item_id)  # type: ignore[return-value]

    def inverter_side(self, item_id: str, fallback_description: str, fallback_price: str = "") -> InverterSide:
        found = self.find_inverter_side(item_id)
        if found is not None:
            return found
        return placeholder_part(item_id, fallback_description, fallback_price)

    def cable(self, key: str) -> Optional[CableComponent]:
        return _find(self.cables, key)  # type: ignore[return-value]

    def box(self, box_id: str) -> Optional[BoxComponent]:
        return _find(self.boxes, box_id)  # type: ignore[return-value]

    def mounting_parts(self, brand: str) -> Mapping[str, PartComponent]:
        return self.mounting.get(brand, {})

    def rails(self, brand: str) -> List[PartComponent]:
        """Rails disponibles de la marca, del más corto al más largo."""
        rails = [
            c
            for c in self.mounting_parts(brand).values()
            if "rail" in c.description.lower() and c.length_mm and c.length_mm > 0
        ]
        return sorted(rails, key=lambda c: c.length_mm or 0)

    def is_cable_reference(self, item_id: str) -> Optional[bool]:
        """True/False si el catálogo de câbles conoce el id; None si no lo conoce."""
        comp = self.cables.get(item_id)
        if comp is None:
            return None
        return "CABLE" in comp.description.upper()


__all__ = ["Catalogs", "InverterSide", "placeholder_part"]
