# bom/material.py
"""
Ligne de matériel et accumulateur ordonné.

Responsabilidad:
- Material: línea de BOM inmutable (id, désignation, quantité, prix).
- BomLines: lista ordenada con las tres formas de añadir usadas por el ensamblado
  (append simple, suma por id, fusión de listas por id).
"""
from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import Iterable, Iterator, List, Optional, Tuple, Union

from electrical.catalogs import (
    BoxComponent,
    CableComponent,
    Catalogs,
    InverterComponent,
    PanelComponent,
    PartComponent,
    placeholder_part,
)

from .rules import PartRef

AnyComponent = Union[PanelComponent, InverterComponent, CableComponent, BoxComponent, PartComponent]


@dataclass(frozen=True)
class Material:
    id: str
    description: str
    quantity: int
    price: str = ""
    datasheet_url: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "description": self.description,
            "quantity": self.quantity,
            "price": self.price,
            "datasheet_url": self.datasheet_url,
        }


def material_from(
    component: AnyComponent,
    quantity: float,
    *,
    description: Optional[str] = None,
    fallback_price: str = "",
) -> Material:
    """Línea a partir de un componente de catálogo; cantidades fraccionarias se redondean hacia arriba."""
    return Material(
        id=component.id,
        description=component.description if description is None else description,
        quantity=int(math.ceil(quantity)),
        price=component.price or fallback_price,
        datasheet_url=component.datasheet_url,
    )


# ==========================================================
# Líneas desde catálogo (placeholder "à chiffrer" si falta)
# ==========================================================

def part_line(catalogs: Catalogs, ref: PartRef, quantity: float, *, description: Optional[str] = None) -> Material:
    comp = catalogs.inverter_side(ref.id, ref.description, ref.price)
    return material_from(comp, quantity, description=description, fallback_price=ref.price)


def cable_line(catalogs: Catalogs, ref: PartRef, quantity: float) -> Material:
    comp = catalogs.cable(ref.id) or placeholder_part(ref.id, ref.description, ref.price)
    return material_from(comp, quantity, fallback_price=ref.price)


def box_line(catalogs: Catalogs, ref: PartRef, quantity: float = 1) -> Material:
    comp = catalogs.box(ref.id) or placeholder_part(ref.id, ref.description, ref.price)
    return material_from(comp, quantity, fallback_price=ref.price)


class BomLines:
    """Lista de líneas que conserva el orden de inserción."""

    def __init__(self, items: Iterable[Material] = ()) -> None:
        self._items: List[Material] = list(items)

    def __iter__(self) -> Iterator[Material]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def push(self, item: Optional[Material]) -> None:
        if item is not None:
            self._items.append(item)

    def extend(self, items: Iterable[Material]) -> None:
        for it in items:
            self.push(it)

    def add_or_inc(self, item: Material) -> None:
        """Suma la cantidad a la primera línea con el mismo id, o añade la línea."""
        if not item.id or item.quantity <= 0:
            return
        for k, existing in enumerate(self._items):
            if existing.id == item.id:
                self._items[k] = replace(existing, quantity=existing.quantity + item.quantity)
                return
        self._items.append(item)

    def merge_all(self, items: Iterable[Material]) -> None:
        for it in items:
            self.add_or_inc(it)

    def as_tuple(self) -> Tuple[Material, ...]:
        return tuple(self._items)


__all__ = ["Material", "material_from", "part_line", "cable_line", "box_line", "BomLines"]
