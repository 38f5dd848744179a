# bom/merge.py
"""
Finalisation de la liste: prix utilisateur puis regroupement des couronnes de câble.
"""
from __future__ import annotations

import re
from dataclasses import replace
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from electrical.catalogs import Catalogs

from .material import Material

_NUMERIC_CABLE_ID = re.compile(r"^\d{8,}$")


def apply_price_overrides(items: Sequence[Material], user_prices: Optional[Mapping[str, str]]) -> List[Material]:
    """El prix saisi por el usuario sustituye al del catálogo (clave = id de línea)."""
    if not user_prices:
        return list(items)
    return [replace(it, price=user_prices[it.id]) if it.id in user_prices else it for it in items]


def is_cable_line(item: Material, catalogs: Optional[Catalogs] = None) -> bool:
    """Catálogo de câbles primero; si no lo conoce: id numérico largo o id "CABLE-"."""
    if catalogs is not None:
        known = catalogs.is_cable_reference(item.id)
        if known is not None:
            return known
    return bool(_NUMERIC_CABLE_ID.match(item.id)) or item.id.startswith("CABLE-")


def merge_cable_coils(items: Sequence[Material], catalogs: Optional[Catalogs] = None) -> Tuple[Material, ...]:
    """
    Une las líneas de câble con el mismo id (AC1 / AC2 / branches en la misma couronne).

    - Cantidad: max(existente, nueva); no se suman couronnes ya calculadas.
    - Désignations distintas y no vacías unidas con " / ".
    - Las demás líneas no se tocan; el orden de primera aparición se conserva.
    Aplicar dos veces da el mismo resultado.
    """
    out: List[Material] = []
    slot: Dict[str, int] = {}
    reasons: Dict[str, List[str]] = {}

    for it in items:
        if not is_cable_line(it, catalogs):
            out.append(it)
            continue

        k = slot.get(it.id)
        if k is None:
            slot[it.id] = len(out)
            reasons[it.id] = [it.description or ""]
            out.append(it)
            continue

        existing = out[k]
        seen = reasons[it.id]
        if (it.description or "") not in seen:
            seen.append(it.description or "")
        out[k] = replace(
            existing,
            quantity=max(existing.quantity or 1, it.quantity or 1),
            description=" / ".join(d for d in seen if d),
        )

    return tuple(out)


__all__ = ["apply_price_overrides", "is_cable_line", "merge_cable_coils"]
