# electrical/panels/strings.py
"""
Répartition des panneaux par MPPT (strings configurées).

Responsabilidad:
- Sembrar un string por champ cuando no hay ninguno.
- Reequilibrar tras un cambio de número de paneles (asignados == disponibles por champ).
- Verificar la répartition (asignados == disponibles), condición bloqueante.
"""
from __future__ import annotations

from dataclasses import replace
from typing import Dict, List, Optional, Sequence, Tuple

from core.model import ConfiguredString, Project, RoofField
from electrical.topology import field_panel_count


def seed_strings(fields: Sequence[RoofField], mppt_count: int) -> Tuple[ConfiguredString, ...]:
    n = max(1, int(mppt_count or 1))
    return tuple(
        ConfiguredString(
            id=f"str-{idx + 1}",
            field_id=f.id,
            panel_count=field_panel_count(f),
            mppt_index=(idx % n) + 1,
        )
        for idx, f in enumerate(fields)
    )


def _next_string_id(strings: Sequence[ConfiguredString]) -> str:
    taken = {s.id for s in strings}
    k = len(strings) + 1
    while f"str-{k}" in taken:
        k += 1
    return f"str-{k}"


def _next_free_mppt(strings: Sequence[ConfiguredString], mppt_count: int) -> int:
    """Primer MPPT sin string; si todos están ocupados, el menos cargado."""
    load = {m: 0 for m in range(1, mppt_count + 1)}
    for s in strings:
        if s.mppt_index in load:
            load[s.mppt_index] += 1
    return min(load, key=lambda m: (load[m], m))


def rebalance_strings(
    fields: Sequence[RoofField],
    strings: Sequence[ConfiguredString],
    *,
    mppt_count: Optional[int] = None,
) -> Tuple[ConfiguredString, ...]:
    """
    Devuelve una nueva répartition coherente con los paneles de cada champ.

    - Sin strings: uno por champ, MPPT (idx % mppt_count) + 1.
    - Se eliminan strings de champs inexistentes.
    - Champ con paneles y sin string: se le siembra uno en el siguiente MPPT libre.
    - Sobre-asignado: se reducen los últimos strings primero.
    - Sub-asignado: el último string del champ absorbe la diferencia.
    - Strings a 0 paneles se eliminan.

    Tras el reequilibrio, cada champ con paneles tiene exactamente sus paneles asignados.
    """
    n = max(1, int(mppt_count or 2))
    current: List[ConfiguredString] = list(strings)
    if not current:
        current = list(seed_strings(fields, n))

    valid = {f.id for f in fields}
    current = [s for s in current if s.field_id in valid]

    for f in fields:
        available = field_panel_count(f)
        positions = [i for i, s in enumerate(current) if s.field_id == f.id]
        assigned = sum(current[i].panel_count for i in positions)

        if not positions:
            if available > 0:
                current.append(
                    ConfiguredString(
                        id=_next_string_id(current),
                        field_id=f.id,
                        panel_count=available,
                        mppt_index=_next_free_mppt(current, n),
                    )
                )
        elif assigned > available:
            diff = assigned - available
            for i in reversed(positions):
                if diff <= 0:
                    break
                take = min(current[i].panel_count, diff)
                current[i] = replace(current[i], panel_count=current[i].panel_count - take)
                diff -= take
        elif assigned < available:
            i = positions[-1]
            current[i] = replace(current[i], panel_count=current[i].panel_count + available - assigned)

    return tuple(s for s in current if s.panel_count > 0)


def assigned_by_field(strings: Sequence[ConfiguredString]) -> Dict[str, int]:
    out: Dict[str, int] = {}
    for s in strings:
        out[s.field_id] = out.get(s.field_id, 0) + int(s.panel_count)
    return out


def total_assigned(strings: Sequence[ConfiguredString]) -> int:
    return sum(int(s.panel_count) for s in strings)


def string_assignment_error(project: Project) -> Optional[str]:
    """Mensaje bloqueante si los paneles asignados no cubren exactamente los disponibles."""
    total = sum(field_panel_count(f) for f in project.fields)
    strings = project.inverter_config.configured_strings
    assigned = total_assigned(strings)
    if assigned != total:
        return f"Répartition Incorrecte : {assigned} panneaux assignés sur {total} disponibles."

    per_field = assigned_by_field(strings)
    for f in project.fields:
        got = per_field.get(f.id, 0)
        available = field_panel_count(f)
        if got != available:
            return (
                f"Répartition Incorrecte : {got} panneaux assignés sur {available} disponibles "
                f"({f.name or f.id})."
            )
    return None


__all__ = [
    "seed_strings",
    "rebalance_strings",
    "assigned_by_field",
    "total_assigned",
    "string_assignment_error",
]
