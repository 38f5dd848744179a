# bom/grouping.py
"""
Regroupement de la liste matériel par catégorie d'affichage / export.

Orden de categorías: Panneaux, Onduleurs, Electricité (con sub-sección BORNE VE),
Structure, Accessoires. Las categorías vacías se omiten.
"""
from __future__ import annotations

import unicodedata
from dataclasses import dataclass
from typing import Dict, List, Literal, Sequence, Tuple

from .material import Material
from .rules import (
    AC_BOX_IDS,
    ACCESSORY_CABLE_IDS,
    DC_BOX_IDS,
    EV_HARDWARE_IDS,
    EV_PROTECTION_IDS,
    EV_SUBSECTION_TITLE,
)

MaterialCategory = Literal["Panneaux", "Onduleurs", "Electricité", "Structure", "Accessoires"]

CATEGORY_ORDER: Tuple[MaterialCategory, ...] = ("Panneaux", "Onduleurs", "Electricité", "Structure", "Accessoires")

_PANEL_WORDS = ("panneau", "module", "dmegc", "tcl", "dualsun")
_INVERTER_WORDS = ("onduleur", "micro-onduleur", "passerelle", "envoy", "ecu")
_INVERTER_EXCLUDED = ("fixation", "clip", "ecrou", "écrou", "montage", "coffret", "tore", "compteur", "meter")
_ELEC_WORDS = (
    "batterie", "coffret", "disjoncteur", "inter diff", "cable", "câble", "cordon", "rallonge",
    "embout", "te de connexion", "mc4", "bouchon ac", "tore", "compteur", "borne", "sticker",
    "q-relay", "qrelay",
)


@dataclass(frozen=True)
class SubSection:
    title: str
    items: Tuple[Material, ...]


@dataclass(frozen=True)
class MaterialGroup:
    category: MaterialCategory
    items: Tuple[Material, ...]
    sub_sections: Tuple[SubSection, ...] = ()


# ==========================================================
# Clasificación
# ==========================================================

def _is_panel(desc: str) -> bool:
    return any(w in desc for w in _PANEL_WORDS) and "onduleur" not in desc and "micro" not in desc


def _is_inverter(desc: str, uid: str) -> bool:
    by_desc = any(w in desc for w in _INVERTER_WORDS) and not any(w in desc for w in _INVERTER_EXCLUDED)
    fox = uid.startswith("FOX-") and not any(w in uid for w in ("ECS", "EP", "MIRA"))
    return (
        by_desc
        or uid.startswith("ENP-IQ")
        or uid.startswith("APS-DS3")
        or fox
        or uid.startswith("SMG666")
        or uid == "OND-PERSO"
    )


def is_accessory_cable(item: Material) -> bool:
    if item.id in ACCESSORY_CABLE_IDS:
        return True
    d = item.description.lower()
    return (
        "cable r2v" in d
        or ("cable terre" in d and "h07v" in d)
        or "h1z2z2" in d
        or "cable solaire" in d
        or "liyc" in d
    )


def _is_electrical(desc: str, uid: str) -> bool:
    if any(w in desc for w in _ELEC_WORDS):
        return True
    if any(w in uid for w in ("ECS", "EP5", "EP11")):
        return True
    if "connecteur" in desc and "rail" not in desc:
        return True
    if "terminaison" in desc and "rail" not in desc:
        return True
    return uid.startswith("Q-RELAY") or uid.startswith("MAD-")


def categorize(item: Material) -> MaterialCategory:
    desc = item.description.lower()
    uid = item.id.upper()
    if _is_panel(desc):
        return "Panneaux"
    if _is_inverter(desc, uid):
        return "Onduleurs"
    if is_accessory_cable(item):
        return "Accessoires"
    if _is_electrical(desc, uid):
        return "Electricité"
    return "Structure"


# ==========================================================
# Orden dentro de Electricité
# ==========================================================

def _is_ac_box(item: Material) -> bool:
    desc = item.description.lower()
    if "coffret" not in desc or "dc" in desc:
        return False
    return "ac" in desc or item.id in AC_BOX_IDS


def _is_dc_box(item: Material) -> bool:
    desc = item.description.lower()
    if "coffret" not in desc:
        return False
    return "dc" in desc or item.id in DC_BOX_IDS


def electrical_priority(item: Material) -> int:
    desc = item.description.lower()
    uid = item.id.upper()
    if "batterie" in desc or any(w in uid for w in ("ECS", "EP5", "EP11", "MIRA")):
        return 1
    if uid.startswith("STICKER"):
        return 2
    if _is_ac_box(item):
        return 3
    if "disjoncteur" in desc or "inter diff" in desc:
        return 4
    if _is_dc_box(item):
        return 5
    if "compteur" in desc or "meter" in desc or "DDSU" in uid or "DTSU" in uid or "tore" in desc:
        return 6
    if "borne" in desc or "cordon ve" in desc or "recharge" in desc:
        return 7
    if "foxess" in desc or uid.startswith("FOX-") or uid.startswith("10-"):
        return 8
    if "enphase" in desc or uid.startswith("ENP-") or uid.startswith("Q-"):
        return 9
    if "aps" in desc or uid.startswith("APS-") or "ecu" in desc:
        return 10
    return 11


def _collation_key(text: str) -> str:
    # orden alfabético insensible a mayúsculas y acentos
    decomposed = unicodedata.normalize("NFD", text)
    return "".join(c for c in decomposed if not unicodedata.combining(c)).casefold()


def _electrical_sort_key(item: Material) -> Tuple[int, str]:
    return electrical_priority(item), _collation_key(item.description)


# ==========================================================
# API pública
# ==========================================================

def group_materials_by_category(materials: Sequence[Material]) -> Tuple[MaterialGroup, ...]:
    buckets: Dict[MaterialCategory, List[Material]] = {c: [] for c in CATEGORY_ORDER}
    for item in materials:
        buckets[categorize(item)].append(item)

    electrical = sorted(buckets["Electricité"], key=_electrical_sort_key)

    # protecciones VE sólo se separan cuando hay una borne en la lista
    has_ev = any(m.id in EV_HARDWARE_IDS for m in materials)
    ev_protections = EV_PROTECTION_IDS if has_ev else frozenset()

    general: List[Material] = []
    ev: List[Material] = []
    for item in electrical:
        desc = item.description.lower()
        if (
            item.id in EV_HARDWARE_IDS
            or item.id in ev_protections
            or "borne recharge" in desc
            or "cordon ve" in desc
        ):
            ev.append(item)
        else:
            general.append(item)

    groups = []
    for category in CATEGORY_ORDER:
        if category == "Electricité":
            subs = (SubSection(EV_SUBSECTION_TITLE, tuple(ev)),) if ev else ()
            groups.append(MaterialGroup(category, tuple(general), subs))
        else:
            groups.append(MaterialGroup(category, tuple(buckets[category])))

    return tuple(g for g in groups if g.items or g.sub_sections)


__all__ = [
    "MaterialCategory",
    "CATEGORY_ORDER",
    "SubSection",
    "MaterialGroup",
    "categorize",
    "is_accessory_cable",
    "electrical_priority",
    "group_materials_by_category",
]
