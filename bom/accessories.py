# bom/accessories.py
"""
Accessoires: câble de terre, sticker, passerelles/compteurs par marque,
batterie, borne VE et ses protections.
"""
from __future__ import annotations

from typing import List

from core.model import EvCharger, InverterBrand, InverterConfig
from electrical.catalogs import Catalogs
from electrical.topology import is_fox_micro_model

from .material import Material, box_line, cable_line, part_line
from .rules import (
    PartRef,
    APS_CT,
    APS_CT_QTY,
    APS_ECU,
    ENPHASE_CT,
    ENPHASE_CT_QTY_TRI,
    ENPHASE_ENVOY,
    EV_CHARGERS,
    EV_METERS,
    EV_PROTECTIONS,
    FOX_COM_CABLE,
    FOX_MICRO_GATEWAY,
    GROUND_CABLE,
    METER_MONO,
    METER_TRI,
    STICKER_BATTERY,
    STICKER_SELF_CONSUMPTION,
)


def ground_and_sticker_lines(config: InverterConfig, catalogs: Catalogs) -> List[Material]:
    sticker = STICKER_BATTERY if config.has_battery else STICKER_SELF_CONSUMPTION
    return [
        cable_line(catalogs, GROUND_CABLE, 1),
        Material(id=sticker.id, description=sticker.description, quantity=1, price=sticker.price),
    ]


def brand_accessory_lines(config: InverterConfig, catalogs: Catalogs) -> List[Material]:
    """Liaison com FoxESS, ECU + tores APS, Envoy + CT Enphase, passerelle + compteur FoxESS micro."""
    out: List[Material] = []
    tri = config.is_three_phase

    if config.brand == InverterBrand.FOXESS:
        out.append(cable_line(catalogs, FOX_COM_CABLE, 1))

    if config.brand == InverterBrand.APSYSTEMS:
        out.append(part_line(catalogs, APS_ECU, 1))
        out.append(part_line(catalogs, APS_CT, APS_CT_QTY[config.phase]))

    if config.brand == InverterBrand.ENPHASE:
        out.append(part_line(catalogs, ENPHASE_ENVOY, 1))
        if tri:
            out.append(part_line(catalogs, ENPHASE_CT, ENPHASE_CT_QTY_TRI))

    if is_fox_micro_model(config):
        out.append(part_line(catalogs, FOX_MICRO_GATEWAY, 1))
        out.append(part_line(catalogs, METER_TRI if tri else METER_MONO, 1))

    return out


def battery_lines(config: InverterConfig, catalogs: Catalogs) -> List[Material]:
    """Batterie del catálogo, o línea "à chiffrer" con el modelo pedido."""
    if not (config.has_battery and config.battery_model):
        return []
    model = config.battery_model
    return [part_line(catalogs, PartRef(model, f"Batterie {model} (à chiffrer)"), 1)]


def ev_charger_lines(ev: EvCharger, config: InverterConfig, catalogs: Catalogs) -> List[Material]:
    """
    Borne VE: la borne y el cordón (línea "à chiffrer" si faltan en catálogo),
    protecciones dedicadas siempre; compteur si el onduleur no es FoxESS (FoxESS ya lo incluye).
    """
    if not ev.selected:
        return []
    out: List[Material] = []

    charger = EV_CHARGERS[ev.phase]
    out.append(part_line(catalogs, PartRef(charger, f"Borne de recharge {charger} (à chiffrer)"), 1))
    if ev.cable_ref:
        out.append(part_line(catalogs, PartRef(ev.cable_ref, f"Câble borne VE {ev.cable_ref} (à chiffrer)"), 1))

    out.extend(box_line(catalogs, ref, 1) for ref in EV_PROTECTIONS[ev.phase])
    if config.brand != InverterBrand.FOXESS:
        out.append(part_line(catalogs, EV_METERS[ev.phase], 1))
    return out


__all__ = ["ground_and_sticker_lines", "brand_accessory_lines", "battery_lines", "ev_charger_lines"]
