# bom/rules.py
"""
Tablas de reglas del chiffrage (referencias por id).

Todas las decisiones "por referencia" del BOM viven aquí como tablas:
couronnes de câble, coffrets AC/DC, Q-Relay, accessoires par marque,
ids de agrupación. Los módulos de cálculo sólo consultan estas tablas.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import FrozenSet, Mapping, Optional, Sequence, Tuple


@dataclass(frozen=True)
class PartRef:
    """Referencia con su désignation / prix de respaldo si falta en catálogo."""

    id: str
    description: str
    price: str = ""


@dataclass(frozen=True)
class CoilOption:
    id: str
    coil_m: float


@dataclass(frozen=True)
class BranchCoilRule:
    c50: Optional[str] = None
    c100: Optional[str] = None
    other: Optional[str] = None


# ==========================================================
# Câbles AC (R2V) : couronnes por sección
# ==========================================================

# (sección máx. cubierta, opciones de couronne); lista vacía = référence à chiffrer
AC_COILS_MONO: Sequence[Tuple[float, Tuple[CoilOption, ...]]] = (
    (1.5, (CoilOption("81010311509205", 50), CoilOption("81010311509200", 100))),
    (2.5, (CoilOption("81010312509205", 50), CoilOption("81010312509200", 100))),
    (6, (CoilOption("810103100609205", 50),)),
    (10, (CoilOption("810103101009205", 50), CoilOption("810103101009200", 100))),
    (16, (CoilOption("810103101609207", 500),)),
)

AC_COILS_TRI: Sequence[Tuple[float, Tuple[CoilOption, ...]]] = (
    (2.5, (CoilOption("81010512509205", 50), CoilOption("81010512509200", 100))),
    (6, (CoilOption("810105100609205", 50),)),
)

AC1_LABEL = " (AC1: onduleur → coffret AC)"
AC2_LABEL = " (AC2: coffret AC → tableau)"

# Câbles des branches micro-onduleurs (micro → coffret AC), en 3G
MICRO_BRANCH_COILS: Mapping[float, BranchCoilRule] = {
    1.5: BranchCoilRule(c50="81010311509205", c100="81010311509200"),
    2.5: BranchCoilRule(c50="81010312509205", c100="81010312509200"),
    6.0: BranchCoilRule(c50="810103100609205"),
    10.0: BranchCoilRule(c50="810103101009205", c100="810103101009200"),
    16.0: BranchCoilRule(other="810103101609207"),
}

# ==========================================================
# Câbles DC et connectique
# ==========================================================

DC_RED_6MM = "821101000609400"
DC_BLACK_6MM = "821101000609200"
DC_COIL_M = 100

MC4_CONNECTORS: Tuple[PartRef, ...] = (
    PartRef("32.0316P0010-UR", "CONNECTEUR FEM.MC4 EVO2-10 pièces", "A0C085"),
    PartRef("32.0317P0010-UR", "CONNECTEUR MALE MC4 EVO2-10 pièces", "A0C077"),
)

MC4_EXTENSION_KEY = "MC4-EXT-2M"
MC4_EXTENSION = PartRef("303037", "Rallonge MC4 2M", "A0BEX2")

# ==========================================================
# Accessoires
# ==========================================================

GROUND_CABLE = PartRef("820001000608600", "CABLE TERRE H07V-K 1X6 VJ C100", "A0AV34")
STICKER_BATTERY = PartRef("STICKER-BAT", "STICKER BATTERIES PV", "A3D7G5")
STICKER_SELF_CONSUMPTION = PartRef("STICKER-AUTO", "STICKER AUTOCONSO PV", "A3D7D2")

FOX_COM_CABLE = PartRef("CAB14124171", "CABLE LIYCY 2X0.75 C100", "A01NF9")

APS_ECU = PartRef("350029", "PASSERELLE COM AVANCEE ECU-C APS", "A046Q2")
APS_CT = PartRef("350040", "TORE MESURE COURANT 80A ECU C APS", "A046R0")
APS_CT_QTY = {"Mono": 2, "Tri": 6}

ENPHASE_ENVOY = PartRef("ENVOY-S-EM-230", "PASSERELLE ENVOY/S ENPHASE (2CT inclus)", "A04BS2")
ENPHASE_CT = PartRef("CT-100-SPLIT", "TRANSFORMATEUR COURANT ENPHASE", "A04BT0")
ENPHASE_CT_QTY_TRI = 4

FOX_MICRO_GATEWAY = PartRef("SMG666.005", "PASSERELLE P/MICRO-ONDULEUR", "A2R4H1")
METER_TRI = PartRef("DTSU666", "COMPTEUR TRI CHINT DTSU666", "A4C248")
METER_MONO = PartRef("DDSU666", "COMPTEUR MONO CHINT DDSU666", "A2R4G3")

# ==========================================================
# Micro-onduleurs
# ==========================================================

APS_CONNECTORS = {
    "Mono": (
        PartRef("2300531032", "CONNECTEUR ETANCHE MALE MONO APS", "A04CG2"),
        PartRef("2300532032", "CONNECTEUR ETANCHE FEM. MONO APS", "A04CH0"),
    ),
    "Tri": (
        PartRef("2300711032", "CONNECTEUR ETANCHE MALE TRI. APS", "A04CJ7"),
        PartRef("2300812032", "CONNECTEUR ETANCHE FEM. TRI. APS", "A04CK5"),
    ),
}

# (phase, portrait) -> Q-Cable
ENPHASE_Q_CABLES = {
    ("Tri", True): "Q-25-10-3P-200",
    ("Tri", False): "Q-25-17-3P-160",
    ("Mono", True): "ENP-Q-25-10-240",
    ("Mono", False): "ENP-Q-25-17-240",
}
ENPHASE_TERMINATORS = {
    "Tri": PartRef("Q-TERM-3P", "EMBOUT DE TERMIN.TRI.ENPHASE"),
    "Mono": PartRef("ENP-Q-TERM-R", "EMBOUT TERMINAIS.MONO ENPHASE"),
}

APS_CABLES = {
    True: PartRef("2322304903", "CABLE MONO. PORTRAIT 2M APS", "A04C98"),
    False: PartRef("2322404903", "CABLE MONO. PAYSAGE 4M DS3 APS", "A04CS1"),
}
APS_END_CAP = PartRef("2060700017", "EMBOUT TERMINAIS.MONO APS", "A08TY8")

FOX_MICRO_AC_CABLE = PartRef("10-100-01176-0", "CABLE AC MONO FoxESS")
FOX_MICRO_TEE = PartRef("10-208-00083-00", "TE DE CONNEXION AC MONO FoxESS")
FOX_MICRO_CAP = PartRef("10-109-00175-00", "BOUCHON AC FoxESS")
FOX_MICRO_PER_BRANCH = 7

# ==========================================================
# Borne VE
# ==========================================================

EV_CHARGERS = {"Mono": "A7300S1-E-2", "Tri": "A022KS1-E-A"}
EV_PROTECTIONS = {
    "Mono": (PartRef("03140", "Disjoncteur Diff mono 40A/30mA Type F 10kA", "A4YC28"),),
    "Tri": (
        PartRef("02056", "Disjoncteur 4x40 A C6 kA", "A4YSY3"),
        PartRef("03446", "Inter Diff Tri 40A/30mA Type F", "A4YC44"),
    ),
}
EV_METERS = {"Mono": METER_MONO, "Tri": METER_TRI}

# ==========================================================
# Coffrets
# ==========================================================

# (calibre requis máx., id); el último tramo usa None = sin límite
BoxLadder = Sequence[Tuple[Optional[float], str]]

FOX_BACKUP_MONO: BoxLadder = ((20, "12554"), (32, "12556"), (None, "12558"))
FOX_BATTERY_MONO: BoxLadder = ((20, "12522"), (32, "12526"), (None, "12528"))
FOX_PLAIN_MONO: BoxLadder = ((20, "13412"), (32, "13416"), (40, "13418"), (None, "13446"))
FOX_PLAIN_TRI: BoxLadder = ((16, "13474"), (None, "13476"))
FOX_BACKUP_TRI = "12507"
FOX_BATTERY_TRI = "12501"

ENPHASE_TRI_BOX = "13488"
ENPHASE_MONO_BY_BRANCHES = {1: "13462", 2: "13464", 3: "13466"}
ENPHASE_MONO_BY_BREAKER: BoxLadder = ((20, "13462"), (40, "13464"), (None, "13466"))

APS_TRI_BOX = "13498"
APS_MONO_BY_BRANCHES = {1: "13442", 2: "13444", 3: "13446"}
# por potencia AC del sistema (VA)
APS_MONO_BY_POWER: BoxLadder = ((4500, "13442"), (8800, "13444"), (None, "13446"))

Q_RELAY_MONO = PartRef("Q-RELAY-1P-FR", "Q-RELAY MONO ENPHASE FR", "A04C14")
Q_RELAY_TRI = PartRef("Q-RELAY-3P-INT", "Q-RELAY TRI ENPHASE INT", "A04C22")
Q_RELAYS_BY_BOX: Mapping[str, Tuple[PartRef, int]] = {
    "13462": (Q_RELAY_MONO, 1),
    "13464": (Q_RELAY_MONO, 2),
    "13466": (Q_RELAY_MONO, 3),
    "13488": (Q_RELAY_TRI, 1),
}

# (stockage?, MPPT) -> (id 600 V, id 1000 V)
DC_BOXES: Mapping[Tuple[bool, int], Tuple[str, str]] = {
    (False, 2): ("12232", "12272"),
    (True, 2): ("12233", "12273"),
    (False, 3): ("12282", "12282"),
    (True, 3): ("12283", "12283"),
}
DC_BOX_1000V_THRESHOLD_V = 600.0
DC_BOX_DEFAULT_VOC = 40.0

# ==========================================================
# Agrupación
# ==========================================================

ACCESSORY_CABLE_IDS: FrozenSet[str] = frozenset(
    {
        "810103100609205",
        "81010100060920",
        "810105100609205",
        "810106100609205",
        "8102051507512",
        "8102025007512",
        "8102066007512",
        "81021060060820",
        "820001000608600",
        "821101000609200",
        "CAB14124171",
    }
)

AC_BOX_IDS: FrozenSet[str] = frozenset(
    {
        "13412", "13416", "13418", "13474", "13476",
        "12522", "12526", "12528", "12501",
        "12334", "12338", "12340", "12333", "12337", "12341",
        "13462", "13464", "13466", "13488",
        "13442", "13444", "13446", "13498",
        "12554", "12556", "12558", "12507",
    }
)
DC_BOX_IDS: FrozenSet[str] = frozenset({"12232", "12272", "12282", "12233", "12273", "12283"})

EV_HARDWARE_IDS: FrozenSet[str] = frozenset({"A7300S1-E-2", "A022KS1-E-A", "15254", "15264"})
EV_PROTECTION_IDS: FrozenSet[str] = frozenset({"02056", "03446", "03140"})
EV_SUBSECTION_TITLE = "BORNE VE"


def pick_from_ladder(ladder: BoxLadder, value: float) -> str:
    for limit, box_id in ladder:
        if limit is None or value <= limit:
            return box_id
    return ladder[-1][1]


__all__ = [
    "PartRef",
    "CoilOption",
    "BranchCoilRule",
    "BoxLadder",
    "pick_from_ladder",
]
