import unittest
from dataclasses import replace

from bom import build_bill_of_materials, dc_run_sections
from core.model import (
    ConfiguredString,
    DcCablingRun,
    EvCharger,
    InverterBrand,
    InverterConfig,
    MicroBranch,
    PanelLayout,
    Project,
    Roof,
    RoofField,
)
from electrical.catalogs import load_catalogs

CATALOGS = load_catalogs()
PANEL_ID = "DMEGC-DM430M10RT-B54HBB"


def _field(rows, columns, field_id="f1"):
    return RoofField(
        id=field_id,
        name="Sud",
        roof=Roof(width=12000, height=6000),
        panels=PanelLayout(panel_id=PANEL_ID, rows=rows, columns=columns),
    )


def _fox_project(**inv):
    config = dict(
        brand=InverterBrand.FOXESS,
        model="FOX-S5000-G2",
        agcp_value=30,
        configured_strings=(ConfiguredString(id="str-1", field_id="f1", panel_count=14, mppt_index=1),),
        dc_cabling_runs=(DcCablingRun(mppt_index=1, length_m=15),),
    )
    config.update(inv)
    return Project(id="fox", name="FoxESS", fields=(_field(2, 7),), inverter_config=InverterConfig(**config))


def _enphase_project(rows=2, columns=5):
    return Project(
        id="enp",
        name="Enphase",
        fields=(_field(rows, columns),),
        inverter_config=InverterConfig(
            brand=InverterBrand.ENPHASE,
            model="Auto",
            micro_branches=(MicroBranch(id="branch-1", micro_count=10, cable_length_m=15),),
        ),
        distance_to_panel=15,
    )


def _by_id(materials):
    return {m.id: m for m in materials}


class TestCentralizado(unittest.TestCase):
    def setUp(self):
        self.materials = build_bill_of_materials(_fox_project(), CATALOGS)
        self.by_id = _by_id(self.materials)

    def test_onduleur_y_panneaux(self):
        self.assertEqual(14, self.by_id[PANEL_ID].quantity)
        self.assertEqual(1, self.by_id["FOX-S5000-G2"].quantity)

    def test_cables_ac1_y_ac2_etiquetados(self):
        ac1 = self.by_id["810103100609205"]
        ac2 = self.by_id["810103101009205"]
        self.assertTrue(ac1.description.endswith("(AC1: onduleur → coffret AC)"))
        self.assertTrue(ac2.description.endswith("(AC2: coffret AC → tableau)"))

    def test_dc_y_connectique(self):
        for mid in ("821101000609400", "821101000609200", "32.0316P0010-UR", "32.0317P0010-UR"):
            self.assertIn(mid, self.by_id)
        self.assertIn("CAB14124171", self.by_id)

    def test_coffrets_y_disjoncteur_de_tete(self):
        for mid in ("13416", "12232", "02018"):
            self.assertEqual(1, self.by_id[mid].quantity)

    def test_ids_unicos(self):
        ids = [m.id for m in self.materials]
        self.assertEqual(len(ids), len(set(ids)))

    def test_determinista(self):
        self.assertEqual(self.materials, build_bill_of_materials(_fox_project(), CATALOGS))

    def test_prix_utilisateur(self):
        project = replace(_fox_project(), user_prices={"FOX-S5000-G2": "999.00"})
        by_id = _by_id(build_bill_of_materials(project, CATALOGS))
        self.assertEqual("999.00", by_id["FOX-S5000-G2"].price)


class TestSeccionesDc(unittest.TestCase):
    def test_forzada_o_auto(self):
        panel = CATALOGS.panel(PANEL_ID)
        project = _fox_project(
            dc_cabling_runs=(
                DcCablingRun(mppt_index=1, length_m=15, section_mm2=10),
                DcCablingRun(mppt_index=2, length_m=0),
            )
        )
        self.assertEqual([(15.0, 10.0)], dc_run_sections(project, panel))

    def test_auto_sin_dimensionamiento(self):
        panel = CATALOGS.panel(PANEL_ID)
        self.assertEqual([(15.0, 6.0)], dc_run_sections(_fox_project(), panel))


class TestMicro(unittest.TestCase):
    def test_enphase_mono(self):
        by_id = _by_id(build_bill_of_materials(_enphase_project(), CATALOGS))
        self.assertEqual(10, by_id["ENP-IQ8MC-72-M-INT"].quantity)
        self.assertIn("ENVOY-S-EM-230", by_id)
        self.assertEqual(1, by_id["13462"].quantity)
        self.assertEqual(1, by_id["Q-RELAY-1P-FR"].quantity)
        self.assertIn("81010312509205", by_id)
        self.assertNotIn("821101000609400", by_id)

    def test_coffret_segun_numero_de_branches(self):
        by_id = _by_id(build_bill_of_materials(_enphase_project(), CATALOGS, micro_branch_count=2))
        self.assertIn("13464", by_id)
        self.assertEqual(2, by_id["Q-RELAY-1P-FR"].quantity)


class TestOpciones(unittest.TestCase):
    def test_batterie_y_borne(self):
        project = replace(
            _fox_project(model="FOX-H1-5.0-E-G2", has_battery=True, battery_model="FOX-EP5"),
            ev_charger=EvCharger(selected=True, phase="Mono", cable_ref="15254"),
        )
        by_id = _by_id(build_bill_of_materials(project, CATALOGS))
        self.assertIn("FOX-EP5", by_id)
        self.assertIn("STICKER-BAT", by_id)
        self.assertIn("A7300S1-E-2", by_id)
        self.assertIn("15254", by_id)
        self.assertIn("03140", by_id)
        self.assertNotIn("DDSU666", by_id)
        self.assertIn("12526", by_id)

    def test_sin_paneles_sin_electricidad(self):
        project = replace(_fox_project(), fields=(_field(0, 7),))
        self.assertEqual((), build_bill_of_materials(project, CATALOGS))


def _sin(mapping, key):
    return {k: v for k, v in mapping.items() if k != key}


class TestReferenciasACifrar(unittest.TestCase):
    """Una referencia ausente del catálogo sale como línea "à chiffrer", nunca desaparece."""

    def _a_chiffrer(self, materials, mid):
        by_id = _by_id(materials)
        self.assertIn(mid, by_id)
        self.assertEqual(1, by_id[mid].quantity)
        self.assertIn("à chiffrer", by_id[mid].description)

    def test_coffret_ac_ausente(self):
        catalogs = replace(CATALOGS, boxes=_sin(CATALOGS.boxes, "13416"))
        self._a_chiffrer(build_bill_of_materials(_fox_project(), catalogs), "13416")

    def test_coffret_dc_ausente(self):
        catalogs = replace(CATALOGS, boxes=_sin(CATALOGS.boxes, "12232"))
        self._a_chiffrer(build_bill_of_materials(_fox_project(), catalogs), "12232")

    def test_disjoncteur_de_tete_ausente(self):
        catalogs = replace(CATALOGS, boxes=_sin(CATALOGS.boxes, "02018"))
        self._a_chiffrer(build_bill_of_materials(_fox_project(), catalogs), "02018")

    def test_batterie_ausente(self):
        project = _fox_project(model="FOX-H1-5.0-E-G2", has_battery=True, battery_model="BAT-INCONNUE")
        self._a_chiffrer(build_bill_of_materials(project, CATALOGS), "BAT-INCONNUE")

    def test_borne_ve_ausente(self):
        project = replace(_fox_project(), ev_charger=EvCharger(selected=True, phase="Mono", cable_ref="CORDON-X"))
        catalogs = replace(CATALOGS, parts=_sin(CATALOGS.parts, "A7300S1-E-2"))
        materials = build_bill_of_materials(project, catalogs)
        self._a_chiffrer(materials, "A7300S1-E-2")
        self._a_chiffrer(materials, "CORDON-X")

    def test_seccion_dc_sin_referencia(self):
        project = _fox_project(dc_cabling_runs=(DcCablingRun(mppt_index=1, length_m=15, section_mm2=10),))
        materials = build_bill_of_materials(project, CATALOGS)
        self._a_chiffrer(materials, "CABLE-DC-10MM-MANUEL")
        self.assertIn("15 m", _by_id(materials)["CABLE-DC-10MM-MANUEL"].description)
        self.assertNotIn("821101000609400", _by_id(materials))

    def test_placeholders_deterministas(self):
        catalogs = replace(CATALOGS, boxes=_sin(CATALOGS.boxes, "13416"))
        self.assertEqual(
            build_bill_of_materials(_fox_project(), catalogs),
            build_bill_of_materials(_fox_project(), catalogs),
        )


if __name__ == "__main__":
    unittest.main()
