import unittest

from bom.cables import (
    ac_cable_line,
    branch_lengths_by_section,
    dc_cable_lines,
    micro_branch_cable_lines,
    pick_coil,
    required_ac_section,
)
from bom.rules import CoilOption
from core.model import MicroBranch
from electrical.catalogs import load_catalogs

CATALOGS = load_catalogs()


def _branch(n, length, section=2.5):
    return MicroBranch(id=f"b{length}", micro_count=n, cable_length_m=length, cable_section_mm2=section)


class TestCablesAc(unittest.TestCase):
    def test_seccion_requerida(self):
        # 6 kVA mono: protección ceil(1.25 × 26.1 A) = 33 A → 10 mm²
        self.assertEqual(10.0, required_ac_section(6000, 10, False))
        self.assertEqual(2.5, required_ac_section(1000, 5, False))

    def test_couronne_mas_pequena_que_cubre(self):
        options = (CoilOption("c100", 100), CoilOption("c50", 50))
        self.assertEqual("c50", pick_coil(options, 30).id)
        self.assertEqual("c100", pick_coil(options, 80).id)
        self.assertEqual("c100", pick_coil(options, 250).id)

    def test_linea_con_seccion_efectiva(self):
        line = ac_cable_line(6000, 10, CATALOGS, False, 10)
        self.assertEqual("810103101009205", line.id)
        self.assertEqual(1, line.quantity)

    def test_varias_couronnes(self):
        line = ac_cable_line(3000, 60, CATALOGS, False, 2.5)
        self.assertEqual("81010312509200", line.id)
        self.assertEqual(1, line.quantity)
        self.assertEqual(2, ac_cable_line(3000, 120, CATALOGS, False, 2.5).quantity)

    def test_seccion_forzada_no_estandar_se_redondea(self):
        line = ac_cable_line(3000, 20, CATALOGS, False, 4)
        self.assertEqual("810103100609205", line.id)

    def test_tri(self):
        self.assertEqual("810105100609205", ac_cable_line(9000, 20, CATALOGS, True, 6).id)

    def test_sin_couronne_a_chiffrer(self):
        line = ac_cable_line(6000, 10, CATALOGS, False, 25)
        self.assertEqual("CABLE-R2V-3G25-MANUEL", line.id)
        self.assertIn("À chiffrer", line.description)
        self.assertEqual("", line.price)

    def test_sin_potencia_o_longitud(self):
        self.assertIsNone(ac_cable_line(0, 10, CATALOGS))
        self.assertIsNone(ac_cable_line(6000, 0, CATALOGS))


class TestCablesBranches(unittest.TestCase):
    def test_longitudes_por_seccion(self):
        out = branch_lengths_by_section([_branch(5, 30), _branch(4, 25), _branch(0, 40), _branch(3, 10, 6)])
        self.assertEqual({2.5: 55.0, 6.0: 10.0}, out)

    def test_c100_por_encima_de_50m(self):
        lines = micro_branch_cable_lines([_branch(5, 30), _branch(5, 31)], CATALOGS)
        self.assertEqual(1, len(lines))
        self.assertEqual("81010312509200", lines[0].id)
        self.assertEqual(1, lines[0].quantity)
        self.assertIn("total ≈ 61 m", lines[0].description)

    def test_c50_hasta_50m(self):
        lines = micro_branch_cable_lines([_branch(5, 20)], CATALOGS)
        self.assertEqual("81010312509205", lines[0].id)

    def test_16mm_touret(self):
        self.assertEqual("810103101609207", micro_branch_cable_lines([_branch(5, 20, 16)], CATALOGS)[0].id)

    def test_seccion_fuera_de_tabla(self):
        line = micro_branch_cable_lines([_branch(5, 20, 4)], CATALOGS)[0]
        self.assertEqual("CABLE-AC-BRANCH-4MM-MANUEL", line.id)
        self.assertIn("(à chiffrer)", line.description)


class TestCablesDc(unittest.TestCase):
    def test_6mm_rojo_y_negro(self):
        lines = dc_cable_lines([(30, 6), (40, 6)], CATALOGS)
        self.assertEqual(["821101000609400", "821101000609200"], [m.id for m in lines])
        self.assertEqual([1, 1], [m.quantity for m in lines])

    def test_6mm_mas_de_100m(self):
        lines = dc_cable_lines([(80, 6), (70, 6)], CATALOGS)
        self.assertEqual([2, 2], [m.quantity for m in lines])

    def test_otra_seccion_a_chiffrer(self):
        lines = dc_cable_lines([(30, 6), (20, 10), (0, 16)], CATALOGS)
        self.assertEqual("CABLE-DC-10MM-MANUEL", lines[-1].id)
        self.assertIn("20 m par conducteur", lines[-1].description)
        self.assertEqual(3, len(lines))


if __name__ == "__main__":
    unittest.main()
