import unittest

from core.model import InverterBrand, InverterConfig, MicroBranch, PanelLayout, Project, Roof, RoofField
from electrical.micro import (
    BRANCH_LIMITS,
    analyze_branch,
    compute_micro_branches_report,
    default_micro_branches,
    ensure_micro_branches,
)

IQ8MC = "ENP-IQ8MC-72-M-INT"


def _project(phase="Mono", branches=(), model=IQ8MC, distance=15.0):
    field = RoofField(
        id="f1",
        name="Sud",
        roof=Roof(width=10000, height=6000),
        panels=PanelLayout(panel_id="DMEGC-DM430M10RT-B54HBB", rows=2, columns=5),
    )
    return Project(
        id="p",
        name="Micro",
        fields=(field,),
        inverter_config=InverterConfig(
            brand=InverterBrand.ENPHASE,
            model=model,
            phase=phase,
            micro_branches=tuple(branches),
        ),
        distance_to_panel=distance,
    )


def _b(n, length, section=2.5, bid="b"):
    return MicroBranch(id=bid, micro_count=n, cable_length_m=length, cable_section_mm2=section)


class TestBranchesPorDefecto(unittest.TestCase):
    def test_mono_una_branche(self):
        out = default_micro_branches(_project(), 10)
        self.assertEqual(1, len(out))
        b = out[0]
        self.assertEqual(("branch-1", "Branche 1", "Mono", 10), (b.id, b.name, b.phase, b.micro_count))
        self.assertEqual(15.0, b.cable_length_m)
        self.assertEqual(2.5, b.cable_section_mm2)

    def test_tri_reparto_equilibrado(self):
        out = default_micro_branches(_project(phase="Tri"), 10)
        self.assertEqual(["L1", "L2", "L3"], [b.phase for b in out])
        self.assertEqual([4, 3, 3], [b.micro_count for b in out])
        self.assertEqual("branch-L1", out[0].id)

    def test_tri_fases_vacias_omitidas(self):
        out = default_micro_branches(_project(phase="Tri"), 2)
        self.assertEqual(["L1", "L2"], [b.phase for b in out])

    def test_sin_micros(self):
        self.assertEqual((), default_micro_branches(_project(), 0))

    def test_configuradas_tienen_prioridad(self):
        project = _project(branches=[_b(6, 10, bid="x"), _b(4, 12, bid="y")])
        self.assertEqual(["x", "y"], [b.id for b in ensure_micro_branches(project, 10)])


class TestAnalisis(unittest.TestCase):
    def test_corriente_y_caida(self):
        a = analyze_branch(1, _b(10, 20), 330, BRANCH_LIMITS[IQ8MC])
        self.assertAlmostEqual(3300 / 230, a.current_a, places=9)
        esperado = 2 * 20 * (3300 / 230) * 0.023 / 2.5 / 230 * 100
        self.assertAlmostEqual(esperado, a.drop_pct, places=9)
        self.assertEqual("warn", a.status)
        self.assertEqual(11, a.max_micros)
        self.assertFalse(a.is_over_limit)


class TestInforme(unittest.TestCase):
    def test_branche_conforme(self):
        rep = compute_micro_branches_report(_project(), 330, branches=[_b(5, 10)], expected_micro_count=5)
        self.assertTrue(rep.is_ok)
        self.assertEqual((), rep.warnings)
        self.assertEqual(330.0, rep.micro_unit_power_va)

    def test_limite_por_modelo(self):
        rep = compute_micro_branches_report(_project(), 330, branches=[_b(12, 10)])
        self.assertFalse(rep.is_ok)
        self.assertIn("12 micro-onduleurs > max 11", rep.errors[0])

    def test_modelo_sin_limite(self):
        rep = compute_micro_branches_report(_project(model="INCONNU"), 330, branches=[_b(30, 1)])
        self.assertTrue(rep.is_ok)
        self.assertIsNone(rep.branches[0].max_micros)

    def test_caida_superior_al_3_por_ciento(self):
        rep = compute_micro_branches_report(_project(), 330, branches=[_b(10, 40)])
        self.assertFalse(rep.is_ok)
        self.assertIn("chute de tension trop élevée", rep.errors[0])
        self.assertEqual("danger", rep.branches[0].status)

    def test_aviso_entre_1_y_3(self):
        rep = compute_micro_branches_report(_project(), 330, branches=[_b(10, 20)])
        self.assertTrue(rep.is_ok)
        self.assertEqual(1, len(rep.warnings))
        self.assertIn("(> 1%)", rep.warnings[0])

    def test_longitud_ausente(self):
        rep = compute_micro_branches_report(_project(), 330, branches=[_b(5, 0)])
        self.assertTrue(rep.is_ok)
        self.assertIn("longueur de câble manquante", rep.warnings[0])

    def test_total_de_micros_distinto(self):
        rep = compute_micro_branches_report(
            _project(), 330, branches=[_b(5, 10, bid="a"), _b(4, 10, bid="b")], expected_micro_count=10
        )
        self.assertIn("Branches AC : 9 micro-onduleurs répartis sur 10 prévus.", rep.errors)

    def test_peor_caida_y_produccion(self):
        rep = compute_micro_branches_report(
            _project(), 330, branches=[_b(5, 10, bid="a"), _b(10, 20, bid="b")]
        )
        self.assertEqual(rep.branches[1].drop_pct, rep.worst_drop_pct)
        self.assertAlmostEqual(rep.worst_drop_pct + 0.5, rep.production_drop_pct(0.5), places=9)

    def test_branches_del_proyecto_por_defecto(self):
        project = _project(branches=[_b(6, 10, bid="x")])
        rep = compute_micro_branches_report(project, 330)
        self.assertEqual(["x"], [b.branch_id for b in rep.branches])


if __name__ == "__main__":
    unittest.main()
