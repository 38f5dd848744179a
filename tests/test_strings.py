import unittest

from core.model import ConfiguredString, InverterBrand, InverterConfig, PanelLayout, Project, Roof, RoofField
from electrical.panels import (
    assigned_by_field,
    rebalance_strings,
    seed_strings,
    string_assignment_error,
    total_assigned,
)

PANEL_ID = "DMEGC-DM430M10RT-B54HBB"


def _field(field_id, rows, columns, name=""):
    return RoofField(
        id=field_id,
        name=name,
        roof=Roof(width=10000, height=6000),
        panels=PanelLayout(panel_id=PANEL_ID, rows=rows, columns=columns),
    )


def _s(sid, field_id, n, mppt=1):
    return ConfiguredString(id=sid, field_id=field_id, panel_count=n, mppt_index=mppt)


def _project(fields, strings):
    return Project(
        id="p",
        name="Test",
        fields=tuple(fields),
        inverter_config=InverterConfig(
            brand=InverterBrand.FOXESS,
            model="FOX-S5000-G2",
            configured_strings=tuple(strings),
        ),
    )


class TestSiembra(unittest.TestCase):
    def test_un_string_por_champ(self):
        fields = [_field("f1", 2, 6), _field("f2", 1, 4), _field("f3", 1, 2)]
        out = seed_strings(fields, 2)
        self.assertEqual(["str-1", "str-2", "str-3"], [s.id for s in out])
        self.assertEqual([12, 4, 2], [s.panel_count for s in out])
        self.assertEqual([1, 2, 1], [s.mppt_index for s in out])

    def test_mppt_minimo_uno(self):
        out = seed_strings([_field("f1", 1, 3)], 0)
        self.assertEqual(1, out[0].mppt_index)


class TestReequilibrio(unittest.TestCase):
    def test_sin_strings_siembra(self):
        out = rebalance_strings([_field("f1", 2, 6)], (), mppt_count=2)
        self.assertEqual(1, len(out))
        self.assertEqual(12, out[0].panel_count)

    def test_sobreasignado_reduce_los_ultimos(self):
        fields = [_field("f1", 2, 6)]
        out = rebalance_strings(fields, [_s("a", "f1", 8), _s("b", "f1", 6, 2)])
        self.assertEqual([8, 4], [s.panel_count for s in out])
        self.assertEqual(12, total_assigned(out))

    def test_string_a_cero_se_elimina(self):
        fields = [_field("f1", 2, 6)]
        out = rebalance_strings(fields, [_s("a", "f1", 12), _s("b", "f1", 3, 2)])
        self.assertEqual(["a"], [s.id for s in out])

    def test_string_unico_crece(self):
        out = rebalance_strings([_field("f1", 2, 6)], [_s("a", "f1", 10)])
        self.assertEqual(12, out[0].panel_count)

    def test_varios_strings_subasignados_crece_el_ultimo(self):
        out = rebalance_strings([_field("f1", 2, 6)], [_s("a", "f1", 5), _s("b", "f1", 5, 2)])
        self.assertEqual([5, 7], [s.panel_count for s in out])
        self.assertEqual({"f1": 12}, assigned_by_field(out))

    def test_champ_nuevo_recibe_string(self):
        fields = [_field("f1", 2, 6), _field("f2", 1, 4)]
        out = rebalance_strings(fields, [_s("a", "f1", 12)], mppt_count=2)
        self.assertEqual({"f1": 12, "f2": 4}, assigned_by_field(out))
        nuevo = out[-1]
        self.assertEqual(("str-2", "f2", 2), (nuevo.id, nuevo.field_id, nuevo.mppt_index))

    def test_champ_nuevo_con_mppt_ocupados(self):
        fields = [_field("f1", 1, 6), _field("f2", 1, 6), _field("f3", 1, 3)]
        strings = [_s("str-2", "f1", 6), _s("b", "f2", 6, 2)]
        out = rebalance_strings(fields, strings, mppt_count=2)
        nuevo = out[-1]
        self.assertEqual(("str-3", "f3", 3, 1), (nuevo.id, nuevo.field_id, nuevo.panel_count, nuevo.mppt_index))

    def test_champ_sin_paneles_no_recibe_string(self):
        fields = [_field("f1", 2, 6), _field("f2", 0, 4)]
        out = rebalance_strings(fields, [_s("a", "f1", 12)])
        self.assertEqual({"f1": 12}, assigned_by_field(out))

    def test_invariante_de_reparto(self):
        fields = [_field("f1", 2, 6), _field("f2", 1, 4), _field("f3", 1, 5)]
        casos = [
            [_s("a", "f1", 12)],
            [_s("a", "f1", 3), _s("b", "f1", 2, 2), _s("c", "f2", 9)],
            [_s("a", "f2", 1), _s("x", "borrado", 7)],
            [],
        ]
        for strings in casos:
            with self.subTest(strings=strings):
                out = rebalance_strings(fields, strings, mppt_count=2)
                self.assertEqual({"f1": 12, "f2": 4, "f3": 5}, assigned_by_field(out))
                self.assertIsNone(string_assignment_error(_project(fields, out)))

    def test_champ_inexistente_se_descarta(self):
        out = rebalance_strings([_field("f1", 2, 6)], [_s("a", "f1", 12), _s("x", "borrado", 4)])
        self.assertEqual({"f1": 12}, assigned_by_field(out))

    def test_nunca_mas_asignados_que_disponibles(self):
        fields = [_field("f1", 2, 6), _field("f2", 1, 4)]
        strings = [_s("a", "f1", 9), _s("b", "f1", 9, 2), _s("c", "f2", 7)]
        out = rebalance_strings(fields, strings)
        per_field = assigned_by_field(out)
        self.assertLessEqual(per_field["f1"], 12)
        self.assertLessEqual(per_field["f2"], 4)


class TestRepartition(unittest.TestCase):
    def test_total_incorrecto(self):
        project = _project([_field("f1", 2, 6)], [_s("a", "f1", 14)])
        self.assertEqual(
            "Répartition Incorrecte : 14 panneaux assignés sur 12 disponibles.",
            string_assignment_error(project),
        )

    def test_reparto_por_champ_incorrecto(self):
        fields = [_field("f1", 2, 6, name="Toiture Sud"), _field("f2", 1, 4)]
        project = _project(fields, [_s("a", "f1", 10), _s("b", "f2", 6, 2)])
        self.assertEqual(
            "Répartition Incorrecte : 10 panneaux assignés sur 12 disponibles (Toiture Sud).",
            string_assignment_error(project),
        )

    def test_reparto_correcto(self):
        fields = [_field("f1", 2, 6), _field("f2", 1, 4)]
        project = _project(fields, [_s("a", "f1", 12), _s("b", "f2", 4, 2)])
        self.assertIsNone(string_assignment_error(project))


if __name__ == "__main__":
    unittest.main()
