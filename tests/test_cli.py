import io
import json
import tempfile
import unittest
from contextlib import redirect_stderr, redirect_stdout
from pathlib import Path

import yaml

from core.cli import main, render_text
from core.pipeline import recompute
from core.project_yaml import project_from_dict
from electrical.catalogs import load_catalogs


def _doc(panel_count=14, columns=7):
    return {
        "id": "cli",
        "name": "Projet CLI",
        "fields": [
            {
                "id": "f1",
                "name": "Sud",
                "roof": {"width": 12000, "height": 6000},
                "panels": {"panel_id": "DMEGC-DM430M10RT-B54HBB", "rows": 2, "columns": columns},
            }
        ],
        "inverter": {
            "brand": "FoxESS",
            "model": "FOX-S5000-G2",
            "agcp_value": 30,
            "strings": [{"field_id": "f1", "panel_count": panel_count}],
            "dc_runs": [{"mppt_index": 1, "length_m": 15}],
        },
    }


def _run(argv):
    out, err = io.StringIO(), io.StringIO()
    with redirect_stdout(out), redirect_stderr(err):
        code = main(argv)
    return code, out.getvalue(), err.getvalue()


class TestCli(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp = Path(self._tmp.name)

    def tearDown(self):
        self._tmp.cleanup()

    def _project(self, doc):
        path = self.tmp / "projet.yaml"
        path.write_text(yaml.safe_dump(doc, allow_unicode=True), encoding="utf-8")
        return str(path)

    def test_exportable(self):
        code, out, _ = _run([self._project(_doc())])
        self.assertEqual(0, code)
        self.assertIn("Onduleur: FOX-S5000-G2", out)
        self.assertIn("[Panneaux]", out)
        self.assertNotIn("Export bloqué:", out)

    def test_export_bloqueado(self):
        code, out, _ = _run([self._project(_doc(columns=6))])
        self.assertEqual(2, code)
        self.assertIn("Export bloqué:", out)
        self.assertIn("Répartition Incorrecte", out)

    def test_rebalance(self):
        code, _, _ = _run([self._project(_doc(columns=6)), "--rebalance"])
        self.assertEqual(0, code)

    def test_salida_json(self):
        target = self.tmp / "resultat.json"
        code, _, _ = _run([self._project(_doc()), "--json", str(target)])
        self.assertEqual(0, code)
        payload = json.loads(target.read_text(encoding="utf-8"))
        self.assertTrue(payload["can_export"])
        self.assertEqual("FOX-S5000-G2", payload["inverter"]["id"])

    def test_proyecto_ausente(self):
        code, _, err = _run([str(self.tmp / "absent.yaml")])
        self.assertEqual(1, code)
        self.assertIn("Erreur:", err)

    def test_proyecto_invalido(self):
        code, _, _ = _run([self._project({"fields": []})])
        self.assertEqual(1, code)


class TestRenderText(unittest.TestCase):
    def test_secciones(self):
        result = recompute(project_from_dict(_doc()), load_catalogs())
        text = render_text(result)
        self.assertTrue(text.startswith("Projet: Projet CLI"))
        self.assertIn("Compatibilité: OK", text)
        self.assertIn("  AC1: 6 mm²", text)
        self.assertIn("  AC2: 10 mm²", text)
        self.assertIn("  DC MPPT 1: 6 mm²", text)
        self.assertIn("Avertissements:", text)


if __name__ == "__main__":
    unittest.main()
