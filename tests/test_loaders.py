import tempfile
import unittest
from pathlib import Path

import yaml

from core.climate import StaticClimateProvider
from core.configuration import EngineConfig, effective_config, load_engine_config
from core.model import Climate, InverterBrand, RoofType, WindZone
from core.project_yaml import load_project_yaml, project_from_dict
from electrical.catalogs import load_catalogs
from electrical.catalogs.catalog_yaml import load_inverters_yaml, load_panels_yaml


def _write(dirpath, name, doc):
    path = Path(dirpath) / name
    path.write_text(yaml.safe_dump(doc, allow_unicode=True), encoding="utf-8")
    return path


PROJECT_DOC = {
    "id": "p1",
    "name": "Maison Dupont",
    "postal_code": "38000",
    "wind_zone": "Zone 2",
    "fields": [
        {
            "id": "f1",
            "name": "Sud",
            "roof": {"width": 12000, "height": 6000, "type": "Fibrociment / PST"},
            "panels": {"panel_id": "DMEGC-DM430M10RT-B54HBB", "rows": 2, "columns": 7},
        }
    ],
    "inverter": {
        "brand": "FoxESS",
        "model": "FOX-S5000-G2",
        "agcp_value": 30,
        "strings": [{"field_id": "f1", "panel_count": 14}],
        "dc_runs": [{"mppt_index": 1, "length_m": 15}],
    },
    "user_prices": {"13416": 450},
}


class TestConfigMotor(unittest.TestCase):
    def test_config_por_defecto_del_repo(self):
        self.assertEqual(EngineConfig(), load_engine_config())

    def test_secciones_aplanadas(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = _write(tmp, "engine.yaml", {"clima": {"default_temp_min_c": -15}, "ac_safety_factor": 1.3})
            cfg = load_engine_config(path)
        self.assertEqual(-15.0, cfg.default_temp_min_c)
        self.assertEqual(1.3, cfg.ac_safety_factor)

    def test_claves_desconocidas_ignoradas(self):
        with self.assertLogs("core.configuration", level="WARNING"):
            cfg = effective_config(EngineConfig(), {"inconnu": 1})
        self.assertEqual(EngineConfig(), cfg)

    def test_valor_no_numerico(self):
        with self.assertRaises(ValueError):
            effective_config(EngineConfig(), {"voc_warn_ratio": "beaucoup"})

    def test_fichero_ausente(self):
        with self.assertRaises(FileNotFoundError):
            load_engine_config(Path("/nonexistent/engine.yaml"))


class TestClima(unittest.TestCase):
    def setUp(self):
        self.provider = StaticClimateProvider(
            {"38": Climate(-12.0, 36.0)}, default=Climate(-10.0, 35.0)
        )

    def test_departement_conocido(self):
        self.assertEqual(Climate(-12.0, 36.0), self.provider.lookup("38000", 0))

    def test_departement_desconocido(self):
        self.assertEqual(Climate(-10.0, 35.0), self.provider.lookup("99999", 0))
        self.assertEqual(Climate(-10.0, 35.0), self.provider.lookup("", 0))

    def test_correccion_de_altitud(self):
        self.assertEqual(Climate(-18.0, 36.0), self.provider.lookup("38100", 1000))

    def test_altitud_no_valida_sin_correccion(self):
        for altitude in (float("nan"), float("inf"), -200, None, "haut"):
            with self.subTest(altitude=altitude):
                self.assertEqual(Climate(-12.0, 36.0), self.provider.lookup("38000", altitude))

    def test_tabla_ausente(self):
        with self.assertRaises(FileNotFoundError):
            StaticClimateProvider.from_yaml(Path("/nonexistent/climate.yaml"))

    def test_tabla_del_repo(self):
        provider = StaticClimateProvider.from_yaml()
        self.assertEqual(Climate(-15.0, 35.0), provider.lookup("67000", 0))

    def test_fila_incompleta(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = _write(tmp, "climate.yaml", {"departements": {"38": {"temp_min": -12}}})
            with self.assertRaises(ValueError):
                StaticClimateProvider.from_yaml(path)


class TestCatalogosYaml(unittest.TestCase):
    def test_catalogos_del_repo(self):
        catalogs = load_catalogs()
        panel = catalogs.panel("DMEGC-DM430M10RT-B54HBB")
        self.assertEqual(430.0, panel.power_w)
        self.assertEqual(-0.26, panel.temp_coeff_voc)
        self.assertTrue(catalogs.inverter("ENP-IQ8MC-72-M-INT").is_micro)
        self.assertEqual(2, catalogs.inverter("FOX-S5000-G2").mppt_count)

    def test_panneau_ausente(self):
        with self.assertRaises(KeyError):
            load_catalogs().panel("INCONNU")

    def test_directorio_vacio(self):
        with tempfile.TemporaryDirectory() as tmp:
            catalogs = load_catalogs(Path(tmp))
        self.assertEqual({}, dict(catalogs.panels))
        self.assertEqual({}, dict(catalogs.boxes))

    def test_campo_obligatorio(self):
        doc = {
            "panels": {
                "P1": {
                    "power_w": 400,
                    "dimensions_mm": {"width": 1134, "height": 1722},
                    "stc": {"voc_v": 37, "isc_a": 13, "vmp_v": 31, "imp_a": 12.5},
                }
            }
        }
        with tempfile.TemporaryDirectory() as tmp:
            path = _write(tmp, "panels.yaml", doc)
            with self.assertRaises(ValueError) as ctx:
                load_panels_yaml(path)
        self.assertIn("description", str(ctx.exception))

    def test_valor_no_numerico(self):
        doc = {
            "inverters": {
                "X": {
                    "description": "Onduleur X",
                    "power_w": "cinq mille",
                    "dc_input": {},
                    "ac_output": {},
                }
            }
        }
        with tempfile.TemporaryDirectory() as tmp:
            path = _write(tmp, "inverters.yaml", doc)
            with self.assertRaises(ValueError):
                load_inverters_yaml(path)


class TestProyectoYaml(unittest.TestCase):
    def test_documento_completo(self):
        project = project_from_dict(PROJECT_DOC)
        self.assertEqual("Maison Dupont", project.name)
        self.assertEqual(WindZone.ZONE_2, project.wind_zone)
        self.assertEqual(RoofType.FIBROCIMENT, project.fields[0].roof.type)
        config = project.inverter_config
        self.assertEqual(InverterBrand.FOXESS, config.brand)
        self.assertEqual(30.0, config.agcp_value)
        self.assertEqual("str-1", config.configured_strings[0].id)
        self.assertEqual(1, config.configured_strings[0].mppt_index)
        self.assertEqual(15.0, config.dc_cabling_runs[0].length_m)
        self.assertIsNone(config.dc_cabling_runs[0].section_mm2)
        self.assertEqual({"13416": "450"}, dict(project.user_prices))

    def test_valores_por_defecto(self):
        project = project_from_dict({"fields": [{"panels": {"panel_id": "P", "rows": 1, "columns": 1}}]})
        self.assertEqual("field-1", project.fields[0].id)
        self.assertEqual(10.0, project.distance_to_panel)
        self.assertEqual(2.0, project.distance_inverter_to_ac_box)
        self.assertEqual(InverterBrand.NONE, project.inverter_config.brand)
        self.assertEqual("Auto", project.inverter_config.model)

    def test_sin_champs(self):
        with self.assertRaises(ValueError):
            project_from_dict({"fields": []})

    def test_marca_invalida(self):
        doc = dict(PROJECT_DOC, inverter={"brand": "Huawei"})
        with self.assertRaises(ValueError) as ctx:
            project_from_dict(doc)
        self.assertIn("inverter.brand", str(ctx.exception))

    def test_fase_invalida(self):
        doc = dict(PROJECT_DOC, inverter={"brand": "FoxESS", "phase": "Bi"})
        with self.assertRaises(ValueError):
            project_from_dict(doc)

    def test_numero_invalido(self):
        doc = dict(PROJECT_DOC, distance_to_panel="loin")
        with self.assertRaises(ValueError):
            project_from_dict(doc)

    def test_fichero(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = _write(tmp, "projet.yaml", PROJECT_DOC)
            project = load_project_yaml(path)
        self.assertEqual("p1", project.id)

    def test_fichero_ausente(self):
        with self.assertRaises(FileNotFoundError):
            load_project_yaml(Path("/nonexistent/projet.yaml"))


if __name__ == "__main__":
    unittest.main()
