import unittest

from core.model import InverterBrand, InverterConfig
from electrical.catalogs import load_catalogs
from electrical.topology import is_central, reference_ac_power_va

CATALOGS = load_catalogs()


class TestPotenciaDeReferencia(unittest.TestCase):
    def test_centralizado_usa_el_ac_del_onduleur(self):
        cfg = InverterConfig(brand=InverterBrand.FOXESS, model="FOX-S5000-G2")
        self.assertEqual(5000, reference_ac_power_va(cfg, CATALOGS.inverter("FOX-S5000-G2"), 6020))

    def test_sin_onduleur_usa_la_potencia_pv(self):
        cfg = InverterConfig(brand=InverterBrand.FOXESS, model="FOX-S5000-G2")
        self.assertFalse(is_central(cfg, None))
        self.assertEqual(6020, reference_ac_power_va(cfg, None, 6020))

    def test_micro_usa_la_potencia_pv(self):
        cfg = InverterConfig(brand=InverterBrand.ENPHASE)
        self.assertEqual(4300, reference_ac_power_va(cfg, CATALOGS.inverter("ENP-IQ8MC-72-M-INT"), 4300))


if __name__ == "__main__":
    unittest.main()
