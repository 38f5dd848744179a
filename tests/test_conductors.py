import math
import unittest

from electrical.conductors import (
    AC_SECTIONS_MM2,
    ac_section_order_violation,
    compute_ac_segments,
    compute_dc_drop,
    dc_sizing_status,
    drop_status,
    pick_auto_dc_section,
    size_dc_run,
    size_dc_runs,
    snap_section_to_catalog,
    voltage_drop_percent,
    worst_dc_drop_pct,
)


def _mono_6kwc(**kw):
    params = dict(
        is_central=False,
        pv_power_w=6000,
        ac_power_va=6000,
        distance_to_panel_m=10,
        distance_inverter_to_ac_box_m=2,
        is_three_phase=False,
    )
    params.update(kw)
    return compute_ac_segments(**params)


class TestCaidaTension(unittest.TestCase):
    def test_caida_dc(self):
        d = compute_dc_drop(10, 10, 6, 300)
        self.assertAlmostEqual(2 * 10 * 10 * 0.023 / 6, d.du_v, places=6)
        self.assertAlmostEqual(d.du_v / 300 * 100, d.du_pct, places=6)

    def test_caida_ac_mono(self):
        self.assertAlmostEqual(0.5217, voltage_drop_percent(6000, 10, 10, False), places=3)

    def test_caida_ac_tri_usa_raiz_de_tres(self):
        i = 9000 / (400 * 1.732)
        esperado = (math.sqrt(3) * 20 * i * 0.023 / 6) / 400 * 100
        self.assertAlmostEqual(esperado, voltage_drop_percent(9000, 20, 6, True), places=6)

    def test_entradas_nulas_o_invalidas(self):
        self.assertEqual(0.0, voltage_drop_percent(0, 10, 6, False))
        self.assertEqual(0.0, voltage_drop_percent(6000, 10, 0, False))
        self.assertEqual(0.0, voltage_drop_percent(float("nan"), 10, 6, True))
        d = compute_dc_drop(0, 10, 6, 300)
        self.assertEqual((0.0, 0.0), (d.du_v, d.du_pct))
        self.assertEqual(0.0, compute_dc_drop(10, 10, 6, -1).du_pct)

    def test_caida_decrece_con_la_seccion(self):
        drops = [voltage_drop_percent(6000, 25, s, False) for s in AC_SECTIONS_MM2]
        for a, b in zip(drops, drops[1:]):
            self.assertGreater(a, b)

    def test_estados(self):
        self.assertEqual("ok", drop_status(0.8))
        self.assertEqual("warn", drop_status(1.5))
        self.assertEqual("danger", drop_status(3.5))
        self.assertEqual("missing", dc_sizing_status(0, 0))
        self.assertEqual("warn", dc_sizing_status(10, 1.5))

    def test_snap_catalogo(self):
        self.assertEqual(6.0, snap_section_to_catalog(4))
        self.assertEqual(10.0, snap_section_to_catalog(10))
        self.assertIsNone(snap_section_to_catalog(30))
        self.assertIsNone(snap_section_to_catalog(None))


class TestTramosAc(unittest.TestCase):
    def test_mono_6kwc_sin_agcp(self):
        sizing = _mono_6kwc()
        self.assertIsNone(sizing.ac1)
        ac2 = sizing.ac2
        self.assertEqual(33, ac2.breaker_min_a)
        self.assertEqual(40, ac2.breaker_a)
        self.assertEqual("NORMALIZED", ac2.breaker_basis)
        self.assertEqual(10.0, ac2.min_auto_section_mm2)
        self.assertEqual(10.0, ac2.effective_section_mm2)
        self.assertEqual("ok", ac2.protection_status)
        self.assertEqual("ok", ac2.drop_status)

    def test_mono_6kwc_con_agcp_30(self):
        ac2 = _mono_6kwc(agcp_a=30).ac2
        self.assertEqual(32, ac2.breaker_a)
        self.assertEqual("AGCP", ac2.breaker_basis)
        self.assertEqual(10.0, ac2.effective_section_mm2)
        self.assertFalse(ac2.is_forced)

    def test_forzado_se_respeta_y_se_evalua(self):
        ac2 = _mono_6kwc(agcp_a=30, ac2_forced_section=2.5).ac2
        self.assertTrue(ac2.is_forced)
        self.assertEqual(2.5, ac2.effective_section_mm2)
        self.assertEqual(10.0, ac2.auto_section_mm2)
        self.assertEqual("danger", ac2.protection_status)
        self.assertGreater(ac2.drop_pct, ac2.auto_drop_pct)

    def test_sobredimension_es_aviso(self):
        ac2 = _mono_6kwc(agcp_a=30, ac2_forced_section=25).ac2
        self.assertTrue(ac2.is_oversized)
        self.assertTrue(ac2.is_oversized_for_breaker)
        self.assertEqual("ok", ac2.protection_status)

    def test_central_ac2_no_baja_de_ac1(self):
        sizing = compute_ac_segments(
            is_central=True,
            pv_power_w=5000,
            ac_power_va=5000,
            distance_to_panel_m=10,
            distance_inverter_to_ac_box_m=2,
            is_three_phase=False,
            ac1_forced_section=16,
        )
        self.assertEqual(16.0, sizing.ac1.effective_section_mm2)
        self.assertEqual(16.0, sizing.ac2.effective_section_mm2)
        self.assertFalse(sizing.section_order_violation)

    def test_central_ac1_auto(self):
        sizing = compute_ac_segments(
            is_central=True,
            pv_power_w=5000,
            ac_power_va=5000,
            distance_to_panel_m=10,
            distance_inverter_to_ac_box_m=2,
            is_three_phase=False,
        )
        self.assertEqual(32, sizing.ac1.breaker_a)
        self.assertEqual(6.0, sizing.ac1.effective_section_mm2)
        self.assertGreaterEqual(sizing.ac2.effective_section_mm2, sizing.ac1.effective_section_mm2)

    def test_violacion_de_orden_con_ac2_forzado(self):
        sizing = compute_ac_segments(
            is_central=True,
            pv_power_w=5000,
            ac_power_va=5000,
            distance_to_panel_m=10,
            distance_inverter_to_ac_box_m=2,
            is_three_phase=False,
            ac1_forced_section=10,
            ac2_forced_section=6,
        )
        self.assertTrue(sizing.section_order_violation)
        self.assertTrue(ac_section_order_violation(is_central=True, ac1_section_mm2=10, ac2_section_mm2=6))
        self.assertFalse(ac_section_order_violation(is_central=False, ac1_section_mm2=10, ac2_section_mm2=6))


class TestTramosDc(unittest.TestCase):
    def test_auto_arranca_en_6(self):
        self.assertEqual(6.0, pick_auto_dc_section(5, 10, 300))
        self.assertEqual(6.0, pick_auto_dc_section(0, 10, 300))

    def test_auto_sube_hasta_3_por_ciento(self):
        self.assertEqual(16.0, pick_auto_dc_section(100, 15, 200))

    def test_longitud_ausente(self):
        run = size_dc_run(mppt_index=1, length_m=0, current_a=10, base_v=300)
        self.assertEqual("missing", run.status)
        self.assertEqual(0.0, run.du_pct)

    def test_cable_demasiado_pequeno(self):
        run = size_dc_run(mppt_index=1, length_m=10, current_a=21, base_v=300, forced_section=2.5)
        self.assertTrue(run.cable_too_small)
        self.assertEqual(20, run.max_current_a)
        self.assertEqual(6, run.recommended_min_section_mm2)

    def test_varios_mppt(self):
        runs = size_dc_runs([(1, 17.4, 259.3), (2, 17.4, 259.3)], {1: (20.0, None)})
        self.assertEqual([1, 2], [r.mppt_index for r in runs])
        self.assertEqual(6.0, runs[0].effective_section_mm2)
        self.assertEqual("warn", runs[0].status)
        self.assertEqual("missing", runs[1].status)
        self.assertAlmostEqual(runs[0].du_pct, worst_dc_drop_pct(runs), places=9)
        self.assertEqual(0.0, worst_dc_drop_pct(()))


if __name__ == "__main__":
    unittest.main()
