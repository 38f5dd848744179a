import unittest

from core.model import RoofType, WindZone
from electrical.protections import (
    head_breaker_catalog_id,
    is_dc_cable_too_small_for_current,
    is_protection_too_high_for_section,
    is_section_oversized_for_rating,
    max_dc_current_for_section,
    max_device_rating_pessimistic,
    max_device_rating_standard,
    min_section_for_rating,
    normalize_breaker_rating,
    protection_status,
    recommended_margins,
    subscribed_capacity_to_commercial_breaker,
    subscription_status,
    theoretical_min_rating,
)


class TestTablasSeccionCalibre(unittest.TestCase):
    def test_perfiles_estandar_y_pesimista(self):
        self.assertEqual(25, max_device_rating_standard(2.5))
        self.assertEqual(20, max_device_rating_pessimistic(2.5))
        self.assertEqual(40, max_device_rating_standard(6))
        self.assertEqual(32, max_device_rating_pessimistic(6))
        self.assertIsNone(max_device_rating_standard(4))

    def test_estado_proteccion(self):
        self.assertEqual("ok", protection_status(6, 32))
        self.assertEqual("info", protection_status(6, 40))
        self.assertEqual("danger", protection_status(6, 63))
        self.assertEqual("danger", protection_status(2.5, 32))
        # sección fuera de tabla: sin veredicto
        self.assertEqual("ok", protection_status(4, 63))

    def test_danger_equivale_a_proteccion_demasiado_alta(self):
        for section in (2.5, 6, 10, 16, 25):
            for rating in (16, 20, 25, 32, 40, 50, 63, 80, 100):
                self.assertEqual(
                    protection_status(section, rating) == "danger",
                    is_protection_too_high_for_section(section, rating),
                    msg=f"S={section} In={rating}",
                )

    def test_seccion_minima_por_calibre(self):
        self.assertEqual(2.5, min_section_for_rating(20))
        self.assertEqual(6, min_section_for_rating(32))
        self.assertEqual(10, min_section_for_rating(40))
        self.assertEqual(16, min_section_for_rating(63))
        self.assertEqual(25, min_section_for_rating(80))

    def test_sobredimension_solo_aviso(self):
        self.assertTrue(is_section_oversized_for_rating(16, 32))
        self.assertFalse(is_section_oversized_for_rating(6, 32))
        self.assertEqual("ok", protection_status(16, 32))


class TestDisjoncteurs(unittest.TestCase):
    def test_normalizacion_mono_y_tri(self):
        self.assertEqual(16, normalize_breaker_rating(10, False))
        self.assertEqual(32, normalize_breaker_rating(21, False))
        self.assertEqual(25, normalize_breaker_rating(21, True))
        self.assertEqual(63, normalize_breaker_rating(100, False))
        self.assertEqual(40, normalize_breaker_rating(100, True))

    def test_normalizacion_entrada_no_finita(self):
        self.assertEqual(16, normalize_breaker_rating(float("nan"), False))
        self.assertEqual(16, normalize_breaker_rating(-3, True))

    def test_calibre_teorico(self):
        self.assertEqual(25, theoretical_min_rating(20))
        self.assertEqual(33, theoretical_min_rating(26.087))
        self.assertEqual(0, theoretical_min_rating(0))
        self.assertEqual(0, theoretical_min_rating(float("inf")))

    def test_agcp_a_calibre_comercial(self):
        self.assertIsNone(subscribed_capacity_to_commercial_breaker(None, False))
        self.assertIsNone(subscribed_capacity_to_commercial_breaker(0, True))
        self.assertEqual(32, subscribed_capacity_to_commercial_breaker(30, False))
        self.assertEqual(40, subscribed_capacity_to_commercial_breaker(45, False))
        self.assertEqual(63, subscribed_capacity_to_commercial_breaker(60, False))
        self.assertEqual(16, subscribed_capacity_to_commercial_breaker(25, True))
        self.assertEqual(32, subscribed_capacity_to_commercial_breaker(50, True))
        self.assertEqual(40, subscribed_capacity_to_commercial_breaker(60, True))

    def test_disjoncteur_de_tete(self):
        self.assertEqual("02018", head_breaker_catalog_id(30, False))
        self.assertEqual("02020", head_breaker_catalog_id(45, False))
        self.assertEqual("02024", head_breaker_catalog_id(60, False))
        self.assertEqual("02048", head_breaker_catalog_id(25, True))
        self.assertEqual("02056", head_breaker_catalog_id(60, True))
        self.assertIsNone(head_breaker_catalog_id(None, True))


class TestGuardasDc(unittest.TestCase):
    def test_corriente_max_por_seccion(self):
        self.assertEqual(20, max_dc_current_for_section(2.5))
        self.assertEqual(32, max_dc_current_for_section(6))
        self.assertIsNone(max_dc_current_for_section(4))

    def test_cable_demasiado_pequeno(self):
        self.assertTrue(is_dc_cable_too_small_for_current(2.5, 21))
        self.assertFalse(is_dc_cable_too_small_for_current(6, 21))
        self.assertFalse(is_dc_cable_too_small_for_current(4, 100))


class TestAvisos(unittest.TestCase):
    def test_margenes_recomendados(self):
        m = recommended_margins(RoofType.TUILE_MECANIQUE, WindZone.ZONE_1)
        self.assertEqual((300.0, 300.0, 300.0, 300.0), (m.top, m.bottom, m.left, m.right))

        m = recommended_margins(RoofType.FIBROCIMENT, WindZone.ZONE_5)
        self.assertEqual(600.0, m.top)
        self.assertEqual(700.0, m.left)

        m = recommended_margins(RoofType.TUILE_CANAL, WindZone.ZONE_3)
        self.assertEqual(450.0, m.right)

    def test_abonnement(self):
        st = subscription_status(phase="Mono", project_power_kwc=4.3, agcp_a=30)
        self.assertEqual(6.0, st.subscribed_kva)
        self.assertEqual(6.0, st.recommended_kva)
        self.assertTrue(st.is_ok)
        self.assertFalse(st.is_over_max_for_phase)

        st = subscription_status(phase="Mono", project_power_kwc=13.0, agcp_a=None)
        self.assertIsNone(st.subscribed_kva)
        self.assertFalse(st.is_ok)
        self.assertTrue(st.is_over_max_for_phase)

        st = subscription_status(phase="Tri", project_power_kwc=10.0, agcp_a=25)
        self.assertEqual(15.0, st.subscribed_kva)
        self.assertEqual(12.0, st.recommended_kva)
        self.assertTrue(st.is_ok)


if __name__ == "__main__":
    unittest.main()
