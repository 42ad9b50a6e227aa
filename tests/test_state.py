import copy
import unittest

import numpy as np

from simpkinetics.constants import DEFAULT_PRESSURE, DEFAULT_TEMPERATURE, R_GAS
from simpkinetics.errors import NameLookupError, UnitError, ValidationError
from simpkinetics.presets import build_system, nacl_system
from simpkinetics.state import ChemicalState, combine_amounts, format_table, scale_amounts


class TestChemicalStateMutators(unittest.TestCase):
    def setUp(self):
        self.system = nacl_system()
        self.state = ChemicalState(self.system)
        self.state.set_species_amounts([1.0, 0.001, 0.002, 0.0])

    def test_commit_amounts(self):
        y = np.arange(self.system.num_elements, dtype=float)
        self.state.commit_amounts(np.array([2.0, 0.0, 0.0, 0.001]), y)
        np.testing.assert_array_equal(self.state.species_amounts, [2.0, 0.0, 0.0, 0.001])
        np.testing.assert_array_equal(self.state.element_potentials, y)
        np.testing.assert_array_equal(self.state.species_potentials, np.zeros(4))

        for n, y_bad in (
            (np.array([1.0, -0.1, 0.0, 0.0]), None),
            (np.ones(3), None),
            (np.ones(4), np.ones(2)),
        ):
            with self.assertRaises(ValidationError):
                self.state.commit_amounts(n, y_bad)
            np.testing.assert_array_equal(self.state.species_amounts, [2.0, 0.0, 0.0, 0.001])
            np.testing.assert_array_equal(self.state.element_potentials, y)

    def test_defaults(self):
        state = ChemicalState(self.system)
        self.assertEqual(state.temperature, DEFAULT_TEMPERATURE)
        self.assertEqual(state.pressure, DEFAULT_PRESSURE)
        np.testing.assert_array_equal(state.species_amounts, np.zeros(4))
        self.assertEqual(state.element_potentials.shape, (self.system.num_elements,))
        self.assertEqual(state.species_potentials.shape, (4,))

    def test_temperature_with_units_round_trip(self):
        for value, unit in [(25.0, "degC"), (350.0, "K"), (100.0, "degF")]:
            self.state.set_temperature(value, unit)
            self.assertAlmostEqual(self.state.temperature_in(unit), value, places=9)
        self.state.set_temperature(25.0, "degC")
        self.assertAlmostEqual(self.state.temperature, 298.15)

    def test_non_positive_temperature_and_pressure(self):
        with self.assertRaises(ValidationError):
            self.state.set_temperature(0.0)
        with self.assertRaises(ValidationError):
            self.state.set_temperature(-300.0, "degC")
        with self.assertRaises(ValidationError):
            self.state.set_pressure(-1.0, "bar")
        self.assertEqual(self.state.temperature, DEFAULT_TEMPERATURE)
        self.assertEqual(self.state.pressure, DEFAULT_PRESSURE)

    def test_pressure_with_units(self):
        self.state.set_pressure(2.0, "bar")
        self.assertAlmostEqual(self.state.pressure, 2.0e5)
        self.assertAlmostEqual(self.state.pressure_in("bar"), 2.0)

    def test_set_species_amounts_scalar(self):
        self.state.set_species_amounts(0.5)
        np.testing.assert_array_equal(self.state.species_amounts, [0.5] * 4)
        with self.assertRaises(ValidationError):
            self.state.set_species_amounts(-0.5)
        np.testing.assert_array_equal(self.state.species_amounts, [0.5] * 4)

    def test_set_species_amounts_dimension_mismatch(self):
        before = self.state.species_amounts
        for bad in ([1.0, 2.0], [1.0] * 5, []):
            with self.assertRaises(ValidationError):
                self.state.set_species_amounts(bad)
            np.testing.assert_array_equal(self.state.species_amounts, before)

    def test_set_species_amounts_with_indices(self):
        self.state.set_species_amounts([0.3, 0.4], [1, 3])
        np.testing.assert_allclose(self.state.species_amounts, [1.0, 0.3, 0.002, 0.4])
        with self.assertRaises(ValidationError):
            self.state.set_species_amounts([0.3], [1, 3])

    def test_set_species_amount_by_name_and_index(self):
        self.state.set_species_amount("Na+", 0.25)
        self.state.set_species_amount(3, 0.5)
        self.assertEqual(self.state.species_amount("Na+"), 0.25)
        self.assertEqual(self.state.species_amount(3), 0.5)

    def test_set_species_amount_errors(self):
        before = self.state.species_amounts
        with self.assertRaises(NameLookupError):
            self.state.set_species_amount("K+", 1.0)
        with self.assertRaises(ValidationError):
            self.state.set_species_amount("Na+", -1.0)
        with self.assertRaises(ValidationError):
            self.state.set_species_amount(10, 1.0)
        with self.assertRaises(UnitError):
            self.state.set_species_amount("Na+", 1.0, "bar")
        np.testing.assert_array_equal(self.state.species_amounts, before)

    def test_set_species_amount_units(self):
        self.state.set_species_amount("Na+", 5.0, "mmol")
        self.assertAlmostEqual(self.state.species_amount("Na+"), 0.005)
        self.assertAlmostEqual(self.state.species_amount("Na+", "mmol"), 5.0)

        molar_mass = self.system.species[self.system.index_species("NaCl(aq)")].molar_mass
        self.state.set_species_amount("NaCl(aq)", 58.44277, "g")
        self.assertAlmostEqual(self.state.species_amount("NaCl(aq)"), 0.05844277 / molar_mass)

    def test_set_potentials(self):
        self.state.set_element_potentials(np.arange(self.system.num_elements, dtype=float))
        self.state.set_species_potentials([1.0, 2.0, 3.0, 4.0])
        np.testing.assert_array_equal(self.state.species_potentials, [1.0, 2.0, 3.0, 4.0])
        with self.assertRaises(ValidationError):
            self.state.set_species_potentials([1.0])

    def test_scale_species_amounts(self):
        before = self.state.species_amounts
        self.state.scale_species_amounts(2.5)
        np.testing.assert_allclose(self.state.species_amounts, before * 2.5)
        with self.assertRaises(ValidationError):
            self.state.scale_species_amounts(-1.0)
        np.testing.assert_allclose(self.state.species_amounts, before * 2.5)

    def test_accessors_return_copies(self):
        amounts = self.state.species_amounts
        amounts[:] = 42.0
        self.assertEqual(self.state.species_amount("H2O(l)"), 1.0)

    def test_element_amounts(self):
        self.assertAlmostEqual(self.state.element_amount("Na"), 0.001)
        self.assertAlmostEqual(self.state.element_amount("Cl"), 0.002)
        self.assertAlmostEqual(self.state.element_amount("H"), 2.0)
        self.assertAlmostEqual(self.state.element_amount("Z"), -0.001)
        self.assertAlmostEqual(self.state.element_amount("Na", "mmol"), 1.0)
        self.assertAlmostEqual(self.state.element_amount_in_species("Cl", [2, 3]), 0.002)
        np.testing.assert_allclose(
            self.state.element_amounts_in_phase("Aqueous"), self.state.element_amounts()
        )
        with self.assertRaises(NameLookupError):
            self.state.element_amount("K")


class TestChemicalStateVolumes(unittest.TestCase):
    def setUp(self):
        self.system = build_system(["H2O(l)", "Na+", "Cl-"], ["CO2(g)"])
        self.state = ChemicalState(self.system)
        self.state.set_species_amounts([55.5, 0.1, 0.1, 1.0])

    def test_set_volume(self):
        self.state.set_volume(1.0e-3)
        volumes = self.system.phase_volumes(
            self.state.temperature, self.state.pressure, self.state.species_amounts
        )
        self.assertAlmostEqual(float(np.sum(volumes)), 1.0e-3, places=12)

    def test_set_phase_volume(self):
        water_before = self.state.species_amount("H2O(l)")
        self.state.set_phase_volume("Gaseous", 1.0e-3)
        expected = 1.0e-3 * self.state.pressure / (R_GAS * self.state.temperature)
        self.assertAlmostEqual(self.state.species_amount("CO2(g)"), expected)
        self.assertEqual(self.state.species_amount("H2O(l)"), water_before)

    def test_negative_volume_rejected(self):
        before = self.state.species_amounts
        with self.assertRaises(ValidationError):
            self.state.set_volume(-1.0)
        with self.assertRaises(ValidationError):
            self.state.set_phase_volume(0, -1.0)
        with self.assertRaises(ValidationError):
            self.state.set_phase_volume(5, 1.0)
        np.testing.assert_array_equal(self.state.species_amounts, before)

    def test_zero_total_volume_zeroes_amounts(self):
        empty = ChemicalState(self.system)
        empty.set_volume(1.0)
        np.testing.assert_array_equal(empty.species_amounts, np.zeros(4))

    def test_scale_species_amounts_in_phase(self):
        self.state.scale_species_amounts_in_phase("Aqueous", 0.5)
        np.testing.assert_allclose(self.state.species_amounts, [27.75, 0.05, 0.05, 1.0])
        with self.assertRaises(ValidationError):
            self.state.scale_species_amounts_in_phase(0, -0.5)


class TestChemicalStateCombinators(unittest.TestCase):
    def setUp(self):
        self.system = nacl_system()
        self.left = ChemicalState(self.system)
        self.left.set_temperature(350.0)
        self.left.set_species_amounts([1.0, 0.1, 0.2, 0.3])
        self.right = ChemicalState(self.system)
        self.right.set_temperature(280.0)
        self.right.set_species_amounts([2.0, 0.0, 0.5, 0.1])

    def test_copy_is_independent(self):
        for clone in (self.left.copy(), copy.copy(self.left), copy.deepcopy(self.left)):
            clone.set_species_amount("Na+", 9.0)
            clone.set_temperature(500.0)
            self.assertEqual(self.left.species_amount("Na+"), 0.1)
            self.assertEqual(self.left.temperature, 350.0)

    def test_combine_amounts(self):
        for result in (combine_amounts(self.left, self.right), self.left + self.right):
            np.testing.assert_allclose(result.species_amounts, [3.0, 0.1, 0.7, 0.4])
            self.assertEqual(result.temperature, 350.0)
        np.testing.assert_allclose(self.left.species_amounts, [1.0, 0.1, 0.2, 0.3])

    def test_scale_amounts(self):
        for result in (scale_amounts(self.left, 2.0), 2.0 * self.left, self.left * 2.0):
            np.testing.assert_allclose(result.species_amounts, [2.0, 0.2, 0.4, 0.6])
        with self.assertRaises(ValidationError):
            scale_amounts(self.left, -1.0)
        with self.assertRaises(ValidationError):
            -1.0 * self.left

    def test_format_table(self):
        table = format_table(self.left)
        lines = table.splitlines()
        self.assertEqual(len(lines), 1 + self.system.num_species)
        self.assertTrue(lines[0].startswith("Index"))
        self.assertIn("ChemicalPotential", lines[0])
        self.assertIn("NaCl(aq)", lines[4])
        self.assertEqual(str(self.left), table)


if __name__ == '__main__':
    unittest.main()
