import unittest

import numpy as np

from simpkinetics.composition import ChemicalComposition, parse_formula
from simpkinetics.constants import WATER_MOLAR_MASS
from simpkinetics.equilibrium import EquilibriumSolver
from simpkinetics.errors import NameLookupError, UnitError, ValidationError
from simpkinetics.presets import build_system, nacl_system


class TestParseFormula(unittest.TestCase):
    def test_formulas(self):
        self.assertEqual(parse_formula("NaCl"), {"Na": 1.0, "Cl": 1.0})
        self.assertEqual(parse_formula("MgCl2"), {"Mg": 1.0, "Cl": 2.0})
        self.assertEqual(parse_formula("CH3COOH"), {"C": 2.0, "H": 4.0, "O": 2.0})

    def test_invalid_formula(self):
        for text in ("", "nacl", "Na+", "H2O(l)"):
            with self.assertRaises(ValidationError):
                parse_formula(text)


class TestAqueousComposition(unittest.TestCase):
    def setUp(self):
        self.system = nacl_system()
        self.composition = ChemicalComposition(self.system)

    def element(self, b, symbol):
        return b[self.system.index_element(symbol)]

    def test_one_molal_nacl(self):
        self.composition.set_aqueous_fluid("1 molal NaCl")
        problem = self.composition.to_equilibrium_problem()

        b = problem.element_amounts
        self.assertAlmostEqual(self.element(b, "Na"), 1.0)
        self.assertAlmostEqual(self.element(b, "Cl"), 1.0)
        self.assertAlmostEqual(self.element(b, "H"), 2.0 / WATER_MOLAR_MASS)
        self.assertAlmostEqual(self.element(b, "O"), 1.0 / WATER_MOLAR_MASS)
        self.assertEqual(self.element(b, "Z"), 0.0)
        self.assertEqual(problem.equilibrium_species, (0, 1, 2, 3))
        self.assertAlmostEqual(problem.n[0], 1.0 / WATER_MOLAR_MASS)
        np.testing.assert_array_equal(problem.n[1:], 0.0)

    def test_problem_solves(self):
        self.composition.set_aqueous_fluid("1 molal NaCl")
        problem = self.composition.to_equilibrium_problem()
        result = EquilibriumSolver(self.system).solve_problem(problem)

        self.assertTrue(result.converged)
        np.testing.assert_allclose(
            self.system.element_amounts(result.n), problem.element_amounts, rtol=1e-12, atol=1e-15
        )
        self.assertAlmostEqual(result.n[1] + result.n[3], 1.0, places=12)

    def test_units_and_defaults(self):
        self.composition.set_aqueous_fluid("1 mmolal NaCl; 0.5 NaCl")
        b = self.composition.element_amounts()
        self.assertAlmostEqual(self.element(b, "Na"), 0.501)

        self.composition.set_temperature(60.0, "degC")
        self.composition.set_pressure(2.0, "bar")
        self.assertAlmostEqual(self.composition.temperature, 333.15)
        self.assertAlmostEqual(self.composition.pressure, 2.0e5)
        problem = self.composition.to_equilibrium_problem()
        self.assertAlmostEqual(problem.temperature, 333.15)
        self.assertAlmostEqual(problem.pressure, 2.0e5)

    def test_partition(self):
        self.composition.set_partition("kinetic = NaCl(aq)")
        self.composition.set_aqueous_fluid("0.1 molal NaCl")
        problem = self.composition.to_equilibrium_problem()
        self.assertEqual(problem.equilibrium_species, (0, 1, 2))

    def test_invalid_entries(self):
        with self.assertRaises(UnitError):
            self.composition.set_aqueous_fluid("1 bar NaCl")
        with self.assertRaises(NameLookupError):
            self.composition.set_aqueous_fluid("1 molal MgCl2")
        with self.assertRaises(ValidationError):
            self.composition.set_aqueous_fluid("-1 molal NaCl")
        with self.assertRaises(ValidationError):
            self.composition.set_aqueous_fluid("one molal NaCl")
        with self.assertRaises(ValidationError):
            self.composition.set_temperature(-300.0, "degC")
        self.assertEqual(self.composition.element_amounts().tolist(), [0.0] * self.system.num_elements)


class TestGaseousComposition(unittest.TestCase):
    def setUp(self):
        self.system = build_system(
            ["H2O(l)", "H+", "OH-", "CO2(aq)", "HCO3-"], ["CO2(g)", "H2O(g)"]
        )
        self.composition = ChemicalComposition(self.system)

    def test_mole_fractions(self):
        self.composition.set_gaseous_fluid("0.9 CO2; 0.1 H2O", amount=2.0)
        b = self.composition.element_amounts()
        index = self.system.index_element
        self.assertAlmostEqual(b[index("C")], 1.8)
        self.assertAlmostEqual(b[index("H")], 0.4)
        self.assertAlmostEqual(b[index("O")], 3.8)

        # no aqueous fluid, so no solvent in the initial guess
        problem = self.composition.to_equilibrium_problem()
        np.testing.assert_array_equal(problem.n, 0.0)

    def test_fluids_combine(self):
        self.composition.set_aqueous_fluid("0.01 molal CO2")
        self.composition.set_gaseous_fluid("1.0 CO2", amount=500.0, units="mmol")
        b = self.composition.element_amounts()
        self.assertAlmostEqual(b[self.system.index_element("C")], 0.51)

    def test_invalid_fractions(self):
        with self.assertRaises(ValidationError):
            self.composition.set_gaseous_fluid("0.2 CO2; 0.2 H2O")
        with self.assertRaises(ValidationError):
            self.composition.set_gaseous_fluid("1 molal CO2")
        with self.assertRaises(NameLookupError):
            self.composition.set_gaseous_fluid("0.7 N2; 0.3 O2")


if __name__ == '__main__':
    unittest.main()
