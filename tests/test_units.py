import unittest

from simpkinetics import units
from simpkinetics.errors import UnitError


class TestUnits(unittest.TestCase):
    def test_temperature_round_trip(self):
        for value, unit in [(25.0, "degC"), (77.0, "degF"), (500.0, "degR"), (300.0, "K")]:
            kelvin = units.convert(value, unit, "K")
            self.assertGreater(kelvin, 0.0)
            self.assertAlmostEqual(units.convert(kelvin, "K", unit), value, places=9)

    def test_known_conversions(self):
        self.assertAlmostEqual(units.convert(25.0, "degC", "K"), 298.15)
        self.assertAlmostEqual(units.convert(32.0, "degF", "degC"), 0.0, places=12)
        self.assertAlmostEqual(units.convert(1.0, "atm", "Pa"), 101325.0)
        self.assertAlmostEqual(units.convert(2.5, "bar", "kPa"), 250.0)
        self.assertAlmostEqual(units.convert(3.0, "mmol", "mol"), 0.003)
        self.assertAlmostEqual(units.convert(1.0, "hour", "s"), 3600.0)

    def test_convertible(self):
        self.assertTrue(units.convertible("g", "kg"))
        self.assertTrue(units.convertible("mmolal", "molal"))
        self.assertFalse(units.convertible("g", "mol"))
        self.assertFalse(units.convertible("furlong", "m3"))

    def test_incompatible_dimensions(self):
        with self.assertRaises(UnitError):
            units.convert(1.0, "kg", "mol")

    def test_unknown_units(self):
        with self.assertRaises(UnitError):
            units.convert(1.0, "parsec", "m3")
        with self.assertRaises(UnitError):
            units.dimension("parsec")


if __name__ == '__main__':
    unittest.main()
