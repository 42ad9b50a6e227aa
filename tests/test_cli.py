import json
import tempfile
import unittest
from pathlib import Path

from typer.testing import CliRunner

from simpkinetics.cli import app


CONFIG = {
    "phases": [
        {
            "name": "Aqueous",
            "model": "aqueous",
            "species": [
                {"name": "H2O(l)", "elements": {"H": 2, "O": 1}, "molar_mass": 0.018015268, "G0": -237181.4},
                {"name": "Na+", "elements": {"Na": 1}, "charge": 1, "G0": -261880.0},
                {"name": "Cl-", "elements": {"Cl": 1}, "charge": -1, "G0": -131290.0},
                {"name": "NaCl(aq)", "elements": {"Na": 1, "Cl": 1}, "G0": -388735.0},
            ],
        }
    ],
    "reactions": [
        {
            "name": "association",
            "stoichiometry": {"Na+": -1, "Cl-": -1, "NaCl(aq)": 1},
            "kinetics": {
                "type": "mass_action",
                "arrhenius": {"A": 0.1},
                "exponents": {"Na+": 1, "Cl-": 1},
                "backward": {"arrhenius": {"A": 0.01}, "exponents": {"NaCl(aq)": 1}},
            },
        }
    ],
    "state": {
        "T": 25.0,
        "T_units": "degC",
        "P": 1.0,
        "P_units": "bar",
        "amounts": {"H2O(l)": [1.0, "mol"], "Na+": 0.001, "Cl-": 0.001},
    },
    "solver": {"rtol": 1e-9, "equilibrium": {"tolerance": 1e-10}},
    "partition": "equilibrium = H2O(l)",
    "time": {"t0": 0.0, "t1": 4.0, "dt": 2.0},
    "outputs": ["n[NaCl(aq)]", "b[Na]"],
}


class TestCli(unittest.TestCase):
    def setUp(self):
        self.runner = CliRunner()

    def test_nacl_demo(self):
        result = self.runner.invoke(app, ["nacl-demo", "--duration", "3", "--dt", "1"])
        self.assertEqual(result.exit_code, 0, result.output)

        data = json.loads(result.stdout)
        self.assertEqual(data["time"], [0.0, 1.0, 2.0, 3.0])
        nacl = data["quantities"]["n[NaCl(aq)]"]
        self.assertEqual(nacl[0], 0.0)
        self.assertTrue(all(b > a for a, b in zip(nacl, nacl[1:])))
        for value in data["quantities"]["b[Na]"]:
            self.assertAlmostEqual(value, 0.001, places=12)

    def test_nacl_demo_table(self):
        result = self.runner.invoke(app, ["nacl-demo", "--duration", "1", "--table"])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("NaCl(aq)", result.stdout)
        self.assertIn("ChemicalPotential", result.stdout)

    def test_run_config(self):
        with tempfile.TemporaryDirectory() as tmp:
            config_path = Path(tmp) / "config.json"
            output_path = Path(tmp) / "out.json"
            config_path.write_text(json.dumps(CONFIG))

            result = self.runner.invoke(
                app, ["run", str(config_path), "--output", str(output_path)]
            )
            self.assertEqual(result.exit_code, 0, result.output)

            data = json.loads(output_path.read_text())
            self.assertEqual(data, json.loads(result.stdout))

        self.assertEqual(data["time"], [0.0, 2.0, 4.0])
        self.assertGreater(data["quantities"]["n[NaCl(aq)]"][-1], 0.0)
        self.assertAlmostEqual(data["quantities"]["b[Na]"][-1], 0.001, places=12)

    def test_run_unknown_kinetics(self):
        config = json.loads(json.dumps(CONFIG))
        config["reactions"][0]["kinetics"]["type"] = "michaelis"
        with tempfile.TemporaryDirectory() as tmp:
            config_path = Path(tmp) / "config.json"
            config_path.write_text(json.dumps(config))
            result = self.runner.invoke(app, ["run", str(config_path)])
        self.assertNotEqual(result.exit_code, 0)
        self.assertIsInstance(result.exception, ValueError)


if __name__ == '__main__':
    unittest.main()
