import json
from pathlib import Path

from typer.testing import CliRunner

from steady_py.cli import app
from steady_py.serialization import load_steady_state

GROWTH_MODEL = "tests/fixtures/models/growth_model.py"
NO_SOLUTION_MODEL = "tests/fixtures/models/no_solution_model.py"


def test_cli_steady_command_writes_steady_state(tmp_path: Path):
    runner = CliRunner()
    output_path = tmp_path / "steady.json"

    result = runner.invoke(
        app, ["steady", "--model", GROWTH_MODEL, "--output", str(output_path)]
    )

    assert result.exit_code == 0, result.output
    assert output_path.exists()
    steady_state, params, status = load_steady_state(output_path)
    assert status.ok
    assert set(steady_state) == {"k", "c", "y", "z"}
    assert abs(steady_state["z"]) < 1e-8
    assert params["alpha"] == 0.33
    assert "Steady state written to" in result.output


def test_cli_steady_command_reads_options_file(tmp_path: Path):
    runner = CliRunner()
    options_path = tmp_path / "options.json"
    options_path.write_text(json.dumps({"solve_algo": "lm", "maxit": 200}), encoding="utf-8")
    output_path = tmp_path / "steady.json"

    result = runner.invoke(
        app,
        [
            "steady",
            "--model",
            GROWTH_MODEL,
            "--output",
            str(output_path),
            "--options",
            str(options_path),
        ],
    )

    assert result.exit_code == 0, result.output
    payload = json.loads(output_path.read_text(encoding="utf-8"))
    assert payload["strategy"] == "nonlinear_generic"


def test_cli_rejects_unknown_option_in_options_file(tmp_path: Path):
    runner = CliRunner()
    options_path = tmp_path / "options.json"
    options_path.write_text(json.dumps({"tolerance": 1e-8}), encoding="utf-8")

    result = runner.invoke(
        app,
        [
            "steady",
            "--model",
            GROWTH_MODEL,
            "--output",
            str(tmp_path / "steady.json"),
            "--options",
            str(options_path),
        ],
    )

    assert result.exit_code != 0
    assert isinstance(result.exception, ValueError)


def test_cli_steady_command_exits_with_error_when_no_steady_state(tmp_path: Path):
    runner = CliRunner()
    output_path = tmp_path / "steady.json"

    result = runner.invoke(
        app, ["steady", "--model", NO_SOLUTION_MODEL, "--output", str(output_path)]
    )

    assert result.exit_code == 1
    _, _, status = load_steady_state(output_path)
    assert status.code == 20
    assert "NON_CONVERGENCE" in result.output


def test_cli_resid_command_reports_residuals():
    runner = CliRunner()
    result = runner.invoke(app, ["resid", "--model", GROWTH_MODEL])

    assert result.exit_code == 0, result.output
    assert "Equation number 1:" in result.output
    assert "Max absolute residual" in result.output


def test_cli_rejects_missing_model_module(tmp_path: Path):
    runner = CliRunner()
    result = runner.invoke(app, ["resid", "--model", str(tmp_path / "missing.py")])

    assert result.exit_code != 0
    assert isinstance(result.exception, FileNotFoundError)
