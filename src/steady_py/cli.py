from __future__ import annotations

from dataclasses import replace
from importlib.util import module_from_spec, spec_from_file_location
import logging
from pathlib import Path
import sys
from typing import Annotated, Any, Callable, Optional, cast

import typer

from .model import OutputState, SteadyStateModel
from .options import SolveOptions, load_options
from .residuals import static_residual_report
from .serialization import save_steady_state
from .steady_state import evaluate_steady_state

app = typer.Typer(help="Dynare-style steady-state tools")


def setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )


def _load_model_builder(module_path: Path, symbol: str) -> Callable[[], SteadyStateModel]:
    spec = spec_from_file_location(module_path.stem, module_path)
    if spec is None or spec.loader is None:
        raise RuntimeError(f"Could not load module from {module_path}")
    module = module_from_spec(spec)
    spec.loader.exec_module(module)
    builder_obj = getattr(module, symbol, None)
    builder = cast(Callable[[], SteadyStateModel] | None, builder_obj)
    if builder is None or not callable(builder):
        raise RuntimeError(
            f"Model module {module_path} must define callable {symbol}() -> SteadyStateModel"
        )
    return builder


def _load_model(module_file: str, builder: str) -> SteadyStateModel:
    module_path = Path(module_file)
    if not module_path.exists():
        raise FileNotFoundError(f"Model module not found: {module_path}")
    model_builder = _load_model_builder(module_path, builder)
    model: Any = model_builder()
    if not isinstance(model, SteadyStateModel):
        raise TypeError("Model builder must return SteadyStateModel")
    return model


@app.command("steady")
def steady_cmd(
    model: Annotated[str, typer.Option(help="Python model module path")],
    output: Annotated[str, typer.Option(help="Output JSON path")],
    builder: Annotated[str, typer.Option(help="Model builder symbol")] = "build_model",
    options_file: Annotated[
        Optional[str], typer.Option("--options", help="JSON file with solve options")
    ] = None,
    linear: Annotated[bool, typer.Option(help="Treat the model as linear")] = False,
    ramsey: Annotated[bool, typer.Option(help="Compute the Ramsey policy steady state")] = False,
    block: Annotated[bool, typer.Option(help="Use the block-decomposed solver")] = False,
    debug: Annotated[bool, typer.Option(help="Report Inf/NaN diagnostics")] = False,
    verbose: Annotated[bool, typer.Option(help="Verbose logging")] = False,
) -> None:
    setup_logging(verbose)
    m = _load_model(model, builder)
    if options_file is None:
        options = SolveOptions(steadystate_flag=m.steady_state_function is not None)
    else:
        options = load_options(options_file)
    overrides = {
        name: True
        for name, flag in (
            ("linear", linear),
            ("ramsey_policy", ramsey),
            ("block", block),
            ("debug", debug),
        )
        if flag
    }
    options = replace(options, **overrides)

    result = evaluate_steady_state(m.initial_guess(), m, options, OutputState.for_model(m))
    save_steady_state(result, m, output)
    for name, value in zip(m.endo_names, result.steady_state):
        typer.echo(f"{name:>16} {value:16.6g}")
    typer.echo(f"Steady state written to {output}")
    if not result.ok:
        typer.echo(f"Steady state not found: {result.status}", err=True)
        raise typer.Exit(code=1)


@app.command("resid")
def resid_cmd(
    model: Annotated[str, typer.Option(help="Python model module path")],
    builder: Annotated[str, typer.Option(help="Model builder symbol")] = "build_model",
) -> None:
    m = _load_model(model, builder)
    outputs = OutputState.for_model(m)
    report = static_residual_report(
        m.initial_guess(), outputs.exogenous_steady_state(), m.params, m
    )
    typer.echo("Residuals of the static equations:")
    for line in report.lines():
        typer.echo(f"  {line}")
    typer.echo(f"Max absolute residual: {report.max_abs:.6g}")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
