from __future__ import annotations

import logging

import typer

from tfmodel.errors import TFModelError
from tfmodel.model import Model
from tfmodel.utils import setup_logging

app = typer.Typer(help="Inspect TensorFlow frozen graphs and SavedModels")


@app.callback()
def callback(verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging")) -> None:
    setup_logging(logging.DEBUG if verbose else logging.WARNING)


@app.command()
def info(
    model_path: str = typer.Argument(..., help="Frozen graph (*.pb) or SavedModel directory"),
    warmup: bool = typer.Option(False, help="Run a dummy inference after loading"),
    allow_growth: bool = typer.Option(True, help="Grow GPU memory on demand"),
    gpu_memory_fraction: float = typer.Option(0.0, help="Fraction of GPU memory to reserve, 0 for default"),
    visible_devices: str = typer.Option("", help="Comma-separated GPU indices, empty for all"),
    signature: str = typer.Option(None, help="SavedModel signature to resolve names against"),
) -> None:
    """
    Print inputs and outputs of a model with their shapes and types.
    """
    extra = {"signature": signature} if signature else {}
    try:
        with Model(
            model_path,
            warmup,
            allow_growth,
            gpu_memory_fraction,
            visible_devices,
            **extra,
        ) as model:
            typer.echo(model.get_info_string())
    except TFModelError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1) from e


def main() -> None:
    app()


if __name__ == "__main__":
    main()
