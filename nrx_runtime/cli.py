"""
cli.py
~~~~~~

Command line interface: ``nrx summary``, ``nrx predict`` and ``nrx pack``.
"""

import json
from pathlib import Path
from typing import List, Optional

import numpy as np
import typer

from . import codec
from .csv_data import CsvDataHandler
from .errors import NRXError
from .label_encoder import binary_encode, integer_encode, one_hot_encode
from .metrics import CLASSIFICATION_TYPES, classification_report, regression_report
from .runtime import Runtime
from .settings import Settings, configure_logging

app = typer.Typer(no_args_is_help=True)

_ENCODERS = {
    'binary': binary_encode,
    'categorical': one_hot_encode,
    'sparse_categorical': integer_encode,
}


@app.callback()
def _root() -> None:
    """Run inference with NRX model containers."""
    configure_logging(Settings.from_env())


def _load(model: Path, settings: Settings) -> Runtime:
    runtime = Runtime(max_workers=settings.max_workers)
    try:
        runtime.load_file(settings.resolve_model_path(str(model)))
    except NRXError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)
    return runtime


@app.command('summary')
def summary(
    model: Path = typer.Argument(..., help="Path to the .nrx model file"),
    as_json: bool = typer.Option(False, '--json', help="Print the summary as JSON"),
) -> None:
    """Print the architecture of a model."""
    runtime = _load(model, Settings.from_env())
    if as_json:
        typer.echo(json.dumps(runtime.describe().to_dict(), indent=2))
    else:
        typer.echo(runtime.model_summary())


@app.command('predict')
def predict(
    model: Path = typer.Argument(..., help="Path to the .nrx model file"),
    data: Path = typer.Argument(..., help="CSV file with one sample per row"),
    drop: List[str] = typer.Option([], '--drop', help="Column to ignore (repeatable)"),
    target: Optional[str] = typer.Option(None, help="Target column to evaluate against"),
    classification: Optional[str] = typer.Option(
        None,
        help="Evaluate as a classifier: binary, categorical or sparse_categorical",
    ),
    normalize: bool = typer.Option(False, help="Min-max normalize the features"),
) -> None:
    """Predict every row of a CSV file and optionally report metrics."""
    if classification is not None and classification.lower() not in CLASSIFICATION_TYPES:
        typer.echo(f"Error: unknown classification type '{classification}'", err=True)
        raise typer.Exit(code=2)

    settings = Settings.from_env()
    runtime = _load(model, settings)

    handler = CsvDataHandler()
    try:
        rows = handler.read_csv(str(data))
        if drop:
            rows = handler.remove_columns(drop, rows)
        targets = handler.extract_column(target, rows) if target else None
        features = handler.rows_to_float(rows)
        if normalize:
            features = handler.normalize('minmax', features)
    except (OSError, KeyError, ValueError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)

    try:
        predictions = runtime.predict(features)
    except NRXError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)

    for row in predictions:
        typer.echo(' '.join(f"{value:.6g}" for value in row))

    if targets is None:
        return

    try:
        if classification:
            kind = classification.lower()
            encoded = _ENCODERS[kind](targets)
            report = classification_report(predictions, encoded, kind)
        else:
            actuals = np.array([[float(cell)] for (cell,) in targets])
            report = regression_report(predictions, actuals)
    except ValueError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)

    typer.echo('')
    typer.echo(report.format())


@app.command('pack')
def pack(
    payload: Path = typer.Argument(..., help="JSON file with the model payload"),
    out: Path = typer.Argument(..., help="Destination .nrx file"),
) -> None:
    """Wrap a JSON model payload into an NRX2 container."""
    try:
        with open(payload, encoding='utf-8') as f:
            content = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        typer.echo(f"Error: cannot read payload '{payload}': {e}", err=True)
        raise typer.Exit(code=1)

    data = codec.encode_payload(content)
    try:
        model = codec.decode_model(data)
        codec.write_model(model, str(out))
    except NRXError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)

    typer.echo(
        f"Wrote {out} ({model.num_layers} layers, "
        f"{model.parameter_count} parameters)"
    )


if __name__ == '__main__':
    app()
