"""flatvec CLI application with Typer."""

import json
from pathlib import Path
from typing import Annotated, Any

import numpy as np
import typer

from flatvec import __version__
from flatvec.config import LOG_LEVELS, get_settings, set_settings
from flatvec.errors import CorruptionError, FlatvecError, InvalidArgumentError
from flatvec.ports import SearchHit
from flatvec.store import FlatFileVectorStore
from flatvec.utils.hashing import compute_sha256_file
from flatvec.utils.log import configure_logging
from flatvec.utils.paths import file_size

app = typer.Typer(
    name="flatvec",
    help="Append-only flat-file vector store with exhaustive k-NN search",
    add_completion=True,
    no_args_is_help=True,
)

PathArgument = Annotated[
    Path | None,
    typer.Argument(help="Store file (defaults to the configured data directory)"),
]
DimOption = Annotated[
    int | None,
    typer.Option("--dim", "-d", help="Vector dimension (read from the store header if omitted)"),
]
JsonOption = Annotated[bool, typer.Option("--json", help="Output results as JSON")]


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        typer.echo(f"flatvec version {__version__}")
        raise typer.Exit()


def _fail(message: str, *, code: int = 1) -> typer.Exit:
    typer.secho(f"Error: {message}", fg=typer.colors.RED, err=True)
    return typer.Exit(code=code)


def _resolve_path(path: Path | None) -> Path:
    if path is not None:
        return path.expanduser()
    return get_settings().get_default_store_path()


def _parse_vector(raw: str) -> list[float]:
    """Parse ``"0.1, 0.2, 0.3"`` or a JSON array into floats."""
    text = raw.strip()
    try:
        if text.startswith("["):
            values = json.loads(text)
        else:
            values = [float(part) for part in text.split(",") if part.strip()]
        return [float(value) for value in values]
    except (TypeError, ValueError) as exc:
        raise typer.BadParameter(f"Cannot parse vector {raw!r}: {exc}") from exc


def _parse_metadata(raw: str) -> dict[str, Any]:
    try:
        metadata = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise typer.BadParameter(f"Metadata must be a JSON object: {exc}") from exc
    if not isinstance(metadata, dict):
        raise typer.BadParameter("Metadata must be a JSON object")
    return metadata


def _open_store(path: Path, dim: int | None) -> FlatFileVectorStore:
    """Open an existing store, taking the dimension from its header when not given."""
    if not path.exists():
        raise _fail(f"Store not found: {path}. Run 'flatvec init' first.")
    try:
        dimension = dim if dim is not None else FlatFileVectorStore.read_dimension(path)
        return FlatFileVectorStore(path, dimension)
    except InvalidArgumentError as exc:
        raise _fail(str(exc), code=2) from exc
    except (CorruptionError, OSError) as exc:
        raise _fail(str(exc)) from exc


def _print_hits(hits: list[SearchHit], metric: str) -> None:
    if not hits:
        typer.secho("No results found", fg=typer.colors.YELLOW)
        return

    typer.secho(f"Found {len(hits)} {metric} results:", fg=typer.colors.BLUE)
    for i, hit in enumerate(hits, 1):
        typer.echo(f"{i}. distance={hit.distance:.6f} metadata={json.dumps(hit.metadata)}")


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option("--version", "-V", callback=version_callback, is_eager=True),
    ] = None,
    data_dir: Annotated[
        Path | None,
        typer.Option("--data-dir", help="Override data directory"),
    ] = None,
    log_level: Annotated[
        str | None,
        typer.Option("--log-level", help="Logging level (DEBUG, INFO, WARNING, ERROR)"),
    ] = None,
) -> None:
    """flatvec - append-only flat-file vector store."""
    settings = get_settings()
    if data_dir:
        settings.data_dir = data_dir
    if log_level:
        level = log_level.strip().upper()
        if level not in LOG_LEVELS:
            raise typer.BadParameter(f"Unsupported log level: {log_level}")
        settings.log_level = level
    set_settings(settings)
    configure_logging(settings.log_level)


@app.command("init")
def init_store(
    dim: Annotated[int, typer.Option("--dim", "-d", help="Vector dimension", min=1)],
    path: PathArgument = None,
) -> None:
    """Create an empty store file."""
    store_path = _resolve_path(path)
    existed = store_path.exists()
    try:
        store = FlatFileVectorStore(store_path, dim)
    except InvalidArgumentError as exc:
        raise _fail(str(exc), code=2) from exc
    except (CorruptionError, OSError) as exc:
        raise _fail(str(exc)) from exc

    if existed:
        typer.secho(f"Store already exists: {store.path}", fg=typer.colors.YELLOW)
    else:
        typer.secho(
            f"✅ Created store {store.path} (dimension {store.dimension})",
            fg=typer.colors.GREEN,
        )


@app.command("add")
def add(
    vector: Annotated[str, typer.Option("--vector", help="Comma-separated floats or JSON array")],
    meta: Annotated[str, typer.Option("--meta", "-m", help="Metadata as a JSON object")] = "{}",
    path: PathArgument = None,
    dim: DimOption = None,
) -> None:
    """Append one vector with its metadata."""
    values = _parse_vector(vector)
    metadata = _parse_metadata(meta)
    store = _open_store(_resolve_path(path), dim)

    try:
        store.add_vector(values, metadata)
    except InvalidArgumentError as exc:
        raise _fail(str(exc), code=2) from exc
    except OSError as exc:
        raise _fail(str(exc)) from exc

    typer.secho(f"Added vector to {store.path}", fg=typer.colors.GREEN)


@app.command("search")
def search(
    vector: Annotated[str, typer.Option("--vector", help="Query as comma-separated floats")],
    k: Annotated[int, typer.Option("--top-k", "-k", help="Number of neighbours to return")] = 5,
    metric: Annotated[
        str | None,
        typer.Option("--metric", help="Distance metric: euclidean or cosine"),
    ] = None,
    path: PathArgument = None,
    dim: DimOption = None,
    json_output: JsonOption = False,
) -> None:
    """Find the nearest stored vectors to a query."""
    query = _parse_vector(vector)
    metric_name = (metric or get_settings().default_metric).lower()
    store = _open_store(_resolve_path(path), dim)

    try:
        hits = store.search(query, k, metric_name)
    except InvalidArgumentError as exc:
        raise _fail(str(exc), code=2) from exc
    except (CorruptionError, OSError) as exc:
        raise _fail(str(exc)) from exc

    if json_output:
        from flatvec.utils.cli_output import json_response

        typer.echo(
            json_response(
                "search_results",
                1,
                store=str(store.path),
                metric=metric_name,
                k=k,
                total_hits=len(hits),
                results=[hit.model_dump(mode="json") for hit in hits],
            )
        )
        return

    _print_hits(hits, metric_name)


@app.command("info")
def info(
    path: PathArgument = None,
    json_output: JsonOption = False,
) -> None:
    """Show dimension, record count and checksum of a store."""
    store = _open_store(_resolve_path(path), None)
    try:
        records = store.count()
        checksum = compute_sha256_file(store.path)
    except (FlatvecError, OSError) as exc:
        raise _fail(str(exc)) from exc
    size = file_size(store.path)

    if json_output:
        from flatvec.utils.cli_output import json_response

        typer.echo(
            json_response(
                "store_info",
                1,
                store=str(store.path),
                dimension=store.dimension,
                records=records,
                size_bytes=size,
                sha256=checksum,
            )
        )
        return

    typer.echo(f"Store:      {store.path}")
    typer.echo(f"Dimension:  {store.dimension}")
    typer.echo(f"Records:    {records}")
    typer.echo(f"Size:       {size} bytes")
    typer.echo(f"SHA-256:    {checksum}")


@app.command("demo")
def demo(
    path: PathArgument = None,
    dim: Annotated[int, typer.Option("--dim", "-d", help="Vector dimension", min=1)] = 1536,
    count: Annotated[int, typer.Option("--count", "-n", help="Vectors to seed", min=1)] = 1000,
    k: Annotated[int, typer.Option("--top-k", "-k", help="Number of neighbours to return")] = 2,
    metric: Annotated[str, typer.Option("--metric", help="Distance metric")] = "cosine",
    seed: Annotated[int | None, typer.Option("--seed", help="Random seed")] = None,
) -> None:
    """Seed a store with random vectors, then query it with a random vector."""
    store_path = _resolve_path(path)
    rng = np.random.default_rng(seed)
    seeded = not store_path.exists()

    try:
        store = FlatFileVectorStore(store_path, dim)
        if seeded:
            typer.echo("Initializing sample data...")
            store.add_vectors(
                (rng.random(dim, dtype=np.float32), {"id": i}) for i in range(count)
            )

        typer.echo("Searching for similar vectors...")
        hits = store.search(rng.random(dim, dtype=np.float32), k, metric)
    except InvalidArgumentError as exc:
        raise _fail(str(exc), code=2) from exc
    except (CorruptionError, OSError) as exc:
        raise _fail(str(exc)) from exc

    _print_hits(hits, metric.lower())


if __name__ == "__main__":
    app()
