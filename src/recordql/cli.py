import json
import logging
import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any

import rich_click as click
import yaml
from pydantic import ValidationError
from rich.traceback import install

from recordql import __version__, log
from recordql.config import ScaffoldingConfig, import_record_class, load_scaffolding_config
from recordql.errors import RecordQLError
from recordql.records.store import InMemoryRecordStore
from recordql.scaffolding.schema_scaffolder import build_manager
from recordql.schema.manager import SchemaManager

config_option = click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    required=True,
    help="YAML scaffolding configuration describing the record types and their operations",
)


optional_output_option = click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, writable=True, path_type=Path),
    required=False,
    help="Output file",
)


def load_fixtures(store: InMemoryRecordStore, fixtures_path: Path) -> int:
    """Load ``{class path: [rows]}`` fixtures into the store and return the number of records."""
    with fixtures_path.open("r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}
    if not isinstance(raw, dict):
        raise TypeError(f"Fixtures root must be a mapping (YAML object), got {type(raw).__name__}")

    count = 0
    for class_path, rows in raw.items():
        count += len(store.load(import_record_class(class_path), rows or []))
    return count


def build_from_config(config_path: Path, store: InMemoryRecordStore) -> SchemaManager:
    config: ScaffoldingConfig = load_scaffolding_config(config_path)
    manager = build_manager(config, store)
    manager.schema()
    return manager


def run_or_exit(action: Callable[[], Any]) -> Any:
    try:
        return action()
    except (RecordQLError, ValidationError, TypeError, yaml.YAMLError) as e:
        log.error(str(e))
        sys.exit(1)


@click.group(context_settings={"auto_envvar_prefix": "recordql"})
@click.option(
    "-l",
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
    default="INFO",
    help="Log level",
    show_default=True,
)
@click.option(
    "--log-file",
    type=click.Path(dir_okay=False, writable=True, path_type=Path),
    help="Log file",
)
@click.version_option(__version__)
def cli(log_level: str, log_file: Path | None) -> None:
    if log_file:
        file_handler = logging.FileHandler(log_file, mode="w")
        file_handler.setFormatter(logging.Formatter("%(asctime)s:%(levelname)s:%(message)s"))
        log.addHandler(file_handler)

    log.setLevel(log_level.upper())
    if log_level.upper() == "DEBUG":
        _ = install(show_locals=True)


@cli.command()
@config_option
@optional_output_option
def schema(config_path: Path, output: Path | None) -> None:
    """Print the GraphQL SDL of the scaffolded schema."""
    manager = run_or_exit(lambda: build_from_config(config_path, InMemoryRecordStore()))
    sdl = manager.print_schema()

    if output:
        output.write_text(sdl + "\n", encoding="utf-8")
        log.success(f"Schema written to {output}")
    else:
        click.echo(sdl)


@cli.command()
@config_option
@click.option(
    "--query",
    "-q",
    "query_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    required=True,
    help="File containing the GraphQL operation to execute",
)
@click.option(
    "--fixtures",
    "-f",
    "fixtures_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="YAML file mapping record class paths to lists of records to load before executing",
)
@click.option("--variables", "-v", type=str, default=None, help="Operation variables as a JSON object")
@click.option("--operation-name", type=str, default=None, help="Operation to execute when the file holds several")
@optional_output_option
def query(
    config_path: Path,
    query_path: Path,
    fixtures_path: Path | None,
    variables: str | None,
    operation_name: str | None,
    output: Path | None,
) -> None:
    """Execute a GraphQL operation against the scaffolded schema and an in-memory store."""
    try:
        variable_values = json.loads(variables) if variables else None
    except json.JSONDecodeError as e:
        raise click.BadParameter(f"Variables are not valid JSON: {e}", param_hint="--variables") from None

    store = InMemoryRecordStore()
    if fixtures_path:
        count = run_or_exit(lambda: load_fixtures(store, fixtures_path))
        log.info(f"Loaded {count} record(s) from {fixtures_path}")
    manager = run_or_exit(lambda: build_from_config(config_path, store))

    result = manager.query(query_path.read_text(encoding="utf-8"), variable_values, operation_name=operation_name)

    if output:
        output.write_text(json.dumps(result, indent=2, default=str), encoding="utf-8")
        log.success(f"Result written to {output}")
    else:
        log.print_dict(result)

    if result["errors"]:
        log.error(f"Operation finished with {len(result['errors'])} error(s)")
        sys.exit(1)


@cli.command()
@config_option
def inspect(config_path: Path) -> None:
    """List the types, queries and mutations of the scaffolded schema."""
    manager = run_or_exit(lambda: build_from_config(config_path, InMemoryRecordStore()))
    log.key_value("Types", ", ".join(manager.type_names) or "-")
    log.key_value("Queries", ", ".join(manager.query_names) or "-")
    log.key_value("Mutations", ", ".join(manager.mutation_names) or "-")


if __name__ == "__main__":
    cli()
