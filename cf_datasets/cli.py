from typing import Annotated, Optional, TypedDict

import typer
import yaml
from anystore.cli import ErrorHandler
from anystore.io import smart_read, smart_stream_json, smart_write
from anystore.logging import configure_logging
from pydantic import BaseModel
from rich.console import Console

from cf_datasets import __version__
from cf_datasets.core.settings import Settings
from cf_datasets.model import DatasetDescriptor
from cf_datasets.repository import DatasetRepository, RepositoryBuilder

settings = Settings()
cli = typer.Typer(
    no_args_is_help=True,
    pretty_exceptions_enable=settings.debug,
    name="Column-family dataset repository",
)
console = Console(stderr=True)


class State(TypedDict):
    builder: RepositoryBuilder | None
    repository: DatasetRepository | None


STATE: State = {"builder": None, "repository": None}


def load_descriptor(uri: str) -> DatasetDescriptor:
    """Read a descriptor from a yaml or json file"""
    data = yaml.safe_load(smart_read(uri, "r"))
    return DatasetDescriptor.model_validate(data)


def write_obj(obj: BaseModel | dict | None, out: str) -> None:
    if obj is None:
        return
    if isinstance(obj, BaseModel):
        obj = obj.model_dump(mode="json", by_alias=True)
    data = yaml.safe_dump(obj, sort_keys=False)
    if out == "-":
        console.print(data)
    else:
        smart_write(out, data.encode())


class Repository(ErrorHandler):
    def __enter__(self) -> DatasetRepository:
        super().__enter__()
        if not STATE["repository"]:
            builder = STATE["builder"] or RepositoryBuilder()
            STATE["repository"] = builder.build()
        return STATE["repository"]


@cli.callback(invoke_without_command=True)
def cli_cf_datasets(
    version: Annotated[Optional[bool], typer.Option(..., help="Show version")] = False,
    settings: Annotated[
        Optional[bool], typer.Option(..., help="Show current settings")
    ] = False,
    uri: Annotated[str | None, typer.Option(..., help="Backing store uri")] = None,
    endpoint: Annotated[
        str | None, typer.Option(..., help="Coordination endpoint host")
    ] = None,
    port: Annotated[int | None, typer.Option(..., help="Coordination port")] = None,
):
    if version:
        console.print(__version__)
        raise typer.Exit()
    settings_ = Settings()
    configure_logging(level=settings_.log_level)
    builder = RepositoryBuilder(settings_)
    if uri:
        builder.storage(uri)
    if endpoint:
        builder.coordination_endpoint(endpoint)
    if port:
        builder.coordination_port(port)
    STATE["builder"] = builder
    STATE["repository"] = None
    if settings:
        console.print(settings_)
        raise typer.Exit()


@cli.command("create")
def cli_create(
    name: Annotated[str, typer.Argument(help="Dataset name")],
    descriptor: Annotated[str, typer.Argument(help="Descriptor yaml or json uri")],
    out: Annotated[str, typer.Option("-o", help="Output uri")] = "-",
):
    """
    Create a dataset and show its normalized descriptor
    """
    with Repository() as repo:
        dataset = repo.create(name, load_descriptor(descriptor))
        write_obj(dataset.descriptor, out)


@cli.command("update")
def cli_update(
    name: Annotated[str, typer.Argument(help="Dataset name")],
    descriptor: Annotated[str, typer.Argument(help="Descriptor yaml or json uri")],
    out: Annotated[str, typer.Option("-o", help="Output uri")] = "-",
):
    """
    Update the descriptor of an existing dataset
    """
    with Repository() as repo:
        dataset = repo.update(name, load_descriptor(descriptor))
        write_obj(dataset.descriptor, out)


@cli.command("load")
def cli_load(
    name: Annotated[str, typer.Argument(help="Dataset name")],
    out: Annotated[str, typer.Option("-o", help="Output uri")] = "-",
):
    """
    Show dataset uri and (representative) descriptor
    """
    with Repository() as repo:
        dataset = repo.load(name)
        write_obj({"uri": dataset.uri, **dataset.descriptor.dump()}, out)


@cli.command("delete")
def cli_delete(name: Annotated[str, typer.Argument(help="Dataset name")]):
    """
    Delete a dataset schema
    """
    with Repository() as repo:
        console.print(repo.delete(name))


@cli.command("exists")
def cli_exists(name: Annotated[str, typer.Argument(help="Dataset name")]):
    """
    Check if a dataset exists, exits with 1 if not
    """
    with Repository() as repo:
        exists = repo.exists(name)
    console.print(exists)
    if not exists:
        raise typer.Exit(code=1)


@cli.command("list")
def cli_list():
    """
    List datasets (not supported)
    """
    with Repository() as repo:
        console.print(repo.list())


@cli.command("uri")
def cli_uri():
    """
    Show the repository uri
    """
    with Repository() as repo:
        console.print(repo.uri)


@cli.command("get")
def cli_get(
    name: Annotated[str, typer.Argument(help="Dataset name")],
    key: Annotated[list[str], typer.Argument(help="Key values in key field order")],
    out: Annotated[str, typer.Option("-o", help="Output uri")] = "-",
):
    """
    Get a record by key
    """
    with Repository() as repo:
        dataset = repo.load(name, dict)
        record = dataset.get(tuple(key))
    if record is None:
        console.print(f"[yellow]No record for key: {key}[/yellow]")
        raise typer.Exit(code=1)
    write_obj(record, out)


@cli.command("put")
def cli_put(
    name: Annotated[str, typer.Argument(help="Dataset name")],
    in_uri: Annotated[
        str, typer.Option("-i", help="Input uri (json lines), default stdin")
    ] = "-",
):
    """
    Write records from json lines
    """
    with Repository() as repo:
        dataset = repo.load(name)
        count = 0
        for record in smart_stream_json(in_uri):
            dataset.put(record)
            count += 1
        console.print(f"Wrote {count} records to `{dataset.uri}`")
