"""Typer-based CLI for the Publit production API with Pydantic v2 configuration."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Optional

import httpx
import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from Publit.Production.batch import FileBatch
from Publit.Production.client import APIClient, build_http_client
from Publit.Production.config import ProductionConfig, load_config
from Publit.Production.errors import ProductionAPIError
from Publit.Production.query import limit, merge, with_relations
from Publit.Production.resources import country, deliverynumber, file, printorder, printorderstatus

console = Console()
app = typer.Typer(help="Publit production API client")

ConfigOption = typer.Option(
    None, "--config", "-c", help="Path to YAML/JSON config file", envvar="PUBLIT_CONFIG"
)
VerboseOption = typer.Option(False, "-v", "--verbose", help="Verbose")

# ============================================================================
# Setup
# ============================================================================


def _setup_logging(verbose: bool) -> None:
    """Setup logging based on verbosity."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def _load(config: Optional[str], overrides: Optional[dict[str, Any]] = None) -> ProductionConfig:
    return load_config(path=config, cli_overrides=overrides)


def build_client(cfg: ProductionConfig) -> APIClient:
    return APIClient.from_config(cfg)


def build_download_client(cfg: ProductionConfig) -> httpx.Client:
    return build_http_client(cfg.http)


def _fail(exc: Exception, verbose: bool) -> None:
    console.print(f"[red]✗ Error: {escape(str(exc))}[/red]")
    if verbose:
        raise exc
    raise typer.Exit(code=1)


# ============================================================================
# Commands
# ============================================================================


@app.command()
def status(config: Optional[str] = ConfigOption, verbose: bool = VerboseOption) -> None:
    """Check whether the Publit service is up."""
    _setup_logging(verbose)
    try:
        with build_client(_load(config)) as client:
            ok = client.status_check()
    except (ProductionAPIError, ValueError) as e:
        _fail(e, verbose)
        return

    if ok:
        console.print("[green]✓ Service is up[/green]")
    else:
        console.print("[red]✗ Service is not responding[/red]")
        raise typer.Exit(code=1)


@app.command("print-config")
def print_config(config: Optional[str] = ConfigOption) -> None:
    """Print the merged configuration (credentials masked)."""
    try:
        cfg = _load(config)
    except ValueError as e:
        _fail(e, False)
        return
    console.print(json.dumps(cfg.model_dump(mode="json"), indent=2))
    console.print(f"Hash: {cfg.config_hash()[:8]}...")


@app.command()
def download(
    file_ids: list[int] = typer.Argument(..., help="File ids to download"),
    dest: Path = typer.Option(..., "--dest", "-d", help="Existing output directory"),
    workers: Optional[int] = typer.Option(None, "--workers", help="Number of parallel workers"),
    config: Optional[str] = ConfigOption,
    verbose: bool = VerboseOption,
) -> None:
    """Resolve presigned URLs for files and download them into DEST."""
    _setup_logging(verbose)
    overrides = {"batch": {"workers": workers}} if workers is not None else None
    try:
        cfg = _load(config, overrides)
        files = [file.File(id=fid) for fid in file_ids]
        with build_client(cfg) as client, build_download_client(cfg) as download_client:
            batch = FileBatch(client, settings=cfg.batch, download_client=download_client)
            # files is updated in place with resolved copies (names included)
            errors = batch.download_files(files, dest)
    except (ProductionAPIError, ValueError) as e:
        _fail(e, verbose)
        return

    table = Table(title="Downloads")
    table.add_column("File")
    table.add_column("Name")
    table.add_column("Result")
    names = {f.id: f.original_name for f in files}
    for fid in file_ids:
        err = errors.get(fid)
        result = "[green]ok[/green]" if err is None else f"[red]{escape(str(err))}[/red]"
        table.add_row(str(fid), names.get(fid, ""), result)
    console.print(table)

    failed = sum(1 for err in errors.values() if err is not None)
    if failed:
        console.print(f"[red]✗ {failed} of {len(errors)} file(s) failed[/red]")
        raise typer.Exit(code=1)
    console.print(f"[green]✓ Downloaded {len(errors)} file(s) to {dest}[/green]")


@app.command("show-order")
def show_order(
    order_id: int = typer.Argument(..., help="Print order id"),
    relations: list[str] = typer.Option([], "--with", help="Relations to load"),
    config: Optional[str] = ConfigOption,
    verbose: bool = VerboseOption,
) -> None:
    """Show a print order as JSON."""
    _setup_logging(verbose)
    try:
        with build_client(_load(config)) as client:
            params = with_relations(*relations) if relations else None
            order = printorder.show(client, order_id, params)
    except (ProductionAPIError, httpx.HTTPError, ValueError) as e:
        _fail(e, verbose)
        return
    console.print(json.dumps(order.model_dump(mode="json", by_alias=True), indent=2))


@app.command("set-status")
def set_status(
    order_id: int = typer.Argument(..., help="Print order id"),
    state: str = typer.Argument(..., help='New state, e.g. "In production"'),
    message: str = typer.Option("", "--message", "-m", help="Optional message"),
    config: Optional[str] = ConfigOption,
    verbose: bool = VerboseOption,
) -> None:
    """Report a new print order status to Publit."""
    _setup_logging(verbose)
    try:
        new_state = printorderstatus.State.parse(state)
        with build_client(_load(config)) as client:
            saved = printorderstatus.store(
                client, printorderstatus.new(new_state, order_id, message)
            )
    except (ProductionAPIError, httpx.HTTPError, ValueError) as e:
        _fail(e, verbose)
        return
    console.print(
        Panel(
            f"[bold green]✓ Status stored[/bold green]\n"
            f"Order: {saved.print_order_id}\n"
            f"Status: {saved.status}",
            title="Print order status",
        )
    )


@app.command("add-delivery-number")
def add_delivery_number(
    order_id: int = typer.Argument(..., help="Print order id"),
    number: str = typer.Argument(..., help="Delivery (tracking) number"),
    message: str = typer.Option("", "--message", "-m", help="Optional message"),
    config: Optional[str] = ConfigOption,
    verbose: bool = VerboseOption,
) -> None:
    """Store a delivery number for a print order."""
    _setup_logging(verbose)
    try:
        with build_client(_load(config)) as client:
            saved = deliverynumber.store(
                client, deliverynumber.new(order_id, number, message)
            )
    except (ProductionAPIError, httpx.HTTPError, ValueError) as e:
        _fail(e, verbose)
        return
    console.print(f"[green]✓ Delivery number {saved.delivery_number} stored (id {saved.id})[/green]")


@app.command()
def countries(
    count: int = typer.Option(300, "--limit", help="Maximum number of countries"),
    config: Optional[str] = ConfigOption,
    verbose: bool = VerboseOption,
) -> None:
    """List countries."""
    _setup_logging(verbose)
    try:
        with build_client(_load(config)) as client:
            page = country.index(client, merge(limit(count)))
    except (ProductionAPIError, httpx.HTTPError, ValueError) as e:
        _fail(e, verbose)
        return

    table = Table(title=f"Countries ({page.count})")
    table.add_column("ID")
    table.add_column("Name")
    table.add_column("ISO2")
    table.add_column("ISO3")
    for c in page.data:
        table.add_row(str(c.id), c.name, c.iso2, c.iso3)
    console.print(table)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
