from __future__ import annotations

import logging
import pathlib
from enum import Enum
from typing import Dict, Optional

import typer
import structlog
from rich.console import Console
from rich.table import Table

from .config import load_config, FinidentConfig
from .engine.loader import build_registries, default_registries
from .engine.registry import CountryRegistry
from .engine.validator import IdentifierValidator
from .errors import ValidationResult
from .identifiers.bic import parse_bic, validate_bic
from .identifiers.iban import format_iban, parse_iban, validate_iban
from .identifiers.references import generate_rf, parse_rf, validate_rf

console = Console()
log = structlog.get_logger()
app = typer.Typer(add_completion=False, no_args_is_help=True, help="finident: validate financial identifiers")
rf_app = typer.Typer(no_args_is_help=True, help="ISO 11649 creditor references")
app.add_typer(rf_app, name="rf")


class Kind(str, Enum):
    iban = "iban"
    bban = "bban"
    national_id = "national_id"
    vat = "vat"
    bank_routing = "bank_routing"
    payment_reference = "payment_reference"


def version_callback(value: bool):
    if value:
        from . import __version__
        console.print(f"finident {__version__}")
        raise typer.Exit()


@app.callback()
def common(
    ctx: typer.Context,
    config: Optional[pathlib.Path] = typer.Option(None, "--config", help="Path to finident.yaml"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logs"),
    version: Optional[bool] = typer.Option(None, "--version", callback=version_callback, is_eager=True),
):
    """Global options (config, verbosity)."""
    cfg = load_config(config) if config else FinidentConfig()
    level = logging.DEBUG if verbose else getattr(logging, cfg.log_level)
    structlog.configure(
        processors=[structlog.processors.add_log_level, structlog.processors.JSONRenderer()],
        wrapper_class=structlog.make_filtering_bound_logger(level),
    )
    ctx.obj = {
        "config": cfg,
        "custom": config is not None,
        "validator": IdentifierValidator(max_input_length=cfg.limits.max_input_length),
    }
    if verbose:
        log.info("verbose_enabled")


def _registries(ctx: typer.Context) -> Dict[str, CountryRegistry]:
    obj = ctx.obj
    if "registries" not in obj:
        obj["registries"] = build_registries(obj["config"]) if obj["custom"] else default_registries()
    return obj["registries"]


def _registry(ctx: typer.Context, kind: Kind) -> CountryRegistry:
    registries = _registries(ctx)
    if kind.value not in registries:
        console.print(f"[red]identifier kind {kind.value!r} is disabled in the config[/red]")
        raise typer.Exit(code=2)
    return registries[kind.value]


def _report(result: ValidationResult) -> None:
    if result.is_valid:
        console.print("[green]valid[/green]")
        return
    console.print(f"[red]{result.error_code.value}[/red]: {result.message}", highlight=False)
    raise typer.Exit(code=1)


def _fields_table(title: str, fields: Dict[str, str]) -> Table:
    table = Table(title=title)
    table.add_column("field")
    table.add_column("value")
    for name, value in fields.items():
        table.add_row(name, value)
    return table


@app.command()
def validate(
    ctx: typer.Context,
    kind: Kind = typer.Argument(..., help="Identifier kind", case_sensitive=False),
    country: str = typer.Argument(..., help="ISO 3166 country code"),
    value: str = typer.Argument(..., help="Identifier to check (quote it if it has spaces)"),
):
    """Validate an identifier of KIND for COUNTRY."""
    _report(_registry(ctx, kind).validate(country, value))


@app.command()
def parse(
    ctx: typer.Context,
    kind: Kind = typer.Argument(..., help="Identifier kind", case_sensitive=False),
    country: str = typer.Argument(..., help="ISO 3166 country code"),
    value: str = typer.Argument(..., help="Identifier to parse"),
):
    """Validate, then print the identifier's fields."""
    registry = _registry(ctx, kind)
    details = registry.parse(country, value)
    if details is None:
        _report(registry.validate(country, value))
        return
    console.print(_fields_table(f"{kind.value} {details.country_code}", dict(details.fields)))


@app.command()
def iban(ctx: typer.Context, value: str = typer.Argument(..., help="IBAN, spaces allowed")):
    """Validate an IBAN; the country is read from its first two letters."""
    registry = _registries(ctx).get("iban")
    if registry is None:
        console.print("[red]IBAN rules are disabled in the config[/red]")
        raise typer.Exit(code=2)
    result = validate_iban(value, registry)
    if not result.is_valid:
        _report(result)
    details = parse_iban(value, registry)
    console.print(f"[green]valid[/green] {format_iban(details.iban)}", highlight=False)
    console.print(_fields_table(details.country_code, dict(details.fields)))


@app.command()
def bic(ctx: typer.Context, value: str = typer.Argument(..., help="8 or 11 character BIC")):
    """Validate a BIC (ISO 9362)."""
    validator = ctx.obj["validator"]
    result = validate_bic(value, validator)
    if not result.is_valid:
        _report(result)
    details = parse_bic(value, validator)
    console.print(
        f"[green]valid[/green] bank={details.bank_code} country={details.country_code} "
        f"location={details.location_code} branch={details.branch_code}",
        highlight=False,
    )


@app.command()
def countries(ctx: typer.Context, kind: Optional[Kind] = typer.Argument(None, help="Limit to one identifier kind")):
    """List supported countries per identifier kind."""
    registries = _registries(ctx)
    kinds = [kind.value] if kind else list(registries)
    for k in kinds:
        registry = registries.get(k)
        if registry is None:
            continue
        table = Table(title=f"{k} ({len(registry)})")
        table.add_column("code")
        table.add_column("name")
        table.add_column("length")
        for entry in registry:
            table.add_row(entry.country_code, entry.name, "/".join(str(n) for n in entry.lengths))
        console.print(table)


@rf_app.command("generate")
def rf_generate(content: str = typer.Argument(..., help="Reference content, up to 21 letters/digits")):
    """Create an RF creditor reference."""
    try:
        reference = generate_rf(content)
    except ValueError as e:
        console.print(f"[red]{e}[/red]", highlight=False)
        raise typer.Exit(code=1)
    console.print(reference, highlight=False)


@rf_app.command("check")
def rf_check(ctx: typer.Context, value: str = typer.Argument(..., help="RF reference, spaces allowed")):
    """Validate an RF creditor reference."""
    validator = ctx.obj["validator"]
    result = validate_rf(value, validator)
    if not result.is_valid:
        _report(result)
    details = parse_rf(value, validator)
    console.print(f"[green]valid[/green] {details.formatted}", highlight=False)
