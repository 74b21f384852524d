"""Typer CLI entrypoint."""

from __future__ import annotations

import contextlib
import logging
import sys
from collections.abc import Iterator
from pathlib import Path

import click
import typer
from typer.core import TyperCommand

from edidrandr.core.errors import EdidRandrError, StrictMatchFailure
from edidrandr.core.matcher import diagnose_output
from edidrandr.core.profile_loader import load_profiles, require_profile
from edidrandr.core.service import RandrService
from edidrandr.core.specs import CONFIG, SERIAL, collect_specs, merge_specs, split_tokens

app = typer.Typer(help="Configure xrandr outputs by EDID substring (e.g. monitor serial numbers)")
_RAW_ARGS = "edidrandr.raw_args"


@contextlib.contextmanager
def _stderr_logging(verbose: bool) -> Iterator[None]:
    logger = logging.getLogger("edidrandr")
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(message)s"))
    previous_level = logger.level
    previous_propagate = logger.propagate
    logger.addHandler(handler)
    logger.propagate = False
    logger.setLevel(logging.INFO if verbose else logging.WARNING)
    try:
        yield
    finally:
        logger.removeHandler(handler)
        logger.setLevel(previous_level)
        logger.propagate = previous_propagate


class OrderedFlagsCommand(TyperCommand):
    """Command that keeps its raw arguments for order-sensitive options."""

    def parse_args(self, ctx: click.Context, args: list[str]) -> list[str]:
        # The parser consumes ``args`` in place.
        ctx.meta[_RAW_ARGS] = list(args)
        return super().parse_args(ctx, args)


def _ordered_flags(ctx: click.Context, wanted: dict[str, str]) -> list[tuple[str, str]]:
    """Values of the options named in ``wanted``, in command-line order."""
    options: dict[str, click.Option] = {}
    for param in ctx.command.get_params(ctx):
        if isinstance(param, click.Option):
            for opt in (*param.opts, *param.secondary_opts):
                options[opt] = param

    events: list[tuple[str, str]] = []
    tokens = list(ctx.meta.get(_RAW_ARGS, ()))
    while tokens:
        token = tokens.pop(0)
        if token == "--":
            break
        if token.startswith("--"):
            name, sep, value = token.partition("=")
            param = options.get(name)
            if param is None or param.is_flag:
                continue
            if not sep:
                value = tokens.pop(0) if tokens else ""
            if param.name in wanted:
                events.append((wanted[param.name], value))
        elif token.startswith("-") and len(token) > 1:
            # Short options may be clustered ("-nv") or carry their value ("-sABC1").
            for index in range(1, len(token)):
                param = options.get(f"-{token[index]}")
                if param is None or param.is_flag:
                    continue
                value = token[index + 1:] or (tokens.pop(0) if tokens else "")
                if param.name in wanted:
                    events.append((wanted[param.name], value))
                break
    return events


def _read_status_file(status_file: Path | None) -> str | None:
    if status_file is None:
        return None
    try:
        return status_file.read_text(encoding="utf-8")
    except OSError as exc:
        typer.echo(f"Error: could not read status file {status_file}: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("apply", cls=OrderedFlagsCommand)
def apply(
    ctx: typer.Context,
    serial: list[str] | None = typer.Option(
        None, "--serial", "-s", help="Serial of an output for which --config follows"
    ),
    config: list[str] | None = typer.Option(
        None, "--config", "-c", help="Config for output with previously specified serial"
    ),
    default_config: str | None = typer.Option(
        None, "--default-config", "-d", help="Default config for non-matching outputs, by default --off."
    ),
    prefix: str | None = typer.Option(
        None, "--prefix", "-p", help="Prefix config before any outputs, by default empty."
    ),
    all_or_abort: bool | None = typer.Option(
        None, "--all-or-abort/--no-all-or-abort", "-a", help="Match all configured or abort, by default false."
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose operation."),
    dry_run: bool = typer.Option(False, "--dry-run", "-n", help="Dry run. Evaluate, don't apply."),
    profile: str | None = typer.Option(None, "--profile", help="Named profile from the profiles directory"),
    status_file: Path | None = typer.Option(
        None, "--status-file", help="Parse a saved 'xrandr --prop' dump instead of querying xrandr"
    ),
) -> None:
    """Match outputs against serials and apply the resulting xrandr layout."""
    try:
        # A --config binds to the --serial before it; click keeps no order across options.
        specs = collect_specs(_ordered_flags(ctx, {"serial": SERIAL, "config": CONFIG}))
        default_tokens: tuple[str, ...] = ("--off",)
        prefix_tokens: tuple[str, ...] = ()
        strict = False

        if profile is not None:
            loaded = load_profiles()
            for warning in loaded.warnings:
                typer.echo(f"Warning: {warning}", err=True)
            chosen = require_profile(loaded, profile)
            specs = merge_specs(specs, chosen.specs)
            default_tokens = chosen.default_tokens or default_tokens
            prefix_tokens = chosen.prefix if chosen.prefix is not None else prefix_tokens
            strict = bool(chosen.all_or_abort)

        if default_config is not None:
            default_tokens = split_tokens(default_config)
        if prefix is not None:
            prefix_tokens = split_tokens(prefix)
        if all_or_abort is not None:
            strict = all_or_abort

        if not specs and not dry_run:
            typer.echo(
                "No config specified, forcing verbose (for debug) and dry run "
                "(to avoid killing your X session).",
                err=True,
            )
            dry_run = True
            verbose = True

        if verbose:
            typer.echo("Parsed config:", err=True)
            for key, tokens in specs.items():
                typer.echo(f"  {key}: {' '.join(tokens)}", err=True)
            typer.echo(f"  default config: {' '.join(default_tokens)}", err=True)
            typer.echo(f"  prefix: {' '.join(prefix_tokens)}", err=True)
            typer.echo(f"  all or abort: {strict}", err=True)

        status_text = _read_status_file(status_file)
        service = RandrService()
        with _stderr_logging(verbose):
            try:
                tokens = service.build_command(
                    specs,
                    default_tokens,
                    prefix_tokens,
                    strict,
                    verbose=verbose,
                    status_text=status_text,
                )
            except StrictMatchFailure as exc:
                typer.echo(f"Error: {exc} (all serials: {', '.join(specs)})", err=True)
                raise typer.Exit(code=1) from None

            if dry_run:
                typer.echo("# dry run mode, would run:")
                typer.echo(service.render_command(tokens))
                return

            if verbose:
                typer.echo(f"Running {service.xrandr} with: {tokens}", err=True)
            returncode = service.apply(tokens)
        if returncode != 0:
            raise typer.Exit(code=returncode)
    except EdidRandrError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("outputs")
def list_outputs(
    status_file: Path | None = typer.Option(
        None, "--status-file", help="Parse a saved 'xrandr --prop' dump instead of querying xrandr"
    ),
) -> None:
    """List discovered outputs with their EDID strings and current config."""
    try:
        service = RandrService()
        outputs = service.discover(_read_status_file(status_file))
        if not outputs:
            typer.echo("No outputs found")
            return

        layout = service.current_layout()
        for output in outputs:
            diagnostics = diagnose_output(output, layout)
            screen = "?" if output.screen is None else output.screen
            typer.echo(f"{output.name} ({output.connection}) @ screen {screen}")
            typer.echo(f"  EDID strings: {diagnostics.edid_strings}")
            typer.echo(f"  current config: {diagnostics.current_config}")
    except EdidRandrError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("profiles")
def list_profiles() -> None:
    """List configured profiles."""
    try:
        loaded = load_profiles()
        for warning in loaded.warnings:
            typer.echo(f"Warning: {warning}", err=True)
        if not loaded.profiles:
            typer.echo("No profiles configured")
            return

        for name, profile in sorted(loaded.profiles.items()):
            strict = " (all or abort)" if profile.all_or_abort else ""
            typer.echo(f"{name}{strict}")
            for serial, tokens in profile.specs.items():
                typer.echo(f"  {serial}: {' '.join(tokens)}")
    except EdidRandrError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


def run() -> None:
    app()


if __name__ == "__main__":
    run()
