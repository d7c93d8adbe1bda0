"""fileheads CLI — inspect and edit a file-backed head store.

Commands:
    fileheads init               create the store directory
    fileheads add KEY...         mark keys as heads
    fileheads remove KEY...      unmark keys (missing keys are fine)
    fileheads check KEY          exit 0 if KEY is a head, 1 otherwise
    fileheads list               print every head, one per line
"""

from __future__ import annotations

import logging
from typing import Any, Dict

import click

from fileheads.errors import FileHeadsError
from fileheads.store import ENV_DIR, FileHeads

KEY_TYPES: Dict[str, Any] = {"str": str, "int": int}

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _open_store(ctx: click.Context, *, create: bool = False) -> FileHeads[Any]:
    opts = ctx.obj
    factory = FileHeads.create if create else FileHeads.open
    try:
        return factory(opts["dir"], key_type=KEY_TYPES[opts["key_type"]])
    except FileHeadsError as exc:
        raise click.ClickException(str(exc)) from exc


def _convert_key(ctx: click.Context, raw: str) -> Any:
    key_type = KEY_TYPES[ctx.obj["key_type"]]
    try:
        return key_type(raw)
    except ValueError as exc:
        raise click.BadParameter(f"{raw!r} is not a valid {ctx.obj['key_type']} key") from exc


# ---------------------------------------------------------------------------
# Root group
# ---------------------------------------------------------------------------


@click.group()
@click.option(
    "--dir",
    "store_dir",
    envvar=ENV_DIR,
    required=True,
    type=click.Path(file_okay=False),
    help=f"Store directory (default: ${ENV_DIR})",
)
@click.option(
    "--key-type",
    type=click.Choice(sorted(KEY_TYPES)),
    default="str",
    show_default=True,
    help="Type the stored keys decode to",
)
@click.option("-v", "--verbose", is_flag=True, help="Log filesystem dispatches")
@click.pass_context
def cli(ctx: click.Context, store_dir: str, key_type: str, verbose: bool) -> None:
    """fileheads — file-backed head store."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    ctx.obj = {"dir": store_dir, "key_type": key_type}


@cli.command()
@click.pass_context
def init(ctx: click.Context) -> None:
    """Create the store directory if it does not exist."""
    with _open_store(ctx, create=True) as store:
        click.echo(f"Store ready at {store.base}")


@cli.command()
@click.argument("keys", nargs=-1, required=True)
@click.pass_context
def add(ctx: click.Context, keys: tuple[str, ...]) -> None:
    """Mark KEYS as heads."""
    parsed = [_convert_key(ctx, k) for k in keys]
    with _open_store(ctx) as store:
        pending = [store.add(k) for k in parsed]
        try:
            for fut in pending:
                fut.result()
        except FileHeadsError as exc:
            raise click.ClickException(str(exc)) from exc
    click.echo(f"Added {len(parsed)} head(s)")


@cli.command()
@click.argument("keys", nargs=-1, required=True)
@click.pass_context
def remove(ctx: click.Context, keys: tuple[str, ...]) -> None:
    """Unmark KEYS. Keys that are not heads are ignored."""
    parsed = [_convert_key(ctx, k) for k in keys]
    with _open_store(ctx) as store:
        pending = [store.remove(k) for k in parsed]
        try:
            for fut in pending:
                fut.result()
        except FileHeadsError as exc:
            raise click.ClickException(str(exc)) from exc
    click.echo(f"Removed {len(parsed)} head(s)")


@cli.command()
@click.argument("key")
@click.pass_context
def check(ctx: click.Context, key: str) -> None:
    """Exit with status 0 if KEY is a head, 1 otherwise."""
    parsed = _convert_key(ctx, key)
    with _open_store(ctx) as store:
        try:
            present = store.is_head(parsed).result()
        except FileHeadsError as exc:
            raise click.ClickException(str(exc)) from exc
    click.echo("yes" if present else "no")
    ctx.exit(0 if present else 1)


@cli.command("list")
@click.option("--sorted", "sort_keys", is_flag=True, help="Sort output")
@click.option("--skip-invalid", is_flag=True, help="Skip undecodable head files instead of failing")
@click.pass_context
def list_heads(ctx: click.Context, sort_keys: bool, skip_invalid: bool) -> None:
    """Print every head, one per line."""
    with _open_store(ctx) as store:
        try:
            keys = list(store.heads(on_decode_error="skip" if skip_invalid else "raise"))
        except FileHeadsError as exc:
            raise click.ClickException(str(exc)) from exc
    if sort_keys:
        keys.sort()
    for k in keys:
        click.echo(str(k))


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
