"""Command line interface for snaptag."""

from __future__ import annotations

import difflib
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator, NoReturn, Sequence

import click
import yaml
from rich.console import Console
from rich.markup import escape
from rich.syntax import Syntax
from rich.table import Table

from snaptag import naming
from snaptag.config import ConfigError, ConfigManager, SnaptagConfig
from snaptag.logging import configure_logging
from snaptag.organization import ImageUpdate, TaggingManager
from snaptag.session import open_session
from snaptag.state import StateError, StateRepository

console = Console()

_IMAGE = click.Path(exists=True, dir_okay=False, path_type=Path)


def _handle_cli_error(
    message: str,
    *,
    code: str,
    json_output: bool,
    details: Any | None = None,
    original: Exception | None = None,
) -> NoReturn:
    """Emit a standardized error and terminate the command.

    Args:
        message: Human-readable error message.
        code: Machine-readable error identifier.
        json_output: Indicates whether JSON mode is active.
        details: Optional structured details to include in the payload.
        original: Original exception for chaining when not using JSON.

    Raises:
        SystemExit: When emitting JSON output.
        click.ClickException: For non-JSON flows.
    """
    if json_output:
        payload: dict[str, Any] = {"error": {"code": code, "message": message}}
        if details is not None:
            payload["error"]["details"] = details
        console.print_json(data=payload)
        raise SystemExit(1)

    if isinstance(original, click.ClickException):
        raise original

    raise click.ClickException(message) from original


def _emit_message(message: Any, *, mode: str = "detail", quiet: bool = False) -> None:
    """Print ``message`` unless quiet mode hides it.

    Args:
        message: Renderable or string to emit.
        mode: Output mode identifier (``detail``, ``warning``, or ``error``).
        quiet: Whether quiet mode is active.
    """
    if quiet and mode != "error":
        return
    console.print(message, soft_wrap=True)


def _load_config(*, json_output: bool) -> SnaptagConfig:
    try:
        return ConfigManager().load()
    except ConfigError as exc:
        _handle_cli_error(str(exc), code="config_error", json_output=json_output, original=exc)


@contextmanager
def _session(*, json_output: bool) -> Iterator[tuple[TaggingManager, SnaptagConfig]]:
    """Open a tagging session for one command and close it afterwards.

    Diagnostic logging is configured from the effective configuration before
    recovery runs, so replay messages land in ``snaptag.log``.
    """
    config = _load_config(json_output=json_output)
    repository = StateRepository(config.storage.state_dir)
    configure_logging(config.logging, repository.diagnostic_log_path)
    try:
        with open_session(config) as manager:
            yield manager, config
    except StateError as exc:
        _handle_cli_error(str(exc), code="state_error", json_output=json_output, original=exc)


def _describe_update(update: ImageUpdate) -> str:
    if update.status == "unchanged":
        return f"[yellow]Unchanged:[/yellow] {escape(update.path.name)}"
    suffix = " [yellow](renamed to avoid a collision)[/yellow]" if update.conflict_applied else ""
    if update.source.parent != update.path.parent:
        return f"[green]Moved[/green] {escape(str(update.source))} -> {escape(str(update.path))}"
    return (
        f"[green]Renamed[/green] {escape(update.source.name)} -> "
        f"{escape(update.path.name)}{suffix}"
    )


def _finish_updates(
    updates: Sequence[ImageUpdate],
    *,
    json_output: bool,
    quiet: bool,
) -> None:
    """Report mutation results and fail the command on the first failure."""
    failure = next((update for update in updates if update.status == "failed"), None)
    if failure is not None:
        _handle_cli_error(
            failure.message or "Operation failed.",
            code=failure.reason or "failed",
            json_output=json_output,
            details={"updates": [update.model_dump(mode="json") for update in updates]},
        )

    if json_output:
        console.print_json(data={"updates": [update.model_dump(mode="json") for update in updates]})
        return
    for update in updates:
        _emit_message(_describe_update(update), quiet=quiet)


def _quiet(flag: bool, config: SnaptagConfig) -> bool:
    return flag or config.cli.quiet_default


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(package_name="snaptag")
def cli() -> None:
    """snaptag stores image tags in file names and keeps a rename history."""


@cli.command("ls")
@click.argument("root", type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.option("--filter", "filters", multiple=True, help="Only list images carrying TAG.")
@click.option("--json", "json_output", is_flag=True, help="Emit JSON instead of a table.")
def list_images(root: Path, filters: tuple[str, ...], json_output: bool) -> None:
    """List the images below ROOT, optionally filtered by tags."""
    with _session(json_output=json_output) as (manager, _config):
        result = manager.change_directory(root)
        for value in filters:
            if not manager.add_tag_filter(value):
                _handle_cli_error(
                    f"Invalid tag filter {value!r}.",
                    code="invalid_tag",
                    json_output=json_output,
                )
        images = manager.image_paths()
        scan_root = manager.current_directory or root

        if json_output:
            payload = {
                "root": str(scan_root),
                "filters": manager.tag_filters(),
                "images": [
                    {
                        "path": str(image),
                        "name": manager.images_name(image),
                        "tags": manager.images_tags(image),
                    }
                    for image in images
                ],
                "errors": result.errors if result is not None else [],
            }
            console.print_json(data=payload)
            return

        table = Table(title=f"Images in {escape(str(scan_root))}")
        table.add_column("Image", overflow="fold")
        table.add_column("Tags", overflow="fold")
        for image in images:
            table.add_row(
                escape(str(image.relative_to(scan_root))),
                escape(", ".join(manager.images_tags(image))),
            )
        console.print(table)
        if result is not None:
            for error in result.errors:
                _emit_message(f"[yellow]Skipped:[/yellow] {escape(error)}", mode="warning")


@cli.group()
def tag() -> None:
    """Add or remove tags on a single image."""


@tag.command("add")
@click.argument("image", type=_IMAGE)
@click.argument("tags", nargs=-1, required=True)
@click.option("--json", "json_output", is_flag=True, help="Emit JSON describing the result.")
@click.option("--quiet", is_flag=True, help="Suppress non-error output.")
def tag_add(image: Path, tags: tuple[str, ...], json_output: bool, quiet: bool) -> None:
    """Add TAGS to IMAGE's file name."""
    with _session(json_output=json_output) as (manager, config):
        updates: list[ImageUpdate] = []
        current = image
        for value in tags:
            update = manager.add_tag_to_image(current, value)
            updates.append(update)
            if update.status == "failed":
                break
            current = update.path
        _finish_updates(updates, json_output=json_output, quiet=_quiet(quiet, config))


@tag.command("rm")
@click.argument("image", type=_IMAGE)
@click.argument("tags", nargs=-1, required=True)
@click.option("--json", "json_output", is_flag=True, help="Emit JSON describing the result.")
@click.option("--quiet", is_flag=True, help="Suppress non-error output.")
def tag_rm(image: Path, tags: tuple[str, ...], json_output: bool, quiet: bool) -> None:
    """Remove TAGS from IMAGE's file name."""
    with _session(json_output=json_output) as (manager, config):
        updates: list[ImageUpdate] = []
        current = image
        for value in tags:
            update = manager.remove_tag_from_image(current, value)
            updates.append(update)
            if update.status == "failed":
                break
            current = update.path
        _finish_updates(updates, json_output=json_output, quiet=_quiet(quiet, config))


@cli.command()
@click.argument("image", type=_IMAGE)
@click.argument("name")
@click.option("--json", "json_output", is_flag=True, help="Emit JSON describing the result.")
@click.option("--quiet", is_flag=True, help="Suppress non-error output.")
def rename(image: Path, name: str, json_output: bool, quiet: bool) -> None:
    """Give IMAGE a new base NAME, keeping its tags and extension."""
    with _session(json_output=json_output) as (manager, config):
        update = manager.rename_image(image, name)
        _finish_updates([update], json_output=json_output, quiet=_quiet(quiet, config))


@cli.command()
@click.argument("image", type=_IMAGE)
@click.argument("directory", type=click.Path(file_okay=False, path_type=Path))
@click.option("--json", "json_output", is_flag=True, help="Emit JSON describing the result.")
@click.option("--quiet", is_flag=True, help="Suppress non-error output.")
def mv(image: Path, directory: Path, json_output: bool, quiet: bool) -> None:
    """Move IMAGE into DIRECTORY, creating it when needed."""
    with _session(json_output=json_output) as (manager, config):
        update = manager.move_image(image, directory)
        _finish_updates([update], json_output=json_output, quiet=_quiet(quiet, config))


@cli.command()
@click.argument("image", type=_IMAGE)
@click.argument("full_name")
@click.option("--json", "json_output", is_flag=True, help="Emit JSON describing the result.")
@click.option("--quiet", is_flag=True, help="Suppress non-error output.")
def revert(image: Path, full_name: str, json_output: bool, quiet: bool) -> None:
    """Rename IMAGE back to FULL_NAME, one of its former names."""
    with _session(json_output=json_output) as (manager, config):
        update = manager.revert_to_old_name(image, full_name)
        _finish_updates([update], json_output=json_output, quiet=_quiet(quiet, config))


@cli.command()
@click.argument("image", type=_IMAGE)
@click.option("--json", "json_output", is_flag=True, help="Emit JSON instead of text.")
def history(image: Path, json_output: bool) -> None:
    """Show IMAGE's former names, oldest first."""
    with _session(json_output=json_output) as (manager, _config):
        names = manager.images_history(image)
        if json_output:
            console.print_json(data={"image": str(image), "history": names})
            return
        if not names:
            _emit_message(f"[yellow]No rename history for {escape(image.name)}.[/yellow]")
            return
        for position, name in enumerate(names, start=1):
            _emit_message(f"{position}. {escape(name)}")


@cli.group()
def vocab() -> None:
    """Inspect and edit the tag vocabulary."""


@vocab.command("list")
@click.option("--contains", "must_contain", default="", help="Only tags containing this text.")
@click.option("--exclude", "excluded", multiple=True, help="Tag to leave out of the listing.")
@click.option("--json", "json_output", is_flag=True, help="Emit JSON instead of text.")
def vocab_list(must_contain: str, excluded: tuple[str, ...], json_output: bool) -> None:
    """List known tags in case-insensitive order."""
    with _session(json_output=json_output) as (manager, _config):
        tags = manager.vocabulary_tags(exclude=excluded, must_contain=must_contain)
        if json_output:
            console.print_json(data={"tags": tags})
            return
        for value in tags:
            _emit_message(escape(value))


@vocab.command("add")
@click.argument("tags", nargs=-1, required=True)
@click.option("--quiet", is_flag=True, help="Suppress non-error output.")
def vocab_add(tags: tuple[str, ...], quiet: bool) -> None:
    """Add TAGS to the vocabulary without tagging any image."""
    with _session(json_output=False) as (manager, config):
        quiet = _quiet(quiet, config)
        invalid: list[str] = []
        for value in tags:
            if manager.add_vocabulary_tag(value):
                _emit_message(f"[green]Added {escape(value)}.[/green]", quiet=quiet)
            elif naming.is_valid_tag(value):
                _emit_message(f"[yellow]{escape(value)} is already known.[/yellow]", quiet=quiet)
            else:
                invalid.append(value)
        if invalid:
            _handle_cli_error(
                f"Invalid tag(s): {', '.join(invalid)}. Tags may only contain letters and digits.",
                code="invalid_tag",
                json_output=False,
            )


@vocab.command("rm")
@click.argument("tag_name", metavar="TAG")
@click.option(
    "--purge",
    is_flag=True,
    help="Also strip TAG, in any letter case, from every tracked image.",
)
@click.option("--quiet", is_flag=True, help="Suppress non-error output.")
def vocab_rm(tag_name: str, purge: bool, quiet: bool) -> None:
    """Remove TAG from the vocabulary."""
    with _session(json_output=False) as (manager, config):
        quiet = _quiet(quiet, config)
        if purge:
            updates = manager.purge_tag(tag_name)
            if updates is None:
                _handle_cli_error(
                    f"Tag {tag_name!r} is not in the vocabulary.",
                    code="unknown_tag",
                    json_output=False,
                )
            for update in updates:
                if update.status == "failed":
                    _emit_message(
                        f"[red]Failed:[/red] {escape(update.message or str(update.source))}",
                        mode="error",
                    )
                else:
                    _emit_message(_describe_update(update), quiet=quiet)
            _emit_message(f"[green]Purged {escape(tag_name)}.[/green]", quiet=quiet)
            return
        if not manager.remove_vocabulary_tag(tag_name):
            _handle_cli_error(
                f"Tag {tag_name!r} is not in the vocabulary.",
                code="unknown_tag",
                json_output=False,
            )
        _emit_message(f"[green]Removed {escape(tag_name)}.[/green]", quiet=quiet)


@cli.command()
def log() -> None:
    """Print the audit log of renames, moves, and tag edits."""
    with _session(json_output=False) as (manager, _config):
        text = manager.read_audit_log()
        if not text:
            _emit_message("[yellow]The audit log is empty.[/yellow]")
            return
        console.print(text.rstrip("\n"), markup=False, highlight=False, soft_wrap=True)


@cli.group()
def config() -> None:
    """Manage snaptag configuration files and overrides."""


@config.command("view")
@click.option("--no-env", is_flag=True, help="Ignore environment overrides when displaying output.")
def config_view(no_env: bool) -> None:
    """Display the effective configuration after applying precedence rules."""
    manager = ConfigManager()
    try:
        manager.ensure_exists()
        effective = manager.load(include_env=not no_env)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    yaml_text = yaml.safe_dump(effective.model_dump(mode="python"), sort_keys=False)
    console.print(Syntax(yaml_text, "yaml", word_wrap=True))


@config.command("set")
@click.argument("key")
@click.option("--value", required=True, help="YAML literal to assign to KEY.")
def config_set(key: str, value: str) -> None:
    """Persist a configuration value under the dotted KEY."""
    manager = ConfigManager()
    before = manager.read_text().splitlines()
    try:
        manager.set_value(key, value)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    after = manager.read_text().splitlines()
    diff = [
        line
        for line in difflib.unified_diff(
            before,
            after,
            fromfile="config.yaml (before)",
            tofile="config.yaml (after)",
            lineterm="",
        )
        if not line.startswith(("-# Last updated", "+# Last updated"))
    ]
    if diff:
        console.print(Syntax("\n".join(diff), "diff", word_wrap=False))
    console.print(f"[green]Updated {escape(key)}.[/green]")


def main() -> None:
    """Invoke the Click CLI as the console script entry point."""
    cli()


if __name__ == "__main__":
    main()
