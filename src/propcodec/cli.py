"""CLI entry point for working with .properties files."""

import logging
from pathlib import Path
from typing import Optional

import click

from . import __version__
from .config import DEFAULT_ENCODING, LINE_ENDINGS, WriteOptions
from .diff import ChangeType, DiffDetector
from .errors import PropertiesError
from .properties import Properties, PropertiesParser


def _fail(message: str):
    click.secho(f"Error: {message}", fg='red', err=True)
    raise SystemExit(1)


def encoding_option(f):
    return click.option(
        '--encoding',
        default=DEFAULT_ENCODING,
        show_default=True,
        help='Byte encoding of the .properties file'
    )(f)


def write_options(f):
    """Attach the options that control how entries are written."""
    f = click.option('--sort-keys', is_flag=True, help='Write entries in sorted key order')(f)
    f = click.option('--comment', default='', help='Comment block written before the entries')(f)
    f = click.option(
        '--line-ending',
        type=click.Choice(sorted(LINE_ENDINGS), case_sensitive=False),
        default='lf',
        show_default=True,
        help='Line terminator written after every line'
    )(f)
    f = click.option('--escape-unicode', is_flag=True, help='Write non-ASCII characters as \\uXXXX escapes')(f)
    return f


def _build_options(escape_unicode: bool, line_ending: str, comment: str, sort_keys: bool) -> WriteOptions:
    return WriteOptions.from_names(
        line_ending=line_ending,
        comments=comment,
        escape_unicode=escape_unicode,
        sort_keys=sort_keys
    )


def _load(file: Path, encoding: str) -> Properties:
    try:
        return Properties.from_file(file, encoding=encoding)
    except PropertiesError as e:
        _fail(f"{file}: {e}")


def _store(props: Properties, file: Path, options: WriteOptions) -> None:
    try:
        props.store_file(file, options)
    except PropertiesError as e:
        _fail(f"{file}: {e}")


@click.group()
@click.version_option(version=__version__)
@click.option('--verbose', '-v', is_flag=True, help='Log parsing details to stderr')
def cli(verbose: bool):
    """Read, edit and convert Java .properties files."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format='%(levelname)s %(name)s: %(message)s'
        )


@cli.command()
@click.argument('file', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@encoding_option
def parse(file: Path, encoding: str):
    """Parse and display entries from a .properties file.

    Every logical line is listed in file order, duplicates included.
    """
    parser = PropertiesParser(encoding=encoding)
    try:
        entries = parser.parse_file(file)
    except PropertiesError as e:
        _fail(f"{file}: {e}")

    if not entries:
        click.secho("No entries found.", fg='yellow')
        return

    click.echo(f"Entries ({len(entries)} total):\n")
    for entry in entries:
        click.echo(entry.to_properties_format())


@cli.command()
@click.argument('file', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument('key')
@encoding_option
def get(file: Path, key: str, encoding: str):
    """Print the value of KEY from FILE."""
    props = _load(file, encoding)
    value = props.get(key)
    if value is None:
        _fail(f"Key not found: {key}")
    click.echo(value)


@cli.command(name='set')
@click.argument('file', type=click.Path(dir_okay=False, path_type=Path))
@click.argument('key')
@click.argument('value')
@encoding_option
@write_options
def set_command(
    file: Path,
    key: str,
    value: str,
    encoding: str,
    escape_unicode: bool,
    line_ending: str,
    comment: str,
    sort_keys: bool
):
    """Set KEY to VALUE in FILE, creating the file if needed."""
    props = _load(file, encoding) if file.exists() else Properties(encoding=encoding)
    previous = props.get(key)
    props.set(key, value)
    _store(props, file, _build_options(escape_unicode, line_ending, comment, sort_keys))

    if previous is None:
        click.secho(f"  + {key}", fg='green')
    else:
        click.secho(f"  ~ {key}", fg='yellow')


@cli.command()
@click.argument('file', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument('keys', nargs=-1, required=True)
@encoding_option
@write_options
def unset(
    file: Path,
    keys: tuple[str, ...],
    encoding: str,
    escape_unicode: bool,
    line_ending: str,
    comment: str,
    sort_keys: bool
):
    """Remove KEYS from FILE."""
    props = _load(file, encoding)
    missing = [key for key in keys if key not in props]
    props.update({}, removals=keys)
    _store(props, file, _build_options(escape_unicode, line_ending, comment, sort_keys))

    for key in keys:
        if key in missing:
            click.secho(f"  ? {key} (not present)", fg='yellow')
        else:
            click.secho(f"  - {key}", fg='red')


@cli.command()
@click.argument('file', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option('--output', '-o', type=click.Path(dir_okay=False, path_type=Path), help='Write to this file instead of stdout')
@encoding_option
@write_options
def convert(
    file: Path,
    output: Optional[Path],
    encoding: str,
    escape_unicode: bool,
    line_ending: str,
    comment: str,
    sort_keys: bool
):
    """Re-serialize FILE with the given write options."""
    props = _load(file, encoding)
    options = _build_options(escape_unicode, line_ending, comment, sort_keys)

    if output is not None:
        _store(props, output, options)
        click.echo(f"Wrote {len(props)} entries to {output}", err=True)
        return

    props.store(click.get_binary_stream('stdout'), options)


@cli.command()
@click.argument('file', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument('other', required=False, type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option('--base', default='HEAD', help='Git reference to compare FILE against when OTHER is omitted')
@encoding_option
def diff(file: Path, other: Optional[Path], base: str, encoding: str):
    """Show changes between FILE and OTHER, or FILE and a git reference."""
    detector = DiffDetector(encoding=encoding)
    try:
        if other is not None:
            changes = detector.compare_files(file, other)
        else:
            changes = detector.detect_changes_from_working_tree(file, base_ref=base)
    except PropertiesError as e:
        _fail(str(e))

    if not changes:
        click.secho("No changes detected.", fg='yellow')
        return

    click.echo(f"Changes detected ({len(changes)} total):\n")

    added = [c for c in changes if c.change_type == ChangeType.ADDED]
    modified = [c for c in changes if c.change_type == ChangeType.MODIFIED]
    removed = [c for c in changes if c.change_type == ChangeType.REMOVED]

    if added:
        click.secho(f"Added ({len(added)}):", fg='green', bold=True)
        for change in added:
            click.echo(f"  + {change.key}")
            click.echo(f"    \"{change.new_value}\"")
        click.echo()

    if modified:
        click.secho(f"Modified ({len(modified)}):", fg='yellow', bold=True)
        for change in modified:
            click.echo(f"  ~ {change.key}")
            click.echo(f"    - \"{change.old_value}\"")
            click.echo(f"    + \"{change.new_value}\"")
        click.echo()

    if removed:
        click.secho(f"Removed ({len(removed)}):", fg='red', bold=True)
        for change in removed:
            click.echo(f"  - {change.key}")
            click.echo(f"    \"{change.old_value}\"")


if __name__ == '__main__':
    cli()
