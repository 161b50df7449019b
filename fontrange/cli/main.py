"""
Main CLI entry point for fontrange.
"""

import json
from pathlib import Path

import click

from fontrange import __version__
from fontrange.config.paths import PYPROJECT_FILE
from fontrange.pipeline.report import ReportLine, format_summary
from fontrange.utils.logging import set_verbose


def option_flags(func):
    """Options shared by commands that run the pipeline."""
    decorators = [
        click.option(
            "--config",
            "config_path",
            type=click.Path(dir_okay=False, path_type=Path),
            default=PYPROJECT_FILE,
            show_default=True,
            help="pyproject.toml with a [tool.fontrange] table.",
        ),
        click.option("--include", default=None, help="Regex selecting stylesheets."),
        click.option("--exclude", default=None, help="Regex excluding stylesheets."),
        click.option(
            "--font-extensions",
            default=None,
            help="Regex selecting subsettable font URLs (case-insensitive).",
        ),
        click.option(
            "--cache-dir",
            type=click.Path(file_okay=False, path_type=Path),
            default=None,
            help="Directory subset fonts are written to.",
        ),
    ]
    for decorator in reversed(decorators):
        func = decorator(func)
    return func


def resolve_options(config_path, include, exclude, font_extensions, cache_dir):
    from fontrange.config.options import load_options

    return load_options(config_path).with_overrides(
        include=include,
        exclude=exclude,
        font_extensions=font_extensions,
        cache_dir=cache_dir,
    )


def print_summary(lines: list[ReportLine]) -> None:
    """Print the aligned reduction summary, if any font was optimized."""
    if not lines:
        return
    click.echo("\n" + click.style("[fontrange] optimized:", bold=True), err=True)
    for name, rate in format_summary(lines):
        click.echo(click.style(name, fg="blue") + click.style(rate, fg="bright_black"), err=True)


@click.group()
@click.version_option(version=__version__)
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
def cli(verbose):
    """Subset web fonts to the unicode-range their stylesheets declare."""
    set_verbose(verbose)


@cli.command()
@click.argument("src", type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.option(
    "-o",
    "--out",
    "out_dir",
    type=click.Path(file_okay=False, path_type=Path),
    required=True,
    help="Output directory.",
)
@option_flags
def build(src, out_dir, config_path, include, exclude, font_extensions, cache_dir):
    """Copy SRC to OUT and rewrite stylesheets to use font subsets."""
    from fontrange.operations.build import build_stylesheets

    options = resolve_options(config_path, include, exclude, font_extensions, cache_dir)
    print_summary(build_stylesheets(src, out_dir, options))


@cli.command()
@click.argument("src", type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.option(
    "-o",
    "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Write the alias table to this file instead of stdout.",
)
@option_flags
def aliases(src, output, config_path, include, exclude, font_extensions, cache_dir):
    """Subset fonts of SRC and print the alias table as JSON."""
    from fontrange.operations.build import collect_aliases

    options = resolve_options(config_path, include, exclude, font_extensions, cache_dir)
    table, lines = collect_aliases(src, options)

    data = json.dumps([alias.to_dict() for alias in table], indent=2)
    if output is None:
        click.echo(data)
    else:
        output.write_text(data + "\n", encoding="utf-8")
    print_summary(lines)


@cli.command()
@click.argument("dist", type=click.Path(exists=True, file_okay=False, path_type=Path))
@option_flags
def optimize(dist, config_path, include, exclude, font_extensions, cache_dir):
    """Overwrite font files in an emitted DIST with their subsets."""
    from fontrange.operations.build import optimize_assets

    options = resolve_options(config_path, include, exclude, font_extensions, cache_dir)
    print_summary(optimize_assets(dist, options))


@cli.command()
@click.argument("stylesheet", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def analyze(stylesheet):
    """List @font-face rules of STYLESHEET that declare a unicode-range."""
    from fontrange.core.stylesheet import (
        decode_stylesheet,
        extract_font_faces,
        parse_stylesheet,
    )
    from fontrange.core.unicode_range import expand_code_points, format_ranges
    from fontrange.exceptions import StylesheetParseError

    try:
        rules = parse_stylesheet(decode_stylesheet(stylesheet.read_bytes()))
    except StylesheetParseError as e:
        raise click.ClickException(f"Could not parse {stylesheet}: {e}") from e

    for face in extract_font_faces(rules):
        click.echo(click.style(face.font_family, bold=True))
        click.echo(f"  ranges:      {format_ranges(face.ranges)}")
        click.echo(f"  code points: {len(expand_code_points(face.ranges))}")
        for src in face.src_urls:
            click.echo(f"  src:         {src}")


if __name__ == "__main__":
    cli()
