"""Command-line interface for the llconv library converter.

::

    llconv --fussy --verbose --options sort,schema-ver:2.8 path/to/*.pll --output out/

``.pll`` files are converted to ``.plclib``, ``.h`` files to both ``.pll``
and ``.plclib``. Parse issues of each file are also written to a ``.log``
file beside it. Exit code is 0 when clean, 1 when issues were found,
2 on errors.
"""

from __future__ import annotations

import glob
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Mapping

import click

from llconv.export import write_plclib, write_pll
from llconv.model import Library, LibraryCheckError
from llconv.parse import ParseError, parse_h, parse_pll

logger = logging.getLogger(__name__)


def parse_options(text: str) -> dict[str, str]:
    """Parse ``"key1:val1,key2,key3=val3"`` into a dict.

    Keys without a value map to ``""``; a repeated key keeps the last value.
    """
    options: dict[str, str] = {}
    for entry in text.split(","):
        entry = entry.strip()
        if not entry:
            continue
        key_end = len(entry)
        for sep in ":=":
            pos = entry.find(sep)
            if 0 <= pos < key_end:
                key_end = pos
        key = entry[:key_end].strip()
        value = entry[key_end + 1:].strip() if key_end < len(entry) else ""
        if key:
            options[key] = value
    return options


def expand_paths(patterns: tuple[str, ...] | list[str]) -> list[Path]:
    """Expand glob patterns, keeping plain paths as given."""
    paths: list[Path] = []
    for pattern in patterns:
        if glob.has_magic(pattern):
            paths.extend(Path(p) for p in sorted(glob.glob(pattern)))
        else:
            paths.append(Path(pattern))
    return paths


def write_parse_log(path: Path, issues: list[str]) -> Path:
    """Write the parse issues of *path* to a ``.log`` file beside it."""
    log_path = path.with_suffix(".log")
    lines = [f"{datetime.now():%Y-%m-%d %H:%M:%S}", f"[Parse log of {path}]"]
    lines.extend(f"[!] {issue}" for issue in issues)
    log_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return log_path


def parse_file(path: Path, strict: bool, issues: list[str]) -> Library:
    """Parse *path* according to its extension."""
    ext = path.suffix.lower()
    parse = parse_pll if ext == ".pll" else parse_h
    return parse(path.read_bytes(), issues, strict, name=path.stem, source=str(path))


def convert_file(
    path: Path,
    output_dir: Path,
    options: Mapping[str, str],
    strict: bool = False,
) -> list[str]:
    """Convert one ``.pll`` or ``.h`` file, returning the issues found.

    Raises ``ParseError`` or ``LibraryCheckError`` when the file cannot be
    converted, ``ValueError`` for unusable options.
    """
    ext = path.suffix.lower()
    if ext not in (".pll", ".h"):
        msg = f"Unhandled extension {ext} of {path.name}"
        if strict:
            raise ValueError(msg)
        return [msg]

    issues: list[str] = []
    parse_issues: list[str] = []
    lib = parse_file(path, strict, parse_issues)
    logger.info("%s", lib.summary())

    if parse_issues:
        issues.append(f"____Parsing of {path}")
        issues.extend(parse_issues)
        write_parse_log(path, parse_issues)

    lib.check()
    if lib.is_empty():
        issues.append(f"{path} generated an empty library")
    if "sort" in options:
        lib.sort()

    outputs = []
    if ext == ".h":
        outputs.append((output_dir / f"{path.stem}.pll", write_pll(lib, options)))
    outputs.append((output_dir / f"{path.stem}.plclib", write_plclib(lib, options=options)))
    for out_path, text in outputs:
        logger.info("Writing to: %s", out_path)
        out_path.write_text(text, encoding="utf-8")
    return issues


@click.command()
@click.argument("files", nargs=-1)
@click.option("--fussy", is_flag=True, help="Handle issues as blocking errors")
@click.option("--verbose", "-v", is_flag=True, help="Print more info")
@click.option(
    "--options",
    "options_text",
    default="",
    help="Conversion options, e.g. 'sort,schema-ver:2.8'",
)
@click.option(
    "--output",
    "-o",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=".",
    help="Output directory",
)
def main(files: tuple[str, ...], fussy: bool, verbose: bool, options_text: str, output: Path):
    """Convert PLC libraries: .pll to .plclib, .h to .pll and .plclib."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    paths = expand_paths(files)
    if not paths:
        click.echo("!! No files passed", err=True)
        sys.exit(2)

    options = parse_options(options_text)
    issues: list[str] = []
    try:
        for path in paths:
            if verbose:
                click.echo(f"Processing {path}")
            issues.extend(convert_file(path, output, options, fussy))
    except ParseError as e:
        click.echo(f"!! Error: {e.source}: {e}", err=True)
        sys.exit(2)
    except (LibraryCheckError, ValueError, OSError) as e:
        click.echo(f"!! Error: {e}", err=True)
        sys.exit(2)

    if issues:
        click.echo(f"[!] {len(issues)} issues found", err=True)
        for issue in issues:
            click.echo(f"    {issue}", err=True)
        sys.exit(1)
