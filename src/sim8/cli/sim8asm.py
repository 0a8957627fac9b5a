"""
sim8asm - Teaching CPU Assembler Command-Line Interface
=======================================================

Assembles a source file into a 256-byte memory image for the SMS32
teaching processor.

Usage Examples
--------------
Basic assembly (writes hello.bin):
    $ sim8asm hello.asm

Hex dump instead of a raw image:
    $ sim8asm hello.asm -f hex -o hello.hex

Listing and label table:
    $ sim8asm hello.asm -l hello.lst -s hello.sym

Machine-readable errors for editor integration:
    $ sim8asm --json-errors hello.asm

Environment variables SIM8_OUTPUT_FORMAT, SIM8_FILL_BYTE, SIM8_ENCODING
and SIM8_VERBOSE provide defaults; command-line options override them.
"""

import logging
from dataclasses import replace
from pathlib import Path
from typing import Optional

import click

from sim8 import __version__
from sim8.assembler import Assembler
from sim8.cli.errors import handle_cli_exception
from sim8.config import OUTPUT_FORMATS, AssemblerConfig
from sim8.utils import dec_to_hex


def setup_logging(verbose: bool) -> None:
    """Configure logging based on verbosity."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s" if verbose else "%(message)s",
    )


def parse_fill_byte(ctx: click.Context, param: click.Parameter, value: Optional[str]) -> Optional[int]:
    """Click callback: accept a fill byte written as hex (00-FF)."""
    if value is None:
        return None
    try:
        byte = int(value, 16)
    except ValueError:
        raise click.BadParameter(f"'{value}' is not a hex byte")
    if not 0 <= byte <= 0xFF:
        raise click.BadParameter(f"'{value}' is greater than FF")
    return byte


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument(
    "input_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Output file (default: input.bin or input.hex)",
)
@click.option(
    "-f", "--format", "output_format",
    type=click.Choice(OUTPUT_FORMATS, case_sensitive=False),
    default=None,
    help="Output format: raw memory image (bin) or hex dump (hex)",
)
@click.option(
    "--fill",
    callback=parse_fill_byte,
    help="Hex value of memory cells the program does not write (default: 00)",
)
@click.option(
    "-l", "--listing",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Generate listing file",
)
@click.option(
    "-s", "--symbols",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Generate label table file",
)
@click.option(
    "--json-errors",
    is_flag=True,
    help="Report assembly errors as JSON on stderr",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="sim8asm")
def main(
    input_file: Path,
    output: Optional[Path],
    output_format: Optional[str],
    fill: Optional[int],
    listing: Optional[Path],
    symbols: Optional[Path],
    json_errors: bool,
    verbose: bool,
) -> None:
    """
    Assemble source code for the SMS32 teaching CPU.

    INPUT_FILE is the assembly source file (.asm) to assemble.

    \b
    Examples:
        sim8asm hello.asm              # Outputs hello.bin
        sim8asm hello.asm -f hex       # Outputs hello.hex
        sim8asm hello.asm -l hello.lst # Also write a listing
    """
    config = AssemblerConfig.from_env()
    overrides = {}
    if output_format is not None:
        overrides["output_format"] = output_format.lower()
    if fill is not None:
        overrides["fill_byte"] = fill
    if verbose:
        overrides["verbose"] = True
    config = replace(config, **overrides)

    setup_logging(config.verbose)

    output_file = output if output is not None else input_file.with_suffix(f".{config.output_format}")
    asm = Assembler(config=config)

    try:
        result = asm.assemble_file(input_file)

        asm.write_output(output_file)
        if config.verbose:
            click.echo(f"Wrote {len(result.machine_code)} bytes to {output_file}")

        if listing:
            asm.write_listing(listing)
            if config.verbose:
                click.echo(f"Wrote listing to {listing}")

        if symbols:
            asm.write_symbols(symbols)
            if config.verbose:
                click.echo(f"Wrote labels to {symbols}")

        if config.verbose:
            used = sorted(result.machine_code)
            if used:
                click.echo(
                    f"Assembly complete: {len(used)} bytes between "
                    f"{dec_to_hex(used[0])} and {dec_to_hex(used[-1])}"
                )
            click.echo(f"Defined {len(result.labels)} labels")

    except Exception as e:
        handle_cli_exception(e, verbose=config.verbose, json_errors=json_errors)

if __name__ == "__main__":
    main()
