"""
sim8 - Configuration
====================

Assembler front-end configuration. Values can come from:
- Default values (defined here)
- Environment variables (AssemblerConfig.from_env)
- Command-line options, which override both
"""

from dataclasses import dataclass
import logging
import os

logger = logging.getLogger(__name__)

OUTPUT_FORMATS = ("bin", "hex")


@dataclass
class AssemblerConfig:
    """
    Configuration for assembling and writing output files.

    Attributes:
        output_format: "bin" writes the raw memory image, "hex" a
            16-bytes-per-row hex dump (default: "bin")
        fill_byte: Value of memory cells no statement writes (default: 0x00)
        encoding: Encoding used to read source files (default: "utf-8")
        verbose: Log progress at debug level (default: False)
    """

    output_format: str = "bin"
    fill_byte: int = 0x00
    encoding: str = "utf-8"
    verbose: bool = False

    def __post_init__(self) -> None:
        if self.output_format not in OUTPUT_FORMATS:
            raise ValueError(
                f"output_format must be one of {', '.join(OUTPUT_FORMATS)}, "
                f"got '{self.output_format}'"
            )
        if not 0 <= self.fill_byte <= 0xFF:
            raise ValueError(f"fill_byte must be between 00 and FF, got {self.fill_byte}")

    @classmethod
    def from_env(cls) -> "AssemblerConfig":
        """
        Create AssemblerConfig from environment variables.

        Environment variables (all optional):
            SIM8_OUTPUT_FORMAT: "bin" or "hex"
            SIM8_FILL_BYTE: Hex byte, e.g. "00" or "FF"
            SIM8_ENCODING: Source file encoding
            SIM8_VERBOSE: "1", "true" or "yes" to enable

        Invalid values are ignored with a warning.
        """
        config = cls()

        if output_format := os.environ.get("SIM8_OUTPUT_FORMAT"):
            if output_format.lower() in OUTPUT_FORMATS:
                config.output_format = output_format.lower()
            else:
                logger.warning(f"Ignoring invalid SIM8_OUTPUT_FORMAT: {output_format}")

        if fill_byte := os.environ.get("SIM8_FILL_BYTE"):
            try:
                value = int(fill_byte, 16)
            except ValueError:
                value = -1
            if 0 <= value <= 0xFF:
                config.fill_byte = value
            else:
                logger.warning(f"Ignoring invalid SIM8_FILL_BYTE: {fill_byte}")

        if encoding := os.environ.get("SIM8_ENCODING"):
            config.encoding = encoding

        if verbose := os.environ.get("SIM8_VERBOSE"):
            config.verbose = verbose.lower() in ("1", "true", "yes")

        return config
