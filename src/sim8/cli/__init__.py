"""
sim8 Command-Line Interface
===========================

- **sim8asm**: assembles a source file into a memory image, with
  optional listing and label table

Implemented with Click.
"""

__all__ = ["sim8asm"]
