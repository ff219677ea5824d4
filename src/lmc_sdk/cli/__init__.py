"""
LMC SDK Command-Line Interface
==============================

This package provides the ``lmc`` command, a Click-based front end with
subcommands for validating, running, debugging, optimising,
disassembling and testing LMC programs.
"""

__all__ = ["lmc"]
