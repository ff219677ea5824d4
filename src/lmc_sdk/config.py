"""
LMC SDK Configuration
=====================

Defaults for the command-line tools. Configuration can come from:
- Default values (defined here)
- Environment variables (``LMC_*``)
- Command-line options, which override both

Environment variables (all optional):
    LMC_MAX_STEPS: Step budget for ``lmc run`` (0 = no limit)
    LMC_OPTIMISED_SUFFIX: Stem suffix for optimiser output files
    LMC_OPTIMISER_NOTICE: "0"/"false"/"no" to drop the optimiser notice
    LMC_INPUT_PROMPT: Prompt shown by the console I/O boundary
    LMC_POLYNOMIAL_WORKERS: Thread pool size for the polynomial test
    LMC_POLYNOMIAL_COEFFICIENTS: Upper bound (exclusive) for a, b and c
    LMC_POLYNOMIAL_X: Upper bound (exclusive) for x
"""

import logging
import os
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)

_FALSE_VALUES = ("0", "false", "no", "off")


@dataclass
class LMCConfig:
    """
    Settings shared by the ``lmc`` commands.

    Attributes:
        max_steps: Step budget for runs (None = run until halt)
        optimised_suffix: Default output suffix, ``prog.lmc`` -> ``prog_packed.lmc``
        optimiser_notice: Prefix optimised files with an explanatory comment
        input_prompt: Console prompt for IN
        polynomial_workers: Threads used by the polynomial test
        polynomial_coefficients: a, b and c range over 0..N-1
        polynomial_x: x ranges over 0..N-1
        test_max_steps: Step budget per builtin test run
    """

    max_steps: Optional[int] = None
    optimised_suffix: str = "_packed"
    optimiser_notice: bool = True
    input_prompt: str = "Input> "
    polynomial_workers: int = 4
    polynomial_coefficients: int = 10
    polynomial_x: int = 10
    test_max_steps: int = 10_000

    @classmethod
    def from_env(cls) -> "LMCConfig":
        """
        Create LMCConfig from environment variables.

        Invalid numbers are ignored with a warning.

        Returns:
            LMCConfig with values from environment variables
        """
        config = cls()

        if steps := _env_int("LMC_MAX_STEPS"):
            config.max_steps = steps
        if suffix := os.environ.get("LMC_OPTIMISED_SUFFIX"):
            config.optimised_suffix = suffix
        if notice := os.environ.get("LMC_OPTIMISER_NOTICE"):
            config.optimiser_notice = notice.strip().lower() not in _FALSE_VALUES
        if prompt := os.environ.get("LMC_INPUT_PROMPT"):
            config.input_prompt = prompt
        if workers := _env_int("LMC_POLYNOMIAL_WORKERS"):
            config.polynomial_workers = workers
        if coefficients := _env_int("LMC_POLYNOMIAL_COEFFICIENTS"):
            config.polynomial_coefficients = min(coefficients, 1000)
        if xs := _env_int("LMC_POLYNOMIAL_X"):
            config.polynomial_x = min(xs, 1000)

        return config


def _env_int(name: str) -> Optional[int]:
    """Read a positive integer variable; None if unset, invalid or not positive."""
    value = os.environ.get(name)
    if not value:
        return None
    try:
        number = int(value)
    except ValueError:
        logger.warning(f"Ignoring {name}={value!r}: not an integer")
        return None
    return number if number > 0 else None
