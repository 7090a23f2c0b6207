# atlas_guardrails/core/stacks/parameters.py
"""
Parameter files for the Atlas cluster stack.

A parameter file is a JSON object mapping stack parameter names to values.
Keys starting with an underscore carry metadata (for example
``_instructions``) and are skipped. Values are rendered as the strings the
deployment tooling expects.
"""

import json
import logging
import os
from typing import Any, Dict, List

from atlas_guardrails.constants import EXAMPLE_PARAMETERS_FILE

logger = logging.getLogger(__name__)


class ParameterFileError(ValueError):
    """Raised when a parameter file is missing or malformed."""
    pass


def render_parameter_value(value: Any) -> str:
    """
    Render one parameter value the way the deployment tooling prints it.

    Lists are comma-joined with null items left empty, booleans are
    lower-cased and integral numbers drop their fractional part (``7.0`` is
    ``"7"``).
    """
    if isinstance(value, list):
        return ",".join("" if v is None else render_parameter_value(v) for v in value)
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def parse_parameters(raw: Any, source: str = "<parameters>") -> Dict[str, str]:
    """
    Convert a decoded parameter document into rendered parameter values.

    Raises:
        ParameterFileError: if the document is not an object, a value is null,
            or no deployable parameter remains.
    """
    if not isinstance(raw, dict):
        raise ParameterFileError("The parameter file must define a JSON object of key/value pairs.")

    parameters: Dict[str, str] = {}
    for key, value in raw.items():
        if key.startswith("_"):
            continue
        if value is None:
            raise ParameterFileError(f'Parameter "{key}" is undefined in {source}.')
        parameters[key] = render_parameter_value(value)

    if not parameters:
        raise ParameterFileError(f"No deployable parameters found in {source}.")
    return parameters


def load_parameter_file(path: str) -> Dict[str, str]:
    """Read and render the parameters of a JSON parameter file."""
    resolved = os.path.abspath(path)
    if not os.path.exists(resolved):
        raise ParameterFileError(
            f"Parameter file not found at {resolved}.\n"
            f"Copy {EXAMPLE_PARAMETERS_FILE} to {path} and update the values, "
            f"or pass a custom file with --parameters."
        )

    try:
        with open(resolved, "r", encoding="utf-8") as f:
            raw = json.load(f)
    except json.JSONDecodeError as e:
        raise ParameterFileError(f"The parameter file must contain valid JSON: {e}") from e
    except OSError as e:
        raise ParameterFileError(f"Failed to read parameter file at {resolved}: {e}") from e

    parameters = parse_parameters(raw, resolved)
    logger.info(f"Loaded {len(parameters)} parameter(s) from {resolved}")
    return parameters


def to_deploy_arguments(parameters: Dict[str, str]) -> List[str]:
    """Render parameters as ``--parameters Key=value`` deploy arguments."""
    arguments: List[str] = []
    for key, value in parameters.items():
        arguments.extend(["--parameters", f"{key}={value}"])
    return arguments


__all__ = [
    "ParameterFileError",
    "render_parameter_value",
    "parse_parameters",
    "load_parameter_file",
    "to_deploy_arguments",
]
