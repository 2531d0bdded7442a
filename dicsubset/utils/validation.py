"""
Validation utilities.

Bounded-integer check used for subset coordinates and sampling parameters.
"""

from typing import Union, Tuple, Optional
import numpy as np


def is_int_bounded(
    value: Union[int, float, str],
    lower: int,
    upper: int,
    include_lower: bool = True,
    include_upper: bool = True,
) -> Tuple[bool, Optional[int], str]:
    """
    Check if value is an integer within bounds.

    Args:
        value: Value to check
        lower: Lower bound
        upper: Upper bound
        include_lower: Include lower bound
        include_upper: Include upper bound

    Returns:
        Tuple of (is_valid, parsed_value, error_message)
    """
    if isinstance(value, bool):
        return False, None, f"Value {value} is not an integer"

    if isinstance(value, str):
        try:
            value = int(float(value))
        except ValueError:
            return False, None, f"'{value}' is not a valid integer"

    if isinstance(value, (float, np.floating)):
        if not float(value).is_integer():
            return False, None, f"Value {value} is not an integer"
        value = int(value)

    if not isinstance(value, (int, np.integer)):
        return False, None, f"Value {value!r} is not an integer"

    if include_lower:
        if value < lower:
            return False, None, f"Value {value} < {lower} (minimum)"
    else:
        if value <= lower:
            return False, None, f"Value {value} <= {lower} (must be greater)"

    if include_upper:
        if value > upper:
            return False, None, f"Value {value} > {upper} (maximum)"
    else:
        if value >= upper:
            return False, None, f"Value {value} >= {upper} (must be less)"

    return True, int(value), ""
