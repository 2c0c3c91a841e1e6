"""Number formatting and scalar-type lines for generated model headers."""

from __future__ import annotations

import sys

DBL_MIN = sys.float_info.min
DBL_MAX = sys.float_info.max
FLT_MIN = 1.1754943508222875e-38
FLT_MAX = 3.4028234663852886e38


def format_number(value, showpoint=False):
    """Format a number the way a default-precision output stream does.

    Integers are written as they are.  Floating-point values use six
    significant digits; with ``showpoint`` the decimal point and trailing
    zeros are always kept.
    """
    if isinstance(value, int):
        return str(int(value))
    return format(float(value), "#g" if showpoint else "g")


def scalar_defines(ftype, numeric=False):
    """Return the header lines that fix the floating-point type of a model.

    ``ftype`` names the type ("FLOAT" or "DOUBLE", any case).  When
    ``numeric`` is true, the limits are written as numbers (with an ``f``
    suffix for single precision); otherwise the limit macro names are used.
    """
    upper = ftype.upper()
    lower = ftype.lower()
    lines = [f"#define _FTYPE {upper}", f"#define scalar {lower}"]
    if lower == "double":
        if numeric:
            low, high = format_number(DBL_MIN), format_number(DBL_MAX)
        else:
            low, high = "DBL_MIN", "DBL_MAX"
    elif numeric:
        low, high = format_number(FLT_MIN) + "f", format_number(FLT_MAX) + "f"
    else:
        low, high = "FLT_MIN", "FLT_MAX"
    lines.append(f"#define SCALAR_MIN {low}")
    lines.append(f"#define SCALAR_MAX {high}")
    return lines