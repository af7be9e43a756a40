"""Assorted utility functions."""

import math

import xodrnet.core.errors as errors


def arrayize(thing):
    """Normalize a field which may be absent, a single value, or a list to a list.

    XML readers produce a single object for an element appearing once and a list
    for repeated elements; this hides the difference.
    """
    if thing is None or thing == "":
        return []
    if isinstance(thing, (list, tuple)):
        return list(thing)
    return [thing]


def toFloat(value, default=0.0, field=None):
    """Best-effort conversion of a raw field to a float.

    Missing and blank fields give **default**. Unparseable values also give
    **default**, with an `OpenDriveWarning`.
    """
    if value is None:
        return default
    if isinstance(value, (int, float)):
        return float(value)
    text = str(value).strip()
    if not text:
        return default
    try:
        result = float(text)
    except ValueError:
        what = f"field {field!r}" if field else "field"
        errors.warn(f"{what} has non-numeric value {text!r}; using {default}")
        return default
    if not math.isfinite(result):
        return default
    return result


def toInt(value, default=0, field=None):
    """Like `toFloat`, but for integer fields such as lane ids."""
    return int(toFloat(value, default=default, field=field))


def toStr(value, default=None):
    """Convert an identifier field to a string, keeping **default** if absent."""
    if value is None:
        return default
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value)


def verbosePrint(
    *objects, level=1, indent=True, sep=" ", end="\n", file=None, flush=False
):
    """Print a message only in verbose mode.

    The verbosity level may be set using `setDebuggingOptions` or the ``-v``
    command-line option.

    Args:
        objects: Object(s) to print (`str` will be called to make them strings).
        level (int): Minimum verbosity level at which to print. Default is 1.
        indent (bool): Whether to indent the message according to its level
            (default true).
        sep, end, file, flush: As in `print` (the file defaults to the current
            standard output).
    """
    if errors.verbosityLevel >= level:
        if indent:
            print("  " * level, end="", file=file)
        print(*objects, sep=sep, end=end, file=file, flush=flush)
