"""Common exceptions, warnings, and debugging options."""

import warnings

## Configuration


def setDebuggingOptions(*, verbosity=0):
    """Configure xodrnet's debugging options.

    Args:
        verbosity (int): Verbosity level. Zero by default, although the command-line
            interface uses 1 by default. Level 1 reports the progress of map
            processing, level 2 adds per-road details, and level 3 is reserved for
            very detailed output.
    """
    global verbosityLevel
    verbosityLevel = verbosity


#: Verbosity level. See `setDebuggingOptions` for the allowed values.
verbosityLevel = 0

## Exceptions


class XodrError(Exception):
    """An error produced while decoding or processing an OpenDRIVE document."""

    pass


class MalformedDocumentError(XodrError):
    """Error raised for documents lacking the structure needed to build a map.

    This covers unparseable XML, a missing ``OpenDRIVE`` root element, and a
    missing ``header``.
    """

    pass


class DanglingReferenceError(XodrError):
    """Error raised by the strict consistency check for unresolved references.

    Attributes:
        references: the list of `DanglingReference` records which were found.
    """

    def __init__(self, references):
        self.references = list(references)
        lines = "\n".join(f"  {ref}" for ref in self.references)
        super().__init__(f"{len(self.references)} dangling reference(s):\n{lines}")


## Warnings


class OpenDriveWarning(UserWarning):
    """Warning for recoverable problems in OpenDRIVE data.

    Problems of this kind (unknown geometry types, unparseable numbers, etc.) do not
    stop the map from being built; the offending element is skipped or coerced.
    """

    pass


def warn(message):
    warnings.warn(message, OpenDriveWarning, stacklevel=2)
