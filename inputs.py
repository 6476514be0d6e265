"""
Raw user input → numeric keys.

The tree engine never sees text: everything typed into the key
field or loaded from a key file goes through here first.
"""

import logging

logger = logging.getLogger(__name__)


class InvalidKeyError(ValueError):
    """Raised when the key field does not hold an integer."""


def parse_key(text):
    """
    Parse the single-key input field.

    Args:
        text (str): Raw field contents, e.g. " 42 ".

    Returns:
        int: The parsed key.

    Raises:
        InvalidKeyError: Empty or non-integer input.
    """
    token = (text or "").strip()
    try:
        return int(token)
    except ValueError:
        raise InvalidKeyError(f"Not an integer key: {text!r}") from None


def parse_key_text(text):
    """
    Parse a string of comma/space separated numbers.

    Integers are tried first, then floats.  Invalid tokens are
    skipped.

    Examples:
        >>> parse_key_text("7,3,18,10,22")
        [7, 3, 18, 10, 22]
        >>> parse_key_text("1 2 3 abc 4.5")
        [1, 2, 3, 4.5]
    """
    result = []
    skipped = 0
    for token in text.replace(",", " ").split():
        try:
            result.append(int(token))
        except ValueError:
            try:
                value = float(token)
            except ValueError:
                skipped += 1
                continue
            if value != value or value in (float("inf"), float("-inf")):
                skipped += 1            # nan / inf cannot be ordered
                continue
            result.append(value)
    if skipped:
        logger.debug("Skipped %d non-numeric tokens", skipped)
    return result


def prepare_keys(values):
    """Deduplicate and sort keys for a balanced bulk load."""
    return sorted(set(values))


def read_key_file(path, encoding="utf-8"):
    """
    Read a key file into a sorted, duplicate-free list.

    Args:
        path (str): Text file holding whitespace/comma separated numbers.

    Returns:
        list: Keys ready for ``Session.load_keys``.
    """
    with open(path, encoding=encoding) as f:
        return prepare_keys(parse_key_text(f.read()))
