"""Text file reading shared by the inventory components."""

from leaflet.errors import FileReadError


def read_text(path: str) -> str:
    """Read a file as UTF-8 text without newline translation.

    Args:
        path: Path of the file to read.

    Returns:
        The file content exactly as stored.

    Raises:
        FileReadError: If the file cannot be opened or is not valid UTF-8.
    """
    try:
        with open(path, encoding="utf-8", newline="") as f:
            return f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise FileReadError(path, e) from e
