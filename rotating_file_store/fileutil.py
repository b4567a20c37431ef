"""Line-append helper used when building combined files."""


def append_line(text: str, path: str) -> None:
    """Append *text* plus a newline to *path*, creating the file if absent."""
    with open(path, "a", encoding="utf-8") as f:
        f.write(text + "\n")
