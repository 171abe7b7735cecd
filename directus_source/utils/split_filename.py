def split_filename(filename: str) -> tuple[str, str]:
    """Split a download filename into ``(name, ext)``.

    The extension is the last dot-segment including its dot, or ``""`` when
    the filename has no dot: ``"archive.tar.gz"`` -> ``("archive.tar", ".gz")``.
    """
    name, dot, ext = filename.rpartition(".")
    if not dot:
        return filename, ""
    return name, f".{ext}"
