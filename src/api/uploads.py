"""Bounded reads of multipart uploads."""

from fastapi import UploadFile


def read_limited(upload: UploadFile, max_bytes: int) -> bytes:
    """
    Read an upload into memory, stopping one byte past max_bytes.

    A result longer than max_bytes means the upload is over the limit;
    the rest of it is never loaded.
    """
    return upload.file.read(max_bytes + 1)
