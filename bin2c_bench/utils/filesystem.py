# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Filesystem operations for bin2c-bench.

Two guarantees the harness relies on:
  - the payload file a variant reads is never half-written
  - a results line that was appended survives a crash right after the append

Atomic writes go to a temporary file in the same directory as the target and
are then renamed over it. Rename on the same filesystem is atomic on POSIX.
Durable appends flush Python's buffer and fsync the descriptor before returning.
"""

import os
import shutil
import tempfile
from pathlib import Path


def atomic_write_bytes(target_path: Path, data: bytes) -> None:
    """
    Write binary data to a file atomically.

    Args:
        target_path: Where the final file should end up.
        data: The raw bytes to write.

    Raises:
        OSError: If the write or rename fails.
    """
    target_path.parent.mkdir(parents=True, exist_ok=True)

    temp_fd = tempfile.NamedTemporaryFile(
        mode="wb",
        dir=str(target_path.parent),
        prefix=".bin2c_bench_tmp_",
        suffix=".tmp",
        delete=False,
    )
    temp_path = Path(temp_fd.name)

    try:
        temp_fd.write(data)
        temp_fd.flush()
        temp_fd.close()
        temp_path.rename(target_path)
    except BaseException:
        temp_fd.close()
        if temp_path.exists():
            temp_path.unlink()
        raise


def durable_append_line(file_path: Path, line: str, encoding: str = "utf-8") -> None:
    """
    Append one line to a text file and fsync it before returning.

    A trailing newline is added if `line` lacks one.

    Raises:
        OSError: If the file can't be opened, written or synced.
    """
    if not line.endswith("\n"):
        line += "\n"
    with file_path.open("a", encoding=encoding) as handle:
        handle.write(line)
        handle.flush()
        os.fsync(handle.fileno())


def remove_tree(path: Path) -> bool:
    """
    Delete a directory and everything inside it.

    Returns:
        True if the directory existed and was removed, False if it wasn't there.

    Raises:
        OSError: If the directory exists but can't be removed.
    """
    if not path.is_dir():
        return False
    shutil.rmtree(path)
    return True
