# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Workload generator.

Each iteration gets a fresh payload from the OS entropy source. Random bytes
are the worst case for every converter and compiler we compare: nothing
compresses, no run-length tricks apply, and the generated C arrays have no
repeated patterns for the compiler to exploit.
"""

import os
from pathlib import Path

from bin2c_bench.bench.models import BYTES_PER_MB
from bin2c_bench.utils.filesystem import atomic_write_bytes


def payload_size_bytes(size_mb: int) -> int:
    """Number of bytes in a payload of `size_mb` megabytes (10^6 bytes each)."""
    if size_mb < 1:
        raise ValueError(f"Payload size must be at least 1 MB, got {size_mb}")
    return size_mb * BYTES_PER_MB


def generate_payload(size_mb: int) -> bytes:
    """
    Produce `size_mb` megabytes of random bytes.

    Raises:
        NotImplementedError: If the OS has no entropy source (from os.urandom).
    """
    return os.urandom(payload_size_bytes(size_mb))


def write_payload(target_path: Path, size_mb: int) -> int:
    """Generate a payload, store it atomically at `target_path`, return its size."""
    payload = generate_payload(size_mb)
    atomic_write_bytes(target_path, payload)
    return len(payload)
