# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
The set of pipelines measured on every iteration.

Order matters: the raw conversions run first and leave their generated C
source in the session directory, and the `*_baseline` compile variants then
compile that saved source. That separates compiler cost from converter cost.

Labels and what they time:

    xxd                     payload -> xxd -i wrapper -> dummy_xxd.c
    bin2c                   payload -> build/bin2c -> dummy_bin2c.c
    bin2c-<name>            payload -> previous bin2c build -> dummy_bin2c.c
    compile_ld              ld -r -b binary payload -> object file
    xxd_<cc>_baseline       dummy_xxd.c -> cat | cc
    bin2c_<cc>_baseline     dummy_bin2c.c -> cat | cc
    xxd_<cc>                payload -> xxd wrapper | cc
    bin2c_<cc>              payload -> bin2c | cc
    bin2c_<cc>_<name>       payload -> previous bin2c build | cc
"""

import os
from pathlib import Path

from bin2c_bench.bench.models import SessionFiles, Variant
from bin2c_bench.config.schema import BenchmarkConfig

_DEVNULL = Path(os.devnull)


def xxd_wrapper_argv(symbol_name: str) -> tuple[str, ...]:
    """
    A shell one-off that turns stdin into a compilable C file using `xxd -i`.

    xxd only emits the array body, so the wrapper adds the includes, the
    declaration and a length constant around it.
    """
    script = "\n".join(
        [
            "echo '#include <stdint.h>'",
            "echo '#include <stdlib.h>'",
            f"echo 'const uint8_t {symbol_name}[] = {{'",
            "xxd -i",
            "echo '};'",
            f"echo 'const size_t {symbol_name}_len = sizeof({symbol_name}) - 1;'",
        ]
    )
    return ("sh", "-c", script)


def bin2c_argv(executable: Path, symbol_name: str) -> tuple[str, ...]:
    return (str(executable), symbol_name)


def compile_argv(compiler: str) -> tuple[str, ...]:
    """Compile C source from stdin to an object file written to stdout."""
    return (compiler, "-std=c89", "-x", "c", "-c", "-", "-o", "/dev/stdout")


def converter_path(config: BenchmarkConfig) -> Path:
    return Path(config.bin2c_prefix) / "build" / "bin2c"


def resolve_previous_version(entry: str, config: BenchmarkConfig) -> Path:
    """
    Map a previous-version entry to a bin2c executable.

    Relative entries live under `previous_versions_root`. An entry naming a
    directory is treated as a checkout and its build/bin2c is used; anything
    else is taken to be the executable itself.
    """
    path = Path(entry)
    if not path.is_absolute():
        path = Path(config.previous_versions_root) / path
    if path.is_dir():
        return path / "build" / "bin2c"
    return path


def previous_version_name(entry: str) -> str:
    return Path(entry.rstrip("/")).name


def build_variants(
    config: BenchmarkConfig,
    files: SessionFiles,
    ld_supported: bool = True,
) -> list[Variant]:
    """
    Every variant to run per iteration, in run order.

    Args:
        config: The benchmark settings; the skip_* switches remove whole
                groups of variants.
        files: The session's scratch files.
        ld_supported: Whether `ld -r -b binary` works on this platform.
    """
    symbol = config.symbol_name
    bin2c = bin2c_argv(converter_path(config), symbol)
    xxd = xxd_wrapper_argv(symbol)
    previous = [
        (previous_version_name(entry), bin2c_argv(resolve_previous_version(entry, config), symbol))
        for entry in config.previous_versions
    ]

    variants: list[Variant] = []

    if not config.skip_xxd:
        variants.append(Variant("xxd", xxd, stdin=files.entropy, stdout=files.xxd_source))
    variants.append(Variant("bin2c", bin2c, stdin=files.entropy, stdout=files.bin2c_source))
    for name, argv in previous:
        variants.append(
            Variant(f"bin2c-{name}", argv, stdin=files.entropy, stdout=files.bin2c_source)
        )

    if not config.skip_ld and ld_supported:
        variants.append(
            Variant(
                "compile_ld",
                ("ld", "-r", "-b", "binary", str(files.entropy), "-o", str(files.ld_output)),
            )
        )

    if config.skip_compile:
        return variants

    for cc in config.compilers:
        compile_stage = compile_argv(cc)
        if not config.skip_xxd:
            variants.append(
                Variant(f"xxd_{cc}_baseline", ("cat",), compile_stage, files.xxd_source, _DEVNULL)
            )
        variants.append(
            Variant(f"bin2c_{cc}_baseline", ("cat",), compile_stage, files.bin2c_source, _DEVNULL)
        )
        if not config.skip_xxd:
            variants.append(Variant(f"xxd_{cc}", xxd, compile_stage, files.entropy, _DEVNULL))
        variants.append(Variant(f"bin2c_{cc}", bin2c, compile_stage, files.entropy, _DEVNULL))
        for name, argv in previous:
            variants.append(
                Variant(f"bin2c_{cc}_{name}", argv, compile_stage, files.entropy, _DEVNULL)
            )

    return variants
