# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
bin2c-bench: throughput benchmarks for binary-to-C converters.

Times bin2c, `xxd -i` and previous bin2c builds turning random data into C
source, and gcc, clang and `ld` turning that data into object files, then
ranks everything by megabytes per second.
"""
