# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
The measurement engine: workload, pipeline timing, results store,
aggregation, session lifecycle and the benchmark loop.
"""
