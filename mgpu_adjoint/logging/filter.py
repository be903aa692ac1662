# Copyright 2018-2026 Xanadu Quantum Technologies Inc.

# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at

#     http://www.apache.org/licenses/LICENSE-2.0

# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""
Filters referenced by log_config.toml.
"""
import logging
import os


class LocalProcessFilter(logging.Filter):  # pylint: disable=too-few-public-methods
    """Keep only records emitted by the process that created the filter.

    Device shards are threads of the calling process, so their records are kept.
    """

    def __init__(self):
        super().__init__()
        self._pid = os.getpid()

    def filter(self, record):
        return record.process == self._pid


class DebugOnlyFilter(logging.Filter):  # pylint: disable=too-few-public-methods
    """Keep DEBUG and TRACE records, drop everything louder."""

    def filter(self, record):
        return record.levelno <= logging.DEBUG
