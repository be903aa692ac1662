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
Unit tests for the :mod:`mgpu_adjoint.logging` configuration and decorators.
"""
import logging
import os

import numpy as np
import pytest

import mgpu_adjoint as ma
import mgpu_adjoint.logging as ma_logging
from mgpu_adjoint.logging import DebugOnlyFilter, LocalProcessFilter, debug_logger


@pytest.fixture(autouse=True)
def restore_loggers():
    """Undo the handlers and levels installed by enable_logging.

    ``dictConfig`` also resets the existing children of a configured logger, so
    every package logger is saved, not only the top-level one.
    """
    names = ["mgpu_adjoint"] + [
        name for name in logging.root.manager.loggerDict if name.startswith("mgpu_adjoint.")
    ]
    saved = {}
    for name in names:
        lgr = logging.getLogger(name)
        saved[name] = (list(lgr.handlers), lgr.level, lgr.propagate, lgr.disabled)

    yield

    for name, (handlers, level, propagate, disabled) in saved.items():
        lgr = logging.getLogger(name)
        lgr.handlers = handlers
        lgr.setLevel(level)
        lgr.propagate = propagate
        lgr.disabled = disabled


class TestLogging:
    """Tests for logging enablement"""

    def test_config_path(self):
        """Test that the bundled configuration file is found."""
        path = ma_logging.config_path()
        assert os.path.isfile(path)
        assert path.endswith("log_config.toml")

    def test_enable_logging(self):
        """Test that enabling logging configures the package logger and the TRACE level."""
        ma_logging.enable_logging()

        lgr = logging.getLogger("mgpu_adjoint")
        assert lgr.level == logging.DEBUG
        assert lgr.handlers
        assert not lgr.propagate
        assert logging.getLevelName(ma_logging.TRACE) == "TRACE"
        assert ma_logging.TRACE < logging.DEBUG
        assert hasattr(logging.getLoggerClass(), "trace")

    def test_enable_logging_from_file(self, tmp_path):
        """Test that a user-provided configuration file replaces the bundled one."""
        path = tmp_path / "logging.toml"
        path.write_text(
            "version = 1\ndisable_existing_loggers = false\n"
            "[loggers.mgpu_adjoint]\nlevel = \"WARNING\"\n"
        )

        ma_logging.enable_logging(str(path))
        assert logging.getLogger("mgpu_adjoint").level == logging.WARNING

    def test_module_loggers_after_enable_logging(self):
        """Test that module loggers reach the package handlers once logging is enabled."""
        child = logging.getLogger("mgpu_adjoint.algorithms.adjoint_jacobian")
        ma_logging.enable_logging()

        assert child.propagate
        assert not child.disabled
        assert child.getEffectiveLevel() == logging.DEBUG

    def test_module_logger_is_silent_by_default(self):
        """Test that package loggers carry a NullHandler, also after an earlier test
        enabled logging."""
        lgr = logging.getLogger("mgpu_adjoint.algorithms.adjoint_jacobian")
        assert any(isinstance(h, logging.NullHandler) for h in lgr.handlers)

    def test_engine_logs_computation(self, caplog, zero_state):
        """Test that a computation emits debug records."""
        ops = ma.create_ops_data(["RX"], [[0.1]], [[0]], [False])
        jac = np.zeros(1)

        with caplog.at_level(logging.DEBUG, logger="mgpu_adjoint"):
            ma.AdjointJacobian(max_workers=1).adjoint_jacobian(
                zero_state(1), jac, [ma.named_obs("PauliZ", [0])], ops, [0]
            )

        messages = [r.getMessage() for r in caplog.records]
        assert any("Computing adjoint Jacobian of 1 observable(s)" in m for m in messages)
        assert any("Calling <adjoint_jacobian(" in m for m in messages)


class TestDecorators:
    """Tests for the debug logging decorators"""

    def test_debug_logger_entry(self, caplog):
        """Test that the decorated function logs its bound arguments on entry."""

        @debug_logger
        def add(a, b=2):
            return a + b

        with caplog.at_level(logging.DEBUG, logger=__name__):
            assert add(1) == 3

        assert "Calling <add(a=1, b=2)>" in caplog.text

    def test_debug_logger_disabled(self, caplog):
        """Test that nothing is logged above DEBUG."""

        @debug_logger
        def add(a, b=2):
            return a + b

        with caplog.at_level(logging.INFO, logger=__name__):
            add(1)

        assert "Calling add" not in caplog.text


class TestFilters:
    """Tests for the logging filters"""

    @staticmethod
    def _record(level, pid=None):
        record = logging.LogRecord("mgpu_adjoint", level, __file__, 1, "msg", None, None)
        if pid is not None:
            record.process = pid
        return record

    def test_local_process_filter(self):
        """Test that records from other processes are dropped."""
        f = LocalProcessFilter()
        assert f.filter(self._record(logging.DEBUG))
        assert not f.filter(self._record(logging.DEBUG, pid=os.getpid() + 1))

    def test_debug_only_filter(self):
        """Test that records above DEBUG are dropped."""
        f = DebugOnlyFilter()
        assert f.filter(self._record(logging.DEBUG))
        assert f.filter(self._record(ma_logging.TRACE))
        assert not f.filter(self._record(logging.INFO))
