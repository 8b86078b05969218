"""
Unit tests for the test runner's pytest command line.
"""

import argparse
import sys

import pytest

from run_tests import build_command


def options(suites=None, keyword=None, coverage=False, verbose=False, failfast=False):
    return argparse.Namespace(
        suites=suites or [],
        keyword=keyword,
        coverage=coverage,
        verbose=verbose,
        failfast=failfast,
    )


class TestBuildCommand:
    """Tests for build_command."""

    @pytest.mark.unit
    def test_all_suites_by_default(self):
        cmd = build_command(options())

        assert cmd[:3] == [sys.executable, "-m", "pytest"]
        assert "backend/tests/unit" in cmd
        assert "backend/tests/integration" in cmd
        assert "backend/tests/e2e" in cmd
        assert cmd[cmd.index("-m", 3) + 1] == "unit or integration or e2e"

    @pytest.mark.unit
    def test_selected_suites(self):
        cmd = build_command(options(suites=["unit"], keyword="parser", failfast=True))

        assert "backend/tests/integration" not in cmd
        assert cmd[cmd.index("-m", 3) + 1] == "unit"
        assert cmd[cmd.index("-k") + 1] == "parser"
        assert "-x" in cmd

    @pytest.mark.unit
    def test_coverage_targets_snaptrack(self):
        cmd = build_command(options(coverage=True))

        assert "--cov=snaptrack" in cmd
        assert any(arg.startswith("--cov-fail-under=") for arg in cmd)
