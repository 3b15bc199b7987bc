"""Metadata banner and package surface checks."""

from __future__ import annotations

import pytest

import lib_udp_output
from lib_udp_output import __init__conf__
from lib_udp_output.__init__conf__ import print_info, summary_info
from tests.os_markers import OS_AGNOSTIC

pytestmark = [OS_AGNOSTIC]


def test_summary_info_contains_metadata() -> None:
    summary = summary_info()

    assert "Info for lib_udp_output" in summary
    assert "version" in summary
    assert __init__conf__.shell_command in summary
    assert summary.endswith("\n")


def test_summary_info_is_idempotent() -> None:
    assert summary_info() == summary_info()


def test_print_info_defaults_to_stdout(capsys: pytest.CaptureFixture[str]) -> None:
    print_info()

    assert capsys.readouterr().out == summary_info()


def test_package_exports_the_public_surface() -> None:
    for name in lib_udp_output.__all__:
        assert hasattr(lib_udp_output, name)
    assert "UdpOutput" in lib_udp_output.__all__
