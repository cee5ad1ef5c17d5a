"""Unit tests for solidus_cli.output module."""

from __future__ import annotations

import json
from collections.abc import Iterator
from unittest.mock import patch

import pytest

from solidus_cli import output
from solidus_core.models import MatchResult, MatchStatus


@pytest.fixture
def plain_console() -> Iterator[None]:
    """Swap in a colorless console writing to the captured stdout."""
    original_console = output.console
    output.set_no_color(True)
    try:
        yield
    finally:
        output.console = original_console


@pytest.mark.usefixtures("plain_console")
class TestMessages:
    """Tests for the status line helpers."""

    def test_success_message(self, capsys: pytest.CaptureFixture[str]) -> None:
        output.success("Recompiled to result.json")
        assert capsys.readouterr().out.strip() == "✓ Recompiled to result.json"

    def test_error_message(self, capsys: pytest.CaptureFixture[str]) -> None:
        output.error("solc not found")
        assert capsys.readouterr().out.strip() == "✗ solc not found"


@pytest.mark.usefixtures("plain_console")
class TestPrintJson:
    """Tests for print_json function."""

    def test_long_values_not_wrapped(self, capsys: pytest.CaptureFixture[str]) -> None:
        data = {"deployedBytecode": "0x" + "60" * 200}
        output.print_json(data)

        printed = capsys.readouterr().out
        assert json.loads(printed) == data
        assert f'"0x{"60" * 200}"' in printed

    def test_brackets_not_treated_as_markup(self, capsys: pytest.CaptureFixture[str]) -> None:
        data = {"metadata": '{"sources":[{"[bold]":1}]}'}
        output.print_json(data)
        assert json.loads(capsys.readouterr().out) == data


@pytest.mark.usefixtures("plain_console")
class TestReportMatch:
    """Tests for report_match function."""

    @pytest.mark.parametrize(
        ("status", "mark"),
        [
            (MatchStatus.PERFECT, "✓"),
            (MatchStatus.PROBABLY_IMMUTABLES, "⚠"),
            (MatchStatus.MISMATCH, "✗"),
        ],
    )
    def test_one_line_per_status(
        self, status: MatchStatus, mark: str, capsys: pytest.CaptureFixture[str]
    ) -> None:
        output.report_match(MatchResult(status=status, message="Bytecode compared"))
        assert capsys.readouterr().out.strip() == f"{mark} Bytecode compared"

    def test_partial_explains_difference(self, capsys: pytest.CaptureFixture[str]) -> None:
        result = MatchResult(
            status=MatchStatus.PARTIAL,
            message="Bytecode matches without the metadata suffix",
        )
        output.report_match(result)

        lines = capsys.readouterr().out.strip().splitlines()
        assert lines == [
            "✓ Bytecode matches without the metadata suffix",
            "Only the metadata suffix differs",
        ]


class TestSetNoColor:
    """Tests for set_no_color function."""

    def test_replaces_console(self) -> None:
        original_console = output.console
        try:
            output.set_no_color(True)
            assert output.console is not original_console
            assert output.console.no_color is True
        finally:
            output.console = original_console

    def test_no_color_env(self) -> None:
        original_console = output.console
        try:
            with patch.object(output, "_env_no_color", True):
                output.set_no_color(False)
            assert output.console.no_color is True
        finally:
            output.console = original_console
