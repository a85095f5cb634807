"""Custom pytest configuration and formatters for readable conversion test output."""
from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

import pytest
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

# Add the source tree to the path for all tests
sys.path.insert(0, str(Path(__file__).parent.parent.resolve() / "src"))

# Keep conversion debug logging out of the test output
for logger_name in ["m2e", "m2e.conversion", "m2e.core"]:
    logging.getLogger(logger_name).setLevel(logging.CRITICAL)

console = Console()


class ConversionTestReporter:
    """Collects failed conversions and prints them as one table at the end."""

    def __init__(self):
        self.failures: list[tuple[str, str, str, str]] = []
        self.passes = 0
        self.total = 0

    def record_result(self, test_name: str, input_text: str, expected: str, actual: str, passed: bool):
        self.total += 1
        if passed:
            self.passes += 1
        else:
            self.failures.append((test_name, input_text, expected, actual))

    def print_summary(self):
        if not self.failures:
            console.print(
                Panel.fit(
                    f"[bold green]✨ All {self.total} conversions matched ✨[/bold green]",
                    title="Conversion Results",
                    border_style="green",
                )
            )
            return

        table = Table(title="Conversion Test Failures", show_header=True, header_style="bold magenta")
        table.add_column("Test", style="cyan", no_wrap=False)
        table.add_column("Input", style="yellow")
        table.add_column("Expected", style="green")
        table.add_column("Actual", style="red")

        for test_name, input_text, expected, actual in self.failures:
            table.add_row(test_name.split("::")[-1], input_text, expected, actual)

        console.print(table)
        console.print(
            Panel.fit(
                f"[bold red]Failed:[/bold red] {len(self.failures)} | "
                f"[bold green]Passed:[/bold green] {self.passes} | [bold]Total:[/bold] {self.total}",
                title="Summary",
                border_style="red",
            )
        )


# Global reporter instance
reporter = ConversionTestReporter()


@pytest.hookimpl(hookwrapper=True)
def pytest_runtest_makereport(item, call):
    """Hook to capture conversion results for the custom reporter."""
    outcome = yield
    report = outcome.get_result()

    if report.when != "call":
        return
    for prop_name, prop_value in item.user_properties:
        if prop_name == "conversion_test":
            reporter.record_result(
                item.nodeid,
                prop_value["input"],
                prop_value["expected"],
                prop_value["actual"],
                report.outcome == "passed",
            )


def pytest_sessionfinish(session, exitstatus):
    """Print the conversion summary at the end of the test session."""
    if reporter.total > 0:
        console.print("\n")
        reporter.print_summary()


def assert_converted(input_text: str, expected: str, actual: str, item=None):
    """Assert a conversion result, recording it for the summary table."""
    if item is not None:
        item.user_properties.append(
            ("conversion_test", {"input": input_text, "expected": expected, "actual": actual})
        )
    if expected != actual:
        console.print(
            Panel.fit(
                f"[bold]Input:[/bold] {input_text!r}\n"
                f"[bold green]Expected:[/bold green] {expected!r}\n"
                f"[bold red]Actual:[/bold red] {actual!r}",
                title="Conversion mismatch",
                border_style="red",
            )
        )
    assert expected == actual, f"Input {input_text!r} should convert to {expected!r}, got {actual!r}"


# ==============================================================================
# FIXTURES
# ==============================================================================


@pytest.fixture(autouse=True)
def isolated_config_dir(tmp_path, monkeypatch):
    """Point the user config directory at an empty temp dir and rebuild the shared table."""
    from m2e.conversion.constants import reload_pattern_table
    from m2e.core.config import reset_config

    config_dir = tmp_path / "m2e-config"
    config_dir.mkdir()
    monkeypatch.setenv("M2E_CONFIG_DIR", str(config_dir))
    monkeypatch.chdir(tmp_path)
    reset_config()
    reload_pattern_table()
    yield config_dir
    reset_config()


@pytest.fixture
def write_user_file(isolated_config_dir):
    """Write a JSON document into the isolated config directory and reload the table."""
    from m2e.conversion.constants import reload_pattern_table
    from m2e.core.config import reset_config

    def _write(name: str, data, raw: bool = False):
        path = isolated_config_dir / name
        path.write_text(data if raw else json.dumps(data), encoding="utf-8")
        reset_config()
        return reload_pattern_table()

    return _write


@pytest.fixture
def engine():
    from m2e.conversion.engine import ConversionEngine

    return ConversionEngine()


@pytest.fixture
def convert_text(request):
    """Convert text with default options and check it against an expected output."""
    from m2e import convert
    from m2e.conversion.common import ConversionOptions

    def _check(input_text: str, expected: str, **options):
        result = convert(input_text, ConversionOptions(**options))
        assert_converted(input_text, expected, result.converted_text, request.node)
        return result

    return _check
