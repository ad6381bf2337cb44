"""YAML-driven suite engine.

A suite file looks like::

    detection:
      logic: or            # always | and | or
      markers:
        - pattern: "GATE 2B"
    tests:
      - name: documents gates
        assertion:
          type: grep
          pattern: "GATE 2B"
          target: $SKILL_MD

Every test counts toward the total, including the tests of a suite whose
detection markers do not match (those are counted as skipped).
"""

import os
import re
import subprocess
from pathlib import Path
from typing import Any, Optional

import yaml
from rich.console import Console
from rich.markup import escape

from skilltester.spec.reporter import FAIL, PASS, SKIP

SUITE_ALIASES = {
    "gates-only": ["preservation-gates"],
    "workflow-only": ["workflow-compliance"],
    "preservation-only": ["content-preservation"],
    "full": ["preservation-gates", "workflow-compliance", "content-preservation"],
}


def suites_for(test_type: str) -> list[str]:
    """Map a test type (``full``, ``--gates-only``...) to suite names."""
    key = test_type[2:] if test_type.startswith("--") else test_type
    return SUITE_ALIASES.get(key, [test_type])


class SuiteEngine:
    """Loads YAML suites and checks their assertions against a skill."""

    def __init__(
        self,
        skill_md: Path | str,
        skill_path: Path | str,
        original_path: Path | str,
        suites_dir: Path | str,
        console: Optional[Console] = None,
        script_timeout: int = 60,
    ):
        self.skill_md = str(skill_md)
        self.skill_path = str(skill_path)
        self.original_path = str(original_path)
        self.suites_dir = Path(suites_dir)
        self.console = console or Console()
        self.script_timeout = script_timeout

        try:
            self.skill_content = Path(self.skill_md).read_text()
        except OSError:
            self.skill_content = ""

        self.passed = 0
        self.failed = 0
        self.skipped = 0
        self.total = 0

    @property
    def stats(self) -> dict[str, int]:
        return {
            "total": self.total,
            "passed": self.passed,
            "failed": self.failed,
            "skipped": self.skipped,
            "applicable": self.total - self.skipped,
        }

    def run_suites(self, names: list[str]) -> None:
        for name in names:
            self.run_suite(name)

    def run_suite(self, name: str) -> bool:
        """Run one suite. Returns False when the suite file is missing or empty."""
        suite_file = self.suites_dir / f"{name}.yaml"
        if not suite_file.exists():
            return False

        with open(suite_file) as f:
            suite = yaml.safe_load(f)
        if not suite:
            return False

        tests = suite.get("tests") or []
        if not self.should_run_suite(suite):
            for test in tests:
                self.total += 1
                self.skipped += 1
                self._line(SKIP, "yellow", f"{test.get('name')} (skipped - not applicable)")
            return True

        title = name.replace("-", " ").upper()
        self.console.print(f"[bold]{escape(title)} TESTS[/bold]")
        self.console.print("=" * (len(title) + 9))

        for test in tests:
            self.run_test(test)
        self.console.print("")
        return True

    def should_run_suite(self, suite: dict) -> bool:
        detection = suite.get("detection") or {}
        logic = detection.get("logic", "always")
        markers = detection.get("markers") or []

        if logic == "always":
            return True
        if logic == "and":
            return all(self._marker_matches(m.get("pattern", "")) for m in markers)
        if logic == "or":
            return any(self._marker_matches(m.get("pattern", "")) for m in markers)
        return False

    def _marker_matches(self, pattern: str) -> bool:
        try:
            return re.search(pattern, self.skill_content) is not None
        except (re.error, TypeError):
            return False

    def run_test(self, test: dict) -> None:
        self.total += 1
        name = test.get("name", "unnamed")

        if not test.get("enabled", True):
            self.skipped += 1
            self._line(SKIP, "yellow", f"{name} (skipped - disabled)")
            return

        assertion = test.get("assertion")
        if not assertion:
            return

        if self.check_assertion(assertion):
            self.passed += 1
            self._line(PASS, "green", name)
        else:
            self.failed += 1
            self._line(FAIL, "red", f"{name} FAILED")

    def _line(self, marker: str, style: str, text: str) -> None:
        self.console.print(f"[{style}]{marker}[/{style}] {escape(text)}", highlight=False)

    # Assertions

    def check_assertion(self, assertion: dict) -> bool:
        kind = assertion.get("type")
        if kind == "grep":
            return self.check_grep(assertion)
        if kind == "diff":
            return self.check_diff(assertion)
        if kind == "custom":
            return self.check_custom(assertion)
        return False

    def check_grep(self, assertion: dict) -> bool:
        try:
            target = Path(self.expand_vars(assertion.get("target", "")))
            if not target.is_file():
                return False
            return re.search(assertion.get("pattern", ""), target.read_text()) is not None
        except (OSError, re.error, UnicodeDecodeError, TypeError, ValueError):
            return False

    def check_diff(self, assertion: dict) -> bool:
        files = assertion.get("files") or []
        if len(files) < 2:
            return False

        try:
            first = Path(self.expand_vars(files[0]))
            second = Path(self.expand_vars(files[1]))
            if not (first.is_file() and second.is_file()):
                return False
            return first.read_bytes() == second.read_bytes()
        except (OSError, TypeError, ValueError):
            return False

    def check_custom(self, assertion: dict) -> bool:
        if assertion.get("script"):
            return self._run_script(assertion["script"])

        check_type = assertion.get("check_type")
        try:
            if check_type == "line_order":
                return self._check_line_order(assertion)
            if check_type == "line_count":
                return self._check_line_count(assertion)
            if check_type == "file_exists":
                return Path(self.expand_vars(assertion["file"])).exists()
            if check_type == "has_directory":
                return Path(self.expand_vars(assertion["directory"])).is_dir()
        except (OSError, KeyError, re.error, UnicodeDecodeError, TypeError, ValueError):
            return False
        return False

    def _check_line_order(self, assertion: dict) -> bool:
        path = Path(self.expand_vars(assertion.get("file", "$SKILL_MD")))
        content = path.read_text()

        first = re.search(assertion["first_pattern"], content)
        second = re.search(assertion["second_pattern"], content)
        if not (first and second):
            return False
        return content.index(first.group(0)) < content.index(second.group(0))

    def _check_line_count(self, assertion: dict) -> bool:
        current = Path(self.expand_vars(assertion["file"]))
        original = Path(self.expand_vars(assertion["original_file"]))
        threshold = assertion.get("threshold", 5)

        current_lines = len(current.read_text().splitlines())
        original_lines = len(original.read_text().splitlines())
        return current_lines >= original_lines - threshold

    def _run_script(self, script: str) -> bool:
        env = {
            **os.environ,
            "SKILL_MD": self.skill_md,
            "SKILL_PATH": self.skill_path,
            "ORIGINAL_PATH": self.original_path,
        }
        try:
            result = subprocess.run(
                ["bash", "-c", script],
                capture_output=True,
                text=True,
                env=env,
                timeout=self.script_timeout,
            )
        except (OSError, subprocess.TimeoutExpired):
            return False
        return result.returncode == 0

    def expand_vars(self, value: Any) -> Any:
        if not isinstance(value, str):
            return value
        return (
            value.replace("$SKILL_MD", self.skill_md)
            .replace("$SKILL_PATH", self.skill_path)
            .replace("$ORIGINAL_PATH", self.original_path)
        )
