"""Report generation using Jinja2 templates."""

import difflib
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from jinja2 import Environment, FileSystemLoader, select_autoescape

from skilltester import __version__
from skilltester.config import SkillTesterConfig
from skilltester.core.workspace import SkillWorkspace


def skill_metrics(content: str) -> dict[str, int]:
    """Count structural elements of a SKILL.md document."""
    return {
        "line_count": len(content.splitlines()),
        "sections": len(re.findall(r"^##", content, re.MULTILINE)),
        "code_blocks": len(re.findall(r"^```", content, re.MULTILINE)),
        "references": content.count("references/"),
        "checklists": len(re.findall(r"^- \[ \]", content, re.MULTILINE)),
    }


class ReportGenerator:
    """Generates a markdown TEST_REPORT.md inside a test workspace."""

    def __init__(self, config: SkillTesterConfig):
        """Initialize the report generator.

        Args:
            config: SkillTester configuration
        """
        self.config = config

        template_dir = Path(__file__).parent / "templates"
        self.env = Environment(
            loader=FileSystemLoader(template_dir),
            autoescape=select_autoescape(["html", "xml"]),
            keep_trailing_newline=True,
        )

        self.env.filters["duration_format"] = self._format_duration
        self.env.filters["datetime_format"] = self._format_datetime
        self.env.filters["percentage"] = self._format_percentage

    def generate(
        self,
        workspace: SkillWorkspace,
        results: dict[str, Any],
        test_log: Optional[str] = None,
    ) -> Path:
        """Write the report and return its path.

        Args:
            workspace: The workspace the tests ran against
            results: Results dictionary from SkillTestRunner
            test_log: Optional captured console output of the run
        """
        context = self._prepare_context(workspace, results, test_log)

        template = self.env.get_template("report.md")
        content = template.render(**context)

        report_path = workspace.base_dir / self.config.report.filename
        report_path.write_text(content, encoding="utf-8")
        return report_path

    def _prepare_context(
        self,
        workspace: SkillWorkspace,
        results: dict[str, Any],
        test_log: Optional[str],
    ) -> dict[str, Any]:
        total = results.get("total", 0)
        passed = results.get("passed", 0)
        skipped = results.get("skipped", 0)

        applicable = total - skipped
        failed = applicable - passed
        pass_rate = (passed * 100 // applicable) if applicable > 0 else 0

        metrics = None
        if workspace.skill_md_path.exists():
            metrics = skill_metrics(workspace.skill_md_path.read_text())

        return {
            "title": self.config.report.title,
            "skill_name": workspace.skill_name,
            "test_type": results.get("test_type", "full"),
            "runner": results.get("runner", ""),
            "generated_at": datetime.now(timezone.utc),
            "workspace": workspace,
            # Statistics
            "total": total,
            "passed": passed,
            "failed": failed,
            "skipped": skipped,
            "applicable": applicable,
            "pass_rate": pass_rate,
            "duration_ms": results.get("duration_ms", 0),
            # Details
            "results": results.get("results", []),
            "failures": results.get("failures", []),
            "agent": results.get("agent"),
            "test_log": test_log,
            "metrics": metrics,
            "diff_lines": self._diff(workspace),
            "version": __version__,
        }

    def _diff(self, workspace: SkillWorkspace) -> Optional[list[str]]:
        """First lines of the unified diff between the original and tested SKILL.md."""
        original_md = workspace.original_copy_path / "SKILL.md"
        current_md = workspace.skill_md_path
        if not (original_md.exists() and current_md.exists()):
            return None

        original = original_md.read_text()
        current = current_md.read_text()
        if original == current:
            return None

        diff = difflib.unified_diff(
            original.splitlines(),
            current.splitlines(),
            fromfile=str(original_md),
            tofile=str(current_md),
            lineterm="",
        )
        return list(diff)[: self.config.report.diff_lines]

    @staticmethod
    def _format_duration(ms: int) -> str:
        """Format duration in milliseconds to human-readable string."""
        if ms < 1000:
            return f"{ms}ms"
        elif ms < 60000:
            return f"{ms / 1000:.2f}s"
        else:
            minutes = ms // 60000
            seconds = (ms % 60000) / 1000
            return f"{minutes}m {seconds:.1f}s"

    @staticmethod
    def _format_datetime(dt: datetime) -> str:
        """Format a UTC datetime."""
        return dt.strftime("%Y-%m-%d %H:%M:%S UTC")

    @staticmethod
    def _format_percentage(value: float) -> str:
        """Format a whole-number percentage."""
        return f"{value}%"
