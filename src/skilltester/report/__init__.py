"""Markdown test reports."""

from skilltester.report.generator import ReportGenerator, skill_metrics

__all__ = ["ReportGenerator", "skill_metrics"]
