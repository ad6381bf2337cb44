"""Skill test collaborators: workspace setup, agent execution, YAML suites."""

from skilltester.core.executor import AgentExecutor, AgentRunResult
from skilltester.core.runner import SkillTestRunner
from skilltester.core.suites import SuiteEngine
from skilltester.core.workspace import SkillNotFoundError, SkillWorkspace, WorkspaceBuilder

__all__ = [
    "AgentExecutor",
    "AgentRunResult",
    "SkillNotFoundError",
    "SkillTestRunner",
    "SkillWorkspace",
    "SuiteEngine",
    "WorkspaceBuilder",
]
