"""Agent execution phase.

Runs a fixture's task against the skill through an agent CLI (``claude`` or
``gemini``) so that specs can afterwards inspect what the agent did to the
workspace copy of the skill.
"""

import re
import shutil
import subprocess
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml

FRONTMATTER_RE = re.compile(r"\A---(.*?)---", re.DOTALL)

PROMPT_TEMPLATE = (
    "Using the skill at '{skill_path}', please perform the following task "
    "on the files in the current directory: {task}"
)


@dataclass
class AgentRunResult:
    """Outcome of the agent execution phase."""

    success: bool
    skipped: bool = False
    reason: str = ""
    command: list[str] = field(default_factory=list)
    stdout: str = ""
    stderr: str = ""
    exit_code: Optional[int] = None
    duration_ms: int = 0
    warnings: list[str] = field(default_factory=list)

    @property
    def error_output(self) -> str:
        return self.stderr or self.stdout

    def to_dict(self) -> dict:
        """Convert to dictionary format."""
        return {
            "success": self.success,
            "skipped": self.skipped,
            "reason": self.reason,
            "command": self.command,
            "stdout": self.stdout,
            "stderr": self.stderr,
            "exit_code": self.exit_code,
            "duration_ms": self.duration_ms,
            "warnings": self.warnings,
        }


def read_allowed_tools(skill_md: Path) -> str:
    """Return the ``allowed-tools`` frontmatter entry as a comma separated string.

    Raises:
        yaml.YAMLError: If the frontmatter is not valid YAML
    """
    if not skill_md.exists():
        return ""

    found = FRONTMATTER_RE.search(skill_md.read_text())
    if not found:
        return ""

    frontmatter = yaml.safe_load(found.group(1))
    if not isinstance(frontmatter, dict) or not frontmatter.get("allowed-tools"):
        return ""

    tools = frontmatter["allowed-tools"]
    if isinstance(tools, list):
        return ",".join(str(t) for t in tools)
    return str(tools).strip()


class AgentExecutor:
    """Executes a skill task through an agent CLI and captures output."""

    def __init__(
        self,
        skill_name: str,
        skill_path: Path,
        fixture_path: Path,
        runner: str = "claude",
        timeout_seconds: int = 600,
    ):
        """Initialize agent executor.

        Args:
            skill_name: Name of the skill under test
            skill_path: Workspace copy of the skill (also the working directory)
            fixture_path: Directory containing task.txt
            runner: Agent CLI to use ("claude" or "gemini")
            timeout_seconds: Maximum time to allow for execution
        """
        self.skill_name = skill_name
        self.skill_path = Path(skill_path)
        self.fixture_path = Path(fixture_path)
        self.runner = (runner or "claude").lower()
        self.timeout_seconds = timeout_seconds

    @property
    def executable(self) -> str:
        return "gemini" if self.runner == "gemini" else "claude"

    def build_command(self, task: str, allowed_tools: str = "") -> list[str]:
        """Build the agent command line for a task."""
        prompt = PROMPT_TEMPLATE.format(skill_path=self.skill_path, task=task)

        if self.executable == "gemini":
            cmd = [self.executable, prompt]
            if allowed_tools:
                cmd.extend(["--allowed-tools", allowed_tools])
        else:
            cmd = [self.executable, "-p", prompt]
            if allowed_tools:
                cmd.extend(["--allowedTools", allowed_tools])
        return cmd

    def execute(self) -> AgentRunResult:
        """Run the fixture task, or skip when there is nothing to run.

        A missing task.txt or a missing agent executable skips the phase
        without failing it.
        """
        task_file = self.fixture_path / "task.txt"
        if not task_file.exists():
            return AgentRunResult(success=True, skipped=True, reason="No task.txt found in fixture")

        task = task_file.read_text().strip()

        warnings = []
        try:
            allowed_tools = read_allowed_tools(self.skill_path / "SKILL.md")
        except yaml.YAMLError as e:
            allowed_tools = ""
            warnings.append(f"Failed to parse frontmatter for tools: {e}")

        if shutil.which(self.executable) is None:
            return AgentRunResult(
                success=True,
                skipped=True,
                reason=f"Command '{self.executable}' not found (mock mode)",
                warnings=warnings,
            )

        cmd = self.build_command(task, allowed_tools)
        start_time = time.time()

        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                cwd=self.skill_path,
                timeout=self.timeout_seconds,
            )

            return AgentRunResult(
                success=result.returncode == 0,
                command=cmd,
                stdout=result.stdout,
                stderr=result.stderr,
                exit_code=result.returncode,
                duration_ms=int((time.time() - start_time) * 1000),
                warnings=warnings,
            )

        except subprocess.TimeoutExpired:
            return AgentRunResult(
                success=False,
                command=cmd,
                stderr=f"Agent execution timed out after {self.timeout_seconds} seconds",
                exit_code=-1,
                duration_ms=self.timeout_seconds * 1000,
                warnings=warnings,
            )

        except OSError as e:
            return AgentRunResult(
                success=False,
                command=cmd,
                stderr=f"Error executing agent command: {e}",
                exit_code=-1,
                duration_ms=int((time.time() - start_time) * 1000),
                warnings=warnings,
            )
