"""Skill test orchestration."""

from pathlib import Path
from typing import Any, Optional

from rich.console import Console

from skilltester import spec
from skilltester.config import SkillTesterConfig
from skilltester.core.executor import AgentExecutor, AgentRunResult
from skilltester.core.workspace import SkillWorkspace, WorkspaceBuilder
from skilltester.spec.reporter import ConsoleReporter
from skilltester.specs import spec_files_for


class SkillTestRunner:
    """Sets up a workspace, exercises the skill and runs the specs against it."""

    def __init__(
        self,
        config: SkillTesterConfig,
        skill_name: str,
        test_type: str = "full",
        base_dir: Optional[Path] = None,
        spec_files: Optional[list[Path]] = None,
        console: Optional[Console] = None,
        verbose: bool = False,
    ):
        """Initialize the test runner.

        Args:
            config: SkillTester configuration
            skill_name: Name of the skill directory to test
            test_type: full, gates-only, workflow-only or preservation-only
            base_dir: Directory the config paths are relative to
            spec_files: Spec files to run instead of the bundled ones
            console: Console for progress output
            verbose: Print diagnostic details
        """
        self.config = config
        self.skill_name = skill_name
        self.test_type = test_type
        self.base_dir = base_dir or Path.cwd()
        self.spec_files = spec_files
        self.console = console or Console()
        self.verbose = verbose

        self.paths = config.get_absolute_paths(self.base_dir)
        self.workspace: Optional[SkillWorkspace] = None
        self.agent_result: Optional[AgentRunResult] = None
        self.reporter: Optional[ConsoleReporter] = None

    def setup_workspace(self) -> SkillWorkspace:
        """Copy the skill into a fresh workspace.

        Raises:
            SkillNotFoundError: If the skill cannot be found
        """
        builder = WorkspaceBuilder(
            self.skill_name,
            source_dir=self.paths["source_dir"],
            base_dir=self.paths["workspace_dir"],
            search_paths=self.config.skill.search_paths,
            include_home=self.config.skill.include_home,
        )
        self.workspace = builder.create()

        if self.verbose:
            self.console.print(f"[dim]Source: {self.workspace.original_path}[/dim]")
            self.console.print(f"[dim]Workspace: {self.workspace.base_dir}[/dim]")

        return self.workspace

    def execute_agent(self) -> AgentRunResult:
        """Run the fixture task through the configured agent."""
        executor = AgentExecutor(
            self.skill_name,
            skill_path=self.workspace.skill_path,
            fixture_path=self.paths["fixtures_dir"] / self.skill_name,
            runner=self.config.agent.runner,
            timeout_seconds=self.config.agent.timeout_seconds,
        )
        self.agent_result = executor.execute()

        for warning in self.agent_result.warnings:
            self.console.print(f"[yellow]Warning:[/yellow] {warning}")

        if self.agent_result.skipped:
            self.console.print(f"[dim]Agent phase skipped: {self.agent_result.reason}[/dim]")
        elif self.agent_result.success:
            self.console.print("[green]✓[/green] Skill execution completed.")
        else:
            self.console.print(
                f"[red]✗ Skill execution failed (exit code: {self.agent_result.exit_code})[/red]"
            )
            if self.verbose:
                self.console.print(f"[dim]{self.agent_result.error_output}[/dim]")

        return self.agent_result

    def run_specs(self) -> ConsoleReporter:
        """Run the selected specs against the workspace."""
        spec_files = self.spec_files or spec_files_for(self.test_type)
        if self.verbose:
            for path in spec_files:
                self.console.print(f"[dim]Spec: {path}[/dim]")

        self.reporter = spec.run(spec_files, self.workspace.context_data(), console=self.console)
        self.reporter.print_summary()
        return self.reporter

    def run(self, execute_agent: bool = True) -> dict[str, Any]:
        """Run every phase and return the results dictionary."""
        self.setup_workspace()
        if execute_agent:
            self.execute_agent()
        self.run_specs()
        return self.get_results()

    def get_results(self) -> dict[str, Any]:
        """Collect results of the last run."""
        if self.reporter is None:
            return {}

        return {
            "skill_name": self.skill_name,
            "test_type": self.test_type,
            "runner": self.config.agent.runner,
            "workspace": self.workspace.to_dict() if self.workspace else None,
            **self.reporter.stats,
            "duration_ms": self.reporter.duration_ms,
            "results": [r.to_dict() for r in self.reporter.results],
            "failures": [f.to_dict() for f in self.reporter.failures],
            "agent": self.agent_result.to_dict() if self.agent_result else None,
        }
