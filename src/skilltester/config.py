"""Configuration management for SkillTester."""

import json
from pathlib import Path

from pydantic import BaseModel, Field, field_validator


class SkillConfig(BaseModel):
    """Where skills are looked up."""

    source_dir: str = Field(default=".", description="Project directory containing skills/")
    search_paths: list[str] = Field(
        default_factory=lambda: ["skills", "tests/fixtures", ".claude/skills"],
        description="Directories (relative to source_dir) searched for a skill",
    )
    include_home: bool = Field(default=True, description="Also search ~/.claude/skills")


class WorkspaceConfig(BaseModel):
    """Isolated test workspace configuration."""

    base_dir: str = Field(default="/tmp/skill-test", description="Parent directory for test workspaces")


class AgentConfig(BaseModel):
    """Agent execution phase configuration."""

    runner: str = Field(default="claude", description="Agent CLI used to exercise the skill (claude, gemini)")
    fixtures_dir: str = Field(default="tests/fixtures", description="Directory holding <skill>/task.txt fixtures")
    timeout_seconds: int = Field(default=600, description="Agent execution timeout")

    @field_validator("runner")
    @classmethod
    def validate_runner(cls, v: str) -> str:
        allowed = {"claude", "gemini"}
        if v.lower() not in allowed:
            raise ValueError(f"Runner must be one of: {allowed}")
        return v.lower()

    @field_validator("timeout_seconds")
    @classmethod
    def validate_timeout(cls, v: int) -> int:
        if v < 1:
            raise ValueError("Timeout must be at least 1 second")
        return v


class SuiteConfig(BaseModel):
    """YAML suite configuration."""

    suites_dir: str = Field(default="suites", description="Directory holding <suite>.yaml files")


class ReportConfig(BaseModel):
    """Report generation configuration."""

    filename: str = Field(default="TEST_REPORT.md", description="Report filename inside the workspace")
    title: str = Field(default="Test Report", description="Report title prefix")
    diff_lines: int = Field(default=50, description="Maximum diff lines shown in the file comparison")


class SkillTesterConfig(BaseModel):
    """Main configuration for SkillTester."""

    skill: SkillConfig = Field(default_factory=SkillConfig)
    workspace: WorkspaceConfig = Field(default_factory=WorkspaceConfig)
    agent: AgentConfig = Field(default_factory=AgentConfig)
    suites: SuiteConfig = Field(default_factory=SuiteConfig)
    report: ReportConfig = Field(default_factory=ReportConfig)

    @classmethod
    def from_file(cls, path: Path | str) -> "SkillTesterConfig":
        """Load configuration from a JSON file."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        with open(path, "r") as f:
            data = json.load(f)

        return cls.model_validate(data)

    @classmethod
    def find_and_load(cls, start_dir: Path | str | None = None) -> "SkillTesterConfig":
        """Find and load configuration file, searching up the directory tree."""
        if start_dir is None:
            start_dir = Path.cwd()
        else:
            start_dir = Path(start_dir)

        config_names = ["skilltester.json", ".skilltester.json"]

        current = start_dir.resolve()
        while True:
            for name in config_names:
                config_path = current / name
                if config_path.exists():
                    return cls.from_file(config_path)
            if current == current.parent:
                break
            current = current.parent

        raise FileNotFoundError(
            "No configuration file found. Create skilltester.json or run 'skilltester init'"
        )

    @classmethod
    def load_or_default(cls, start_dir: Path | str | None = None) -> "SkillTesterConfig":
        """Like find_and_load, but fall back to defaults when no file exists."""
        try:
            return cls.find_and_load(start_dir)
        except FileNotFoundError:
            return get_default_config()

    def to_file(self, path: Path | str) -> None:
        """Save configuration to a JSON file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w") as f:
            json.dump(self.model_dump(), f, indent=2)

    def get_absolute_paths(self, base_dir: Path | str | None = None) -> dict[str, Path]:
        """Get absolute paths for various config paths."""
        if base_dir is None:
            base_dir = Path.cwd()
        else:
            base_dir = Path(base_dir)

        source_dir = (base_dir / self.skill.source_dir).resolve()
        return {
            "source_dir": source_dir,
            "workspace_dir": Path(self.workspace.base_dir).expanduser().resolve(),
            "fixtures_dir": (source_dir / self.agent.fixtures_dir).resolve(),
            "suites_dir": (source_dir / self.suites.suites_dir).resolve(),
        }


def get_default_config() -> SkillTesterConfig:
    """Return a default configuration."""
    return SkillTesterConfig(
        skill=SkillConfig(source_dir="."),
        agent=AgentConfig(runner="claude"),
    )


def create_example_config(output_path: Path | str) -> Path:
    """Create an example configuration file."""
    output_path = Path(output_path)
    config = get_default_config()
    config.to_file(output_path)
    return output_path
