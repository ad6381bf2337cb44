"""Isolated workspaces for testing a skill.

A workspace is a throwaway directory holding two copies of the skill: ``skill/``
which the agent is allowed to modify, and ``original_copy/`` which stays as it
was so specs can compare against it. ``original_path.txt`` records where the
skill came from.
"""

import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

DEFAULT_BASE_DIR = Path("/tmp/skill-test")
DEFAULT_SEARCH_PATHS = ["skills", "tests/fixtures", ".claude/skills"]
ORIGINAL_PATH_FILE = "original_path.txt"


class SkillNotFoundError(Exception):
    """Raised when no directory for the requested skill exists."""

    def __init__(self, skill_name: str, searched: list[Path]):
        self.skill_name = skill_name
        self.searched = searched
        super().__init__(
            f"Skill not found: {skill_name} (searched: {', '.join(str(p) for p in searched)})"
        )


@dataclass
class SkillWorkspace:
    """Paths of a prepared test workspace."""

    skill_name: str
    base_dir: Path
    original_path: Path

    @property
    def skill_path(self) -> Path:
        return self.base_dir / "skill"

    @property
    def skill_md_path(self) -> Path:
        return self.skill_path / "SKILL.md"

    @property
    def original_copy_path(self) -> Path:
        return self.base_dir / "original_copy"

    def context_data(self) -> dict[str, str]:
        """Values exposed to specs through the execution context."""
        return {
            "skill_name": self.skill_name,
            "skill_path": str(self.skill_path),
            "skill_md_path": str(self.skill_md_path),
            "original_path": str(self.original_path),
            "original_copy_path": str(self.original_copy_path),
        }

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {"base_dir": str(self.base_dir), **self.context_data()}

    @classmethod
    def load(cls, base_dir: Path | str, skill_name: Optional[str] = None) -> "SkillWorkspace":
        """Open an existing workspace directory."""
        base_dir = Path(base_dir)
        skill_name = skill_name or base_dir.name

        marker = base_dir / ORIGINAL_PATH_FILE
        if marker.exists():
            original_path = Path(marker.read_text().strip())
        else:
            original_path = base_dir / "skill"

        return cls(skill_name=skill_name, base_dir=base_dir, original_path=original_path)


class WorkspaceBuilder:
    """Finds a skill and copies it into a fresh workspace."""

    def __init__(
        self,
        skill_name: str,
        source_dir: Path | str = ".",
        base_dir: Path | str = DEFAULT_BASE_DIR,
        search_paths: Optional[list[str]] = None,
        include_home: bool = True,
    ):
        """Initialize the builder.

        Args:
            skill_name: Directory name of the skill
            source_dir: Project directory to search in
            base_dir: Parent directory for workspaces
            search_paths: Directories relative to source_dir that may hold the skill
            include_home: Also search ~/.claude/skills
        """
        self.skill_name = skill_name
        self.source_dir = Path(source_dir).expanduser().resolve()
        self.base_dir = Path(base_dir)
        self.search_paths = search_paths if search_paths is not None else DEFAULT_SEARCH_PATHS
        self.include_home = include_home

    @property
    def workspace_dir(self) -> Path:
        return self.base_dir / self.skill_name

    def candidates(self) -> list[Path]:
        paths = [self.source_dir / rel / self.skill_name for rel in self.search_paths]
        if self.include_home:
            paths.append(Path.home() / ".claude" / "skills" / self.skill_name)
        return paths

    def find_skill(self) -> Optional[Path]:
        for path in self.candidates():
            if path.is_dir():
                return path
        return None

    def create(self) -> SkillWorkspace:
        """Create the workspace, replacing any previous one for this skill.

        Raises:
            SkillNotFoundError: If no candidate directory exists
        """
        skill_path = self.find_skill()
        if skill_path is None:
            raise SkillNotFoundError(self.skill_name, self.candidates())

        workspace_dir = self.workspace_dir
        if workspace_dir.exists():
            shutil.rmtree(workspace_dir)
        workspace_dir.mkdir(parents=True)

        workspace = SkillWorkspace(
            skill_name=self.skill_name,
            base_dir=workspace_dir,
            original_path=skill_path,
        )
        shutil.copytree(skill_path, workspace.skill_path)
        shutil.copytree(skill_path, workspace.original_copy_path)
        (workspace_dir / ORIGINAL_PATH_FILE).write_text(str(skill_path))

        return workspace
