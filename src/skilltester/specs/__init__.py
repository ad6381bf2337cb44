"""Specs shipped with skilltester."""

from pathlib import Path

SPECS_DIR = Path(__file__).parent

SPEC_MAP = {
    "gates-only": ["preservation_gates_spec.py"],
    "workflow-only": ["workflow_compliance_spec.py"],
    "preservation-only": ["content_preservation_spec.py"],
    "full": [
        "preservation_gates_spec.py",
        "workflow_compliance_spec.py",
        "content_preservation_spec.py",
    ],
}

TEST_TYPES = list(SPEC_MAP)


def spec_files_for(test_type: str) -> list[Path]:
    """Return the bundled spec files for a test type. Unknown types run everything."""
    key = test_type[2:] if test_type.startswith("--") else test_type
    names = SPEC_MAP.get(key, SPEC_MAP["full"])
    return [SPECS_DIR / name for name in names]
