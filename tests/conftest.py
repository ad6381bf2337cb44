"""Shared fixtures: a small project holding one well-formed skill."""

import pytest

VALID_SKILL = """\
# Demo Skill

## Quick Start

Load references/skill-workflow.md first and apply the 80% rule.

## When to Use

Use when editing other skills.

## Workflow

#### Step 1
GATE 1: inventory every file (Phase 1).
GATE 2B: the NON-DELETABLE sections listed below must stay.
REFUSE IMMEDIATELY when asked to remove them.
GATE 2B is self-protecting.
DO NOT PROCEED to editing UNTIL all gates pass.

#### Step 4
Make the Approved Changes only after explicit approval from the user.
"""

PLAIN_SKILL = """\
# Plain Skill

## Quick Start

See references/usage.md.

## When to Use

Anytime.

## Implementation

Nothing special.
"""


@pytest.fixture
def project(tmp_path):
    """A project directory with skills/demo and skills/plain."""
    root = tmp_path / "project"
    for name, content in (("demo", VALID_SKILL), ("plain", PLAIN_SKILL)):
        skill = root / "skills" / name
        (skill / "references").mkdir(parents=True)
        (skill / "SKILL.md").write_text(content)
        (skill / "references" / "skill-workflow.md").write_text("# Workflow\n")
    return root
