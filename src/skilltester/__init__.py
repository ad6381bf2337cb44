"""
SkillTester - spec-driven verification of agent skills.

This package provides tools to:
- Declare nested describe/it specs with skip conditions and hooks
- Copy a skill into an isolated workspace and exercise it through an agent CLI
- Check the result with bundled specs or YAML suites
- Generate markdown test reports
"""

__version__ = "0.1.0"
__author__ = "SkillTester Team"
