"""Command-line interface for SkillTester."""

import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from skilltester import __version__
from skilltester.config import SkillTesterConfig, create_example_config
from skilltester.specs import TEST_TYPES


console = Console()


def print_banner() -> None:
    """Print the SkillTester banner."""
    console.print(
        Panel.fit(
            "[bold blue]SkillTester[/bold blue] - Skill Verification",
            subtitle=f"v{__version__}",
        )
    )


def load_config(config_path: Optional[str]) -> tuple[SkillTesterConfig, Path]:
    """Load the config file, or defaults when none is found."""
    if config_path:
        config = SkillTesterConfig.from_file(config_path)
        return config, Path(config_path).resolve().parent
    return SkillTesterConfig.load_or_default(), Path.cwd()


def parse_context(pairs: tuple[str, ...]) -> dict[str, str]:
    """Parse KEY=VALUE pairs into a context mapping."""
    data = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise click.BadParameter(f"Expected KEY=VALUE, got {pair!r}", param_hint="--context")
        data[key] = value
    return data


@click.group()
@click.version_option(version=__version__, prog_name="skilltester")
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=False),
    help="Path to configuration file (default: skilltester.json)",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.pass_context
def main(ctx: click.Context, config: Optional[str], verbose: bool) -> None:
    """SkillTester - verify agent skills with describe/it specs.

    Copies a skill into an isolated workspace, optionally runs a fixture
    task through an agent CLI, then checks the result.
    """
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["config_path"] = config


@main.command()
@click.option(
    "--output",
    "-o",
    type=click.Path(),
    default="skilltester.json",
    help="Output path for configuration file",
)
@click.option("--force", "-f", is_flag=True, help="Overwrite existing configuration")
@click.pass_context
def init(ctx: click.Context, output: str, force: bool) -> None:
    """Initialize a new SkillTester configuration file."""
    print_banner()

    output_path = Path(output)
    if output_path.exists() and not force:
        console.print(f"[yellow]Configuration file already exists:[/yellow] {output_path}")
        console.print("Use --force to overwrite")
        sys.exit(1)

    try:
        create_example_config(output_path)
        console.print(f"[green]Created configuration file:[/green] {output_path}")
        console.print("\nNext steps:")
        console.print("  1. Point skill.source_dir at the project holding skills/")
        console.print("  2. Add tests/fixtures/<skill>/task.txt to exercise a skill (optional)")
        console.print("  3. Run [bold]skilltester run <skill>[/bold]")
    except OSError as e:
        console.print(f"[red]Error creating configuration:[/red] {e}")
        sys.exit(1)


@main.command()
@click.argument("skill_name")
@click.option(
    "--type",
    "-t",
    "test_type",
    type=click.Choice(TEST_TYPES),
    default="full",
    help="Which bundled specs to run",
)
@click.option("--report/--no-report", default=False, help="Write TEST_REPORT.md into the workspace")
@click.option("--runner", "-r", type=click.Choice(["claude", "gemini"]), help="Agent CLI to use")
@click.option("--source-dir", "-s", type=click.Path(file_okay=False), help="Project directory containing skills/")
@click.option("--no-agent", is_flag=True, help="Skip the agent execution phase")
@click.pass_context
def run(
    ctx: click.Context,
    skill_name: str,
    test_type: str,
    report: bool,
    runner: Optional[str],
    source_dir: Optional[str],
    no_agent: bool,
) -> None:
    """Test SKILL_NAME in an isolated workspace."""
    print_banner()

    verbose = ctx.obj.get("verbose", False)
    try:
        config, base_dir = load_config(ctx.obj.get("config_path"))
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)

    if runner:
        config.agent.runner = runner
    if source_dir:
        config.skill.source_dir = str(Path(source_dir).resolve())

    from skilltester.core.runner import SkillTestRunner
    from skilltester.core.workspace import SkillNotFoundError

    run_console = Console(record=True) if report else console
    test_runner = SkillTestRunner(
        config,
        skill_name,
        test_type=test_type,
        base_dir=base_dir,
        console=run_console,
        verbose=verbose,
    )

    console.print(f"\n=== Testing: [bold]{skill_name}[/bold] ===")
    console.print(f"Test Type: {test_type}")
    console.print(f"Runner: {config.agent.runner}\n")

    try:
        results = test_runner.run(execute_agent=not no_agent)
    except SkillNotFoundError as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)

    workspace = test_runner.workspace

    if report:
        from skilltester.report.generator import ReportGenerator

        console.print("\n[bold]Generating report...[/bold]")
        try:
            report_path = ReportGenerator(config).generate(
                workspace, results, test_log=run_console.export_text()
            )
            console.print(f"[green]Report generated:[/green] {report_path}")
        except OSError as e:
            console.print(f"[red]Error generating report:[/red] {e}")

    if results["failed"] == 0:
        console.print("\n[green]✓ ALL TESTS PASSED[/green]")
        console.print(f"Test environment preserved at: {workspace.base_dir}")
    else:
        console.print("\n[red]✗ SOME TESTS FAILED[/red]")
        console.print(f"Test directory: {workspace.base_dir}")
        sys.exit(1)


@main.command()
@click.argument("spec_files", nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False))
@click.option("--context", "-x", "context_pairs", multiple=True, help="Context value as KEY=VALUE")
def specs(spec_files: tuple[str, ...], context_pairs: tuple[str, ...]) -> None:
    """Run SPEC_FILES against an explicit context mapping."""
    from skilltester import spec

    context_data = parse_context(context_pairs)

    try:
        reporter = spec.run([Path(p) for p in spec_files], context_data, console=console)
    except spec.SpecLoadError as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)

    reporter.print_summary()
    if not reporter.success:
        sys.exit(1)


@main.command()
@click.argument("skill_md", type=click.Path())
@click.argument("skill_path", type=click.Path())
@click.argument("original_path", type=click.Path())
@click.option("--type", "-t", "test_type", default="full", help="Test type or suite name")
@click.option("--suites-dir", type=click.Path(file_okay=False), help="Directory holding <suite>.yaml files")
@click.pass_context
def suite(
    ctx: click.Context,
    skill_md: str,
    skill_path: str,
    original_path: str,
    test_type: str,
    suites_dir: Optional[str],
) -> None:
    """Run YAML suites against SKILL_MD."""
    from skilltester.core.suites import SuiteEngine, suites_for

    try:
        config, base_dir = load_config(ctx.obj.get("config_path"))
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)

    suites_path = Path(suites_dir) if suites_dir else config.get_absolute_paths(base_dir)["suites_dir"]

    engine = SuiteEngine(skill_md, skill_path, original_path, suites_path, console=console)
    engine.run_suites(suites_for(test_type))
    _display_suite_summary(engine.stats)

    if engine.stats["failed"] > 0:
        sys.exit(1)


def _display_suite_summary(stats: dict) -> None:
    """Display a summary of suite results."""
    console.print("\n" + "=" * 50)
    console.print("[bold]Test Summary[/bold]")
    console.print("=" * 50)

    table = Table(show_header=False, box=None)
    table.add_column("Metric", style="bold")
    table.add_column("Value", justify="right")

    table.add_row("Total Tests", str(stats["total"]))
    table.add_row("Passed", f"[green]{stats['passed']}[/green]")
    table.add_row("Failed", f"[red]{stats['failed']}[/red]")
    table.add_row("Skipped", f"[yellow]{stats['skipped']}[/yellow]")
    if stats["applicable"] > 0:
        table.add_row("Applicable", f"{stats['applicable']} (skipped {stats['skipped']})")

    console.print(table)

    if stats["failed"] == 0:
        console.print("\n[green]✓ ALL TESTS PASSED[/green]")
    else:
        console.print("\n[red]✗ SOME TESTS FAILED[/red]")


if __name__ == "__main__":
    main()
