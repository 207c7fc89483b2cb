"""
LLM Task Agent - CLI Entry Point.

Configuration Priority:
    1. CLI arguments (--model, --api-url, etc.)
    2. Config file (config.yaml)
    3. Environment variables (LLM_TASK_AGENT__LLM__MODEL, etc.)

Usage:
    llm-task-agent run --task "compare the three most popular Python web frameworks"
    llm-task-agent run -t "find the Python 3.13 release date" --max-steps 5 --visible
    llm-task-agent tools
"""

import asyncio
from typing import Any, Dict, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from llm_task_agent import __version__
from llm_task_agent.config import load_config
from llm_task_agent.config.settings import Settings
from llm_task_agent.core.agent import Agent
from llm_task_agent.core.orchestrator import RunResult, TerminationReason
from llm_task_agent.core.planner import Step, StepStatus
from llm_task_agent.exceptions import ConfigurationError, TaskAgentError
from llm_task_agent.llm.openai_provider import OpenAIProvider
from llm_task_agent.utils.logging import setup_logging

# Create the CLI app
app = typer.Typer(
    name="llm-task-agent",
    help="Step-wise task agent with search, browser, file and code tools",
    add_completion=False,
)

console = Console()

# Terminations that exit with code 0
CLEAN_TERMINATIONS = {TerminationReason.GOAL_SATISFIED, TerminationReason.BUDGET_EXHAUSTED}


def _load_settings(
    config: Optional[str],
    overrides: Dict[str, Any],
) -> Settings:
    try:
        return load_config(config_path=config, **overrides)
    except ConfigurationError as e:
        console.print(f"[red]Configuration error: {e}[/red]")
        raise typer.Exit(1)


@app.command()
def run(
    task: str = typer.Option(..., "--task", "-t", help="Natural language task to accomplish"),
    max_steps: Optional[int] = typer.Option(None, "--max-steps", help="Maximum outer-loop steps"),
    browser_steps: Optional[int] = typer.Option(None, "--browser-steps", help="Maximum atomic actions per browser call"),
    model: Optional[str] = typer.Option(None, "--model", "-m", help="LLM model (default: from config)"),
    api_url: Optional[str] = typer.Option(None, "--api-url", help="LLM API base URL (default: from config)"),
    output_dir: Optional[str] = typer.Option(None, "--output-dir", "-o", help="Directory for run artifacts"),
    visible: bool = typer.Option(False, "--visible", help="Run with visible browser"),
    no_report: bool = typer.Option(False, "--no-report", help="Skip report.md generation"),
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Path to config.yaml"),
    verbose: bool = typer.Option(False, "--verbose", help="Enable verbose output"),
):
    """
    Accomplish a task step by step.

    Exits with 0 when the goal is satisfied or the step budget runs out,
    and 1 on planner or tool failure.

    Examples:
        llm-task-agent run -t "summarize the asyncio docs" --max-steps 8
        llm-task-agent run -t "log the title of example.com" --visible --browser-steps 5
    """
    overrides: Dict[str, Any] = {}
    if model:
        overrides.setdefault("llm", {})["model"] = model
    if api_url:
        overrides.setdefault("llm", {})["base_url"] = api_url
    if max_steps is not None:
        overrides.setdefault("agent", {})["max_steps"] = max_steps
    if output_dir:
        overrides.setdefault("agent", {})["output_dir"] = output_dir
    if no_report:
        overrides.setdefault("agent", {})["generate_report"] = False
    if browser_steps is not None:
        overrides.setdefault("browser", {})["max_steps"] = browser_steps
    if visible:
        overrides.setdefault("browser", {})["headless"] = False

    settings = _load_settings(config, overrides)
    setup_logging(
        level="DEBUG" if verbose else settings.logging.level,
        log_file=settings.logging.file,
        json_format=settings.logging.json_format,
        fmt=settings.logging.format,
    )

    console.print(Panel.fit(
        f"[bold blue]LLM Task Agent[/bold blue]\n"
        f"[dim]Model:[/dim] {settings.llm.model}\n"
        f"[dim]Max steps:[/dim] {settings.agent.max_steps}\n"
        f"[dim]Task:[/dim] {task}",
        border_style="blue",
    ))

    try:
        result, output = asyncio.run(_run_async(task, settings))
    except TaskAgentError as e:
        _print_error(e.to_dict(), verbose)
        raise typer.Exit(1)

    _print_result(result, output, verbose)
    if result.termination not in CLEAN_TERMINATIONS:
        raise typer.Exit(1)


async def _run_async(task: str, settings: Settings) -> tuple[RunResult, Optional[str]]:
    """Run the agent with a live progress line and guaranteed cleanup."""
    async with Agent(settings=settings) as agent:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
            transient=True,
        ) as progress:
            progress_task = progress.add_task("Planning...", total=None)

            def on_step_start(step: Step) -> None:
                progress.update(progress_task, description=f"Step {step.id}: {step.description}")

            def on_step_end(step: Step) -> None:
                mark = "[green]✓[/green]" if step.status is StepStatus.COMPLETED else "[red]✗[/red]"
                progress.console.print(f"{mark} Step {step.id} [dim]({step.tool or '?'})[/dim] {step.description}")
                progress.update(progress_task, description="Planning...")

            result = await agent.run(task, on_step_start=on_step_start, on_step_end=on_step_end)

        output = str(agent.last_output_dir) if agent.last_output_dir else None
    return result, output


def _print_error(payload: Dict[str, Any], verbose: bool) -> None:
    console.print(f"\n[red]Error ({payload['type']}): {escape(payload['message'])}[/red]")
    if verbose and payload["details"]:
        console.print(f"  Details: {payload['details']}", markup=False)


def _print_result(result: RunResult, output: Optional[str], verbose: bool = False) -> None:
    if result.success:
        console.print("\n[green]✓ Goal satisfied[/green]")
    elif result.termination is TerminationReason.BUDGET_EXHAUSTED:
        console.print("\n[yellow]⚠ Step budget exhausted[/yellow]")
    else:
        console.print(f"\n[red]✗ Failed ({result.termination.value})[/red]")

    console.print(f"  {result.message}")
    if result.completion_reason:
        console.print(f"  Reason: {result.completion_reason}")
    if result.error_details:
        console.print(f"  Error ({result.error_details['type']}): {result.error}", markup=False)
        if verbose and result.error_details["details"]:
            console.print(f"  Details: {result.error_details['details']}", markup=False)
    elif result.error:
        console.print(f"  Error: {result.error}", markup=False)
    console.print(f"  Steps: {len(result.steps)}  Duration: {result.duration_seconds:.1f}s")
    if output:
        console.print(f"  Artifacts: {output}")


@app.command()
def tools(
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Path to config.yaml"),
):
    """List the capabilities available to the planner."""
    settings = _load_settings(config, {})

    async def describe():
        async with Agent(settings=settings) as agent:
            return agent.registry.describe()

    descriptions = asyncio.run(describe())

    table = Table(show_header=True, header_style="bold cyan", box=None)
    table.add_column("Tool", style="green", no_wrap=True)
    table.add_column("Description", style="dim")
    table.add_column("Parameters")
    for tool in descriptions:
        params = tool["parameters"].get("properties", {})
        required = set(tool["parameters"].get("required", []))
        names = [f"{name}*" if name in required else name for name in params]
        table.add_row(tool["name"], tool["description"], ", ".join(names))
    console.print(table)


@app.command()
def version():
    """Show version information."""
    console.print(f"[bold]LLM Task Agent[/bold] v{__version__}")


@app.command()
def health(
    api_url: Optional[str] = typer.Option(None, "--api-url", help="LLM API base URL"),
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Path to config.yaml"),
):
    """Check if the LLM API is available."""
    settings = _load_settings(config, {})
    base_url = api_url or settings.llm.base_url

    async def check() -> bool:
        llm = OpenAIProvider(
            base_url=base_url,
            model=settings.llm.model,
            api_key=settings.llm.api_key.get_secret_value() if settings.llm.api_key else None,
        )
        try:
            return await llm.health_check()
        finally:
            await llm.close()

    if asyncio.run(check()):
        console.print(f"[green]✓ LLM API at {base_url} is healthy[/green]")
    else:
        console.print(f"[red]✗ LLM API at {base_url} is not responding[/red]")
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
