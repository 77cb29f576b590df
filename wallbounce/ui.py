"""
Terminal rendering for collaboration results.
"""

from rich.box import ROUNDED
from rich.console import Console, Group, RenderableType
from rich.markdown import Markdown
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .config import Config
from .orchestration import CollaborationResult, CollaborationStep

console = Console()


class StepTableRenderer:
    """Renders the step history of a collaboration."""

    def __init__(self, steps: tuple[CollaborationStep, ...], preview_chars: int = 80):
        self.steps = steps
        self.preview_chars = preview_chars

    def __rich__(self) -> RenderableType:
        table = Table(box=ROUNDED, show_header=True, header_style="bold cyan")
        table.add_column("#", width=3, justify="right")
        table.add_column("Status", width=3)
        table.add_column("Model", style="yellow")
        table.add_column("Role", style="dim")
        table.add_column("Latency", justify="right")
        table.add_column("Output")

        for step in self.steps:
            if step.succeeded:
                status = Text("✓", style="green")
                detail = Text(step.preview(self.preview_chars).replace("\n", " "))
            else:
                status = Text("✗", style="red")
                detail = Text(f"{step.error.kind}: {step.error.message}", style="red")
            table.add_row(
                str(step.step_number),
                status,
                step.actor,
                step.role,
                f"{step.latency_ms:.0f}ms",
                detail,
            )
        return table


class WallBounceUI:
    def print_banner(self, models: list[str]):
        console.print()
        console.print(f"[bold blue]╭─ Wall-Bounce ─{'─' * 44}[/bold blue]")
        console.print(f"[bold blue]│[/bold blue] Models: [cyan]{' → '.join(models)}[/cyan]")
        console.print(f"[bold blue]╰──────────────────────────────────────────────────[/bold blue]")

    def print_result(self, result: CollaborationResult):
        meta = result.metadata
        summary = Text.assemble(
            ("Bounces: ", "dim"), (str(result.wall_bounce_count), "cyan"),
            ("   Succeeded: ", "dim"), (str(len(meta.successful_models)), "green"),
            ("   Failed: ", "dim"), (str(len(meta.failed_models)), "red" if meta.failed_models else "dim"),
            ("   Time: ", "dim"), (f"{meta.processing_time_ms:.0f}ms", "cyan"),
            ("   Tokens: ", "dim"), (str(meta.total_tokens), "cyan"),
            ("   Cost: ", "dim"), (f"${meta.total_cost:.4f}", "cyan"),
        )

        console.print(StepTableRenderer(result.collaboration_history))
        console.print(summary)
        console.print()
        console.print(Panel(
            Markdown(result.final_response),
            title=f"[bold]Final response[/bold] [dim]({meta.strategy})[/dim]",
            border_style="blue",
            box=ROUNDED,
        ))

        if result.suggested_followups:
            followups = Group(*[Text(f"• {s}", style="dim") for s in result.suggested_followups])
            console.print(Panel(followups, title="Follow-ups", border_style="dim", box=ROUNDED))

    def print_catalog(self, config: Config):
        table = Table(title="Model catalog", show_header=True, header_style="bold cyan")
        table.add_column("Identifier", style="yellow")
        table.add_column("Provider")
        table.add_column("Model name", style="green")
        table.add_column("Bound")

        for name, model in config.models.items():
            bound = "[green]✓[/green]" if model.is_bound() else "[dim]not configured[/dim]"
            table.add_row(name, model.provider, model.model_name or name, bound)

        console.print(table)

    def print_error(self, error: str):
        console.print()
        console.print(f"[red]╭─ ✗ Error ─{'─' * 48}[/red]")
        for line in error.split("\n")[:10]:
            console.print(f"[red]│[/red] {line[:90]}")
        console.print(f"[red]╰──────────────────────────────────────────────────[/red]")


ui = WallBounceUI()
