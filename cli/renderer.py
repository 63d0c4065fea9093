"""
Terminal rendering for the Student Records CLI (rich tables and panels)
"""

from typing import Any, Dict, List, Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.box import ROUNDED

from cli.board import BoardState


RANK_STYLES = {
    "excellent": "bold green",
    "good": "cyan",
    "average": "yellow",
    "needs-improvement": "red",
}

RANK_LABELS = {
    "excellent": "Excellent",
    "good": "Good",
    "average": "Average",
    "needs-improvement": "Needs Improvement",
}


def format_timestamp(value: Optional[str]) -> str:
    if not value:
        return ""
    return value.replace("T", " ")[:16]


class StudentRenderer:
    """Renders board state in the terminal"""

    def __init__(self, console: Console):
        self.console = console

    def render_students(self, students: List[Dict[str, Any]], selected_id: Optional[str] = None,
                        title: str = "Students"):
        if not students:
            self.console.print("[dim]No students found.[/dim]")
            return

        table = Table(title=title, box=ROUNDED, show_lines=False)
        table.add_column("#", justify="right", style="dim")
        table.add_column("ID", style="dim", no_wrap=True)
        table.add_column("Name", style="bold")
        table.add_column("Class")
        table.add_column("Phone", no_wrap=True)
        table.add_column("Address")
        table.add_column("Rank")
        table.add_column("Created", style="dim", no_wrap=True)

        for index, student in enumerate(students, start=1):
            rank = student.get("rank", "")
            rank_style = RANK_STYLES.get(rank, "white")
            table.add_row(
                str(index),
                student["id"][:8],
                student.get("name", ""),
                student.get("class", ""),
                student.get("phone", ""),
                student.get("address", ""),
                f"[{rank_style}]{RANK_LABELS.get(rank, rank)}[/{rank_style}]",
                format_timestamp(student.get("createdAt")),
                style="reverse" if student["id"] == selected_id else None,
            )

        self.console.print(table)

    def render_stats(self, stats: Dict[str, Any]):
        if not stats:
            return
        body = (
            f"[bold]Total Students:[/bold] {stats.get('totalStudents', 0)}    "
            f"[bold]Active Classes:[/bold] {stats.get('activeClasses', 0)}    "
            f"[bold]Top Performers:[/bold] {stats.get('topPerformers', 0)}    "
            f"[bold]New This Month:[/bold] {stats.get('newThisMonth', 0)}"
        )
        self.console.print(Panel(body, title="[cyan]Overview[/cyan]", border_style="cyan"))

    def render_filters(self, state: BoardState):
        parts = [
            f"search=[cyan]{state.search or '-'}[/cyan]",
            f"class=[cyan]{state.class_filter or 'all'}[/cyan]",
            f"rank=[cyan]{state.rank_filter or 'all'}[/cyan]",
        ]
        if state.sort_column:
            direction = "desc" if state.sort_descending else "asc"
            parts.append(f"sort=[cyan]{state.sort_column} {direction}[/cyan]")
        self.console.print("[dim]Filters:[/dim] " + "  ".join(parts))

    def render_board(self, state: BoardState):
        self.render_stats(state.stats)
        self.render_filters(state)
        self.render_students(state.sorted_students(), selected_id=state.selected_id)

    def render_student(self, student: Dict[str, Any]):
        rank = student.get("rank", "")
        rank_style = RANK_STYLES.get(rank, "white")
        body = "\n".join([
            f"[bold]ID:[/bold]      {student['id']}",
            f"[bold]Class:[/bold]   {student.get('class', '')}",
            f"[bold]Phone:[/bold]   {student.get('phone', '')}",
            f"[bold]Address:[/bold] {student.get('address', '')}",
            f"[bold]Rank:[/bold]    [{rank_style}]{RANK_LABELS.get(rank, rank)}[/{rank_style}]",
            f"[dim]Created {format_timestamp(student.get('createdAt'))}, "
            f"updated {format_timestamp(student.get('updatedAt'))}[/dim]",
        ])
        self.console.print(Panel(body, title=f"[bold]{student.get('name', '')}[/bold]", border_style="blue"))

    def render_user(self, user: Dict[str, Any]):
        name = " ".join(p for p in (user.get("firstName"), user.get("lastName")) if p)
        self.console.print(f"Logged in as [bold]{user['username']}[/bold]" + (f" ({name})" if name else ""))

    def render_field_errors(self, errors: List[Dict[str, Any]]):
        """Show field errors returned by a 400"""
        table = Table(box=ROUNDED, show_header=True, border_style="red")
        table.add_column("Field", style="bold")
        table.add_column("Problem")
        for err in errors:
            table.add_row(str(err.get("field") or "-"), err.get("message", ""))
        self.console.print(table)

    def render_error(self, message: str, details: Optional[str] = None):
        """Render an error message"""
        error_panel = Panel(
            f"[bold red]{message}[/bold red]" +
            (f"\n\n[dim]{details}[/dim]" if details else ""),
            title="[red]Error[/red]",
            border_style="red"
        )
        self.console.print(error_panel)

    def render_warning(self, message: str):
        self.console.print(f"[yellow]! {message}[/yellow]")

    def render_success(self, message: str):
        self.console.print(f"[green]✓ {message}[/green]")

    def render_info(self, message: str):
        self.console.print(f"[blue]{message}[/blue]")
