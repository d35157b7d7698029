"""CLI commands for lingoxp.

Commands:
- curve: Print the level curve
- level-info: Level information for a total XP value
- reward: XP reward for an action
- check-level-up: Whether an XP change crosses a level
- init-db: Create the SQLite schema
- serve: Run the Web API with uvicorn
"""

from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from lingoxp.config.app_config import load_app_config
from lingoxp.core import progress_calculator as calc
from lingoxp.db.database import init_db as do_init_db

app = typer.Typer(
    name="lingoxp",
    help="XP and level progression for English learners.",
    no_args_is_help=True,
)

console = Console()


def _level_info_or_exit(total_xp: int) -> calc.LevelInfo:
    try:
        return calc.get_level_info(total_xp)
    except ValueError as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(code=1)


@app.command()
def curve(
    levels: int = typer.Option(10, "--levels", "-n", min=1, max=1000, help="Levels to show"),
) -> None:
    """Show XP per level and cumulative thresholds."""
    table = Table(title="Level curve")
    table.add_column("Level", justify="right")
    table.add_column("XP for level", justify="right")
    table.add_column("Total XP", justify="right")

    for level in range(1, levels + 1):
        table.add_row(
            str(level),
            str(calc.xp_for_level(level)),
            str(calc.total_xp_for_level(level)),
        )

    console.print(table)


@app.command(name="level-info")
def level_info(
    total_xp: int = typer.Argument(..., help="Total accumulated XP"),
) -> None:
    """Show level information for a total XP value."""
    info = _level_info_or_exit(total_xp)

    console.print(f"[bold]Level {info.level}[/bold]")
    console.print(f"  [dim]progress:[/dim] {info.current_xp}/{info.xp_to_next_level} XP ({info.progress_percentage}%)")
    console.print(f"  [dim]to next:[/dim]  {calc.xp_to_next_level(total_xp, info.level)} XP")


@app.command()
def reward(
    action: str = typer.Argument(..., help="Action identifier, e.g. send_message"),
    multiplier: float = typer.Option(1.0, "--multiplier", "-m", min=0.0, max=100.0, help="Base multiplier"),
    custom_xp: int | None = typer.Option(None, "--custom-xp", "-x", min=0, max=10**12, help="Override base XP"),
) -> None:
    """Calculate the XP reward for an action."""
    result = calc.calculate_xp_reward(action, multiplier, custom_xp)

    if action not in calc.XP_REWARDS and not custom_xp:
        console.print(f"[yellow]⚠ Unknown action '{action}', using {calc.DEFAULT_ACTION_XP} XP[/yellow]")

    console.print(f"[green]✓ {result.reason}[/green]")
    console.print(f"  [dim]base:[/dim]       {result.base_xp}")
    console.print(f"  [dim]multiplier:[/dim] {calc.format_multiplier(result.multiplier)}")
    console.print(f"  [dim]total:[/dim]      {result.total_xp}")


@app.command(name="check-level-up")
def check_level_up(
    old_xp: int = typer.Argument(..., help="XP before"),
    new_xp: int = typer.Argument(..., help="XP after"),
) -> None:
    """Check whether going from OLD_XP to NEW_XP crosses a level."""
    old_info = _level_info_or_exit(old_xp)
    new_info = _level_info_or_exit(new_xp)

    if calc.check_level_up(old_xp, new_xp):
        console.print(f"[green]✓ Level up: {old_info.level} → {new_info.level}[/green]")
    else:
        console.print(f"[dim]No level up (level {new_info.level})[/dim]")


@app.command(name="init-db")
def init_db(
    path: Path | None = typer.Option(None, "--path", "-p", help="SQLite file (default from config)"),
) -> None:
    """Create the database schema."""
    db_path = do_init_db(path or load_app_config().database.path)
    console.print(f"[green]✓ Database ready[/green] [dim]{db_path}[/dim]")


@app.command()
def serve(
    host: str | None = typer.Option(None, "--host", help="Bind address"),
    port: int | None = typer.Option(None, "--port", help="Bind port"),
    reload: bool = typer.Option(False, "--reload", help="Auto-reload on code changes"),
) -> None:
    """Run the Web API."""
    import uvicorn

    server = load_app_config().server
    uvicorn.run(
        "lingoxp.web.api:app",
        host=host or server.host,
        port=port or server.port,
        reload=reload,
    )


if __name__ == "__main__":
    app()
