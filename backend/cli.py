"""
TablePOS CLI.

Command-line interface for database setup, demo data and configuration checks.
"""

import sys
from pathlib import Path

# Add backend to path for imports
sys.path.insert(0, str(Path(__file__).parent))

import typer
from rich.console import Console
from rich.table import Table

app = typer.Typer(
    name="tablepos",
    help="TablePOS point-of-sale CLI",
    add_completion=False,
)
console = Console()


# =============================================================================
# Database Commands
# =============================================================================

@app.command()
def init_db():
    """Create all tables in the configured database."""
    from sqlalchemy.exc import SQLAlchemyError

    from rest_api.models import Base
    from shared.infrastructure.db import engine

    console.print(f"[blue]Creating tables on: {engine.url.render_as_string(hide_password=True)}[/blue]")
    try:
        Base.metadata.create_all(bind=engine)
    except SQLAlchemyError as e:
        console.print(f"[red]✗ Table creation failed: {e}[/red]")
        raise typer.Exit(1)
    console.print("[green]✓ Tables created[/green]")


@app.command()
def seed_demo(
    force: bool = typer.Option(False, "--force", "-f", help="Allow seeding in production"),
):
    """Seed the demo restaurant, tables and menu."""
    from sqlalchemy.exc import SQLAlchemyError

    from rest_api.seed import DEMO_MENU, DEMO_TABLES, seed_demo as run_seed
    from shared.config.settings import settings
    from shared.infrastructure.db import get_db_context

    if settings.environment == "production" and not force:
        console.print("[red]Cannot seed production without --force[/red]")
        raise typer.Exit(1)

    try:
        with get_db_context() as db:
            restaurant = run_seed(db)
            restaurant_id = restaurant.id
    except SQLAlchemyError as e:
        console.print(f"[red]✗ Seeding failed: {e}[/red]")
        raise typer.Exit(1)

    table = Table(title="Demo data")
    table.add_column("Item", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Restaurant ID", str(restaurant_id))
    table.add_row("Tables", str(len(DEMO_TABLES)))
    table.add_row("Menu items", str(len(DEMO_MENU)))
    console.print(table)


# =============================================================================
# Configuration Commands
# =============================================================================

@app.command()
def check_config():
    """Validate settings for a production deployment."""
    from shared.config.settings import settings

    table = Table(title="Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Environment", settings.environment)
    table.add_row("Debug", str(settings.debug))
    table.add_row("Rate limiting", str(settings.rate_limit_enabled))
    table.add_row("Payment rate limit", settings.payment_rate_limit)
    table.add_row("CORS origins", ", ".join(settings.cors_origins()) or "-")
    console.print(table)

    errors = settings.validate_production_secrets()
    if errors:
        for error in errors:
            console.print(f"[red]✗ {error}[/red]")
        raise typer.Exit(1)
    console.print("[green]✓ No configuration errors[/green]")


@app.command()
def version():
    """Show version information."""
    table = Table(title="TablePOS Version")
    table.add_column("Component", style="cyan")
    table.add_column("Version", style="green")

    table.add_row("API", "1.0.0")
    table.add_row("Python", sys.version.split()[0])

    console.print(table)


if __name__ == "__main__":
    app()
