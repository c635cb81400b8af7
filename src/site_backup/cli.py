"""CLI interface for the site backup crawler."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from site_backup.analysis import analyze_templates, collect_asset_urls
from site_backup.config import BackupConfig
from site_backup.pipeline import run_backup

console = Console()


def setup_logging(level: str) -> None:
    """Configure rich logging."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=False)],
    )


@click.group()
@click.version_option(package_name="site-backup-crawler")
def main() -> None:
    """Site Backup: crawl a fixed list of pages and archive them by template."""
    pass


@main.command()
@click.option("--config", "-c", "config_path", type=click.Path(exists=True), help="YAML config file")
@click.option("--urls-file", "-u", type=click.Path(), default=None, help="Newline-delimited URL list")
@click.option("--output", "-o", type=click.Path(), default=None, help="Backup root directory")
@click.option("--concurrency", type=int, default=None, help="Parallel browser lanes [default: 3]")
@click.option("--delay", type=float, default=None, help="Pause after each page within a lane, in seconds [default: 0.5]")
@click.option("--timeout", type=float, default=None, help="Navigation timeout per page, in seconds [default: 30]")
@click.option("--headed", is_flag=True, default=False, help="Show the browser window")
@click.option("--log-level", type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"]), default="INFO", show_default=True)
def crawl(
    config_path: Optional[str],
    urls_file: Optional[str],
    output: Optional[str],
    concurrency: Optional[int],
    delay: Optional[float],
    timeout: Optional[float],
    headed: bool,
    log_level: str,
) -> None:
    """Crawl every URL in the list and write the backup tree.

        site-backup crawl --urls-file backup/data/urls.txt --output backup
    """
    setup_logging(log_level)

    config = BackupConfig.from_env_and_file(config_path)
    crawl_overrides = {
        "urls_file": urls_file,
        "concurrency": concurrency,
        "delay_seconds": delay,
        "timeout_seconds": timeout,
    }
    crawl_overrides = {k: v for k, v in crawl_overrides.items() if v is not None}
    if headed:
        crawl_overrides["headless"] = False
    if crawl_overrides:
        config.crawl = config.crawl.model_validate({**config.crawl.model_dump(), **crawl_overrides})
    if output:
        config.output = config.output.model_validate({**config.output.model_dump(), "backup_dir": output})

    try:
        run_backup(config)
    except FileNotFoundError as exc:
        console.print(f"\n[red]Cannot start: URL list not found ({exc.filename})[/red]")
        sys.exit(1)
    except KeyboardInterrupt:
        console.print("\n[yellow]Crawl interrupted by user.[/yellow]")
        sys.exit(1)
    except Exception as exc:
        console.print(f"\n[red]Crawl failed: {exc}[/red]")
        logging.getLogger(__name__).exception("Crawl error")
        sys.exit(1)


@main.command("init-config")
@click.option("--output", "-o", type=click.Path(), default="backup_config.yaml", show_default=True)
def init_config(output: str) -> None:
    """Generate a default YAML configuration file."""
    config = BackupConfig()
    config.to_yaml(output)
    console.print(f"[green]✓[/green] Default config written to {output}")
    console.print("[dim]Edit the file and run: site-backup crawl --config backup_config.yaml[/dim]")


@main.command()
@click.argument("backup_dir", type=click.Path(exists=True, file_okay=False))
@click.option("--sample-size", type=int, default=5, show_default=True, help="Pages sampled per template")
def analyze(backup_dir: str, sample_size: int) -> None:
    """Re-run the template analysis over an existing backup."""
    data_dir = Path(backup_dir) / "data"
    analysis = analyze_templates(data_dir, sample_size=sample_size)
    assets = collect_asset_urls(data_dir)

    table = Table(title="Templates", show_lines=True)
    table.add_column("Template", style="cyan")
    table.add_column("Pages", justify="right")
    table.add_column("Sample URL", style="blue", max_width=50)
    table.add_column("Common Classes", max_width=50)

    for name, summary in analysis.items():
        samples = summary["samples"]
        table.add_row(
            name,
            str(summary["count"]),
            samples[0]["url"] if samples else "",
            " ".join(summary["commonClasses"]),
        )
    console.print(table)
    console.print(f"Asset URLs: {len(assets)}")


if __name__ == "__main__":
    main()
