"""Pipeline orchestrator: crawl, persist, analyse, summarise."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.progress import BarColumn, Progress, SpinnerColumn, TextColumn, TimeElapsedColumn
from rich.table import Table

from site_backup.analysis import analyze_templates, collect_asset_urls
from site_backup.classifier import TemplateClassifier
from site_backup.config import BackupConfig
from site_backup.extractor import ContentExtractor
from site_backup.fetcher import BrowserSessionFactory
from site_backup.models import CrawlStats, TemplateCategory
from site_backup.scheduler import BatchScheduler, SessionOpener
from site_backup.stats import StatsAggregator
from site_backup.writer import BackupWriter

logger = logging.getLogger(__name__)
console = Console()

MAX_REPORTED_ERRORS = 10


def load_url_list(path: str | Path) -> list[str]:
    """Read a newline-delimited URL file, ignoring blank lines.

    Raises:
        FileNotFoundError: If the file does not exist.
    """
    with open(path, encoding="utf-8") as f:
        return [line.strip() for line in f if line.strip()]


class BackupPipeline:
    """End-to-end site backup run."""

    def __init__(self, config: BackupConfig, open_session: Optional[SessionOpener] = None) -> None:
        self.config = config
        self._open_session = open_session
        self.assets: list[str] = []

    async def run(self) -> CrawlStats:
        """Execute the full backup and return the finalized stats."""
        urls = load_url_list(self.config.crawl.urls_file)

        console.rule("[bold blue]Site Backup[/bold blue]")
        console.print(f"[dim]Found {len(urls)} URLs to crawl[/dim]")
        console.print(
            f"[dim]Lanes: {self.config.crawl.concurrency} | Delay: {self.config.crawl.delay_seconds}s"
            f" | Timeout: {self.config.crawl.timeout_seconds}s[/dim]"
        )
        console.print(f"[dim]Output: {self.config.output.backup_dir}[/dim]")
        console.print()

        stats = StatsAggregator(total=len(urls))
        writer = BackupWriter(self.config.output)

        # Stage 1: Crawl
        console.rule("[bold cyan]Stage 1: Crawling[/bold cyan]")
        if self._open_session is not None:
            await self._crawl(urls, stats, writer, self._open_session)
        else:
            async with BrowserSessionFactory(self.config.crawl) as browser:
                await self._crawl(urls, stats, writer, browser)
        crawled = stats.snapshot()
        console.print(f"[green]✓[/green] Crawled {crawled.success} pages ({crawled.failed} failed)")
        console.print()

        # Stage 2: Offline analysis
        console.rule("[bold cyan]Stage 2: Template Analysis[/bold cyan]")
        data_dir = self.config.output.data_dir
        analysis = analyze_templates(data_dir, sample_size=self.config.output.sample_size)
        writer.write_template_analysis(analysis)
        console.print(f"[green]✓[/green] Analysed {len(analysis)} templates")

        self.assets = collect_asset_urls(data_dir)
        writer.write_asset_urls(self.assets)
        console.print(f"[green]✓[/green] Collected {len(self.assets)} asset URLs")
        console.print()

        final = stats.finalize()
        writer.write_stats(final)

        self._print_summary(final)
        return final

    async def _crawl(
        self,
        urls: list[str],
        stats: StatsAggregator,
        writer: BackupWriter,
        open_session: SessionOpener,
    ) -> None:
        """Run the lanes under a progress bar."""
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TextColumn("{task.completed}/{task.total}"),
            TimeElapsedColumn(),
            console=console,
        ) as progress:
            task = progress.add_task("Crawling...", total=len(urls))

            def on_page(url: str, category: TemplateCategory, ok: bool) -> None:
                progress.update(task, advance=1)

            scheduler = BatchScheduler(
                self.config.crawl,
                TemplateClassifier(self.config.templates),
                ContentExtractor(self.config.extraction),
                writer,
                stats,
                open_session,
                on_page=on_page,
            )
            await scheduler.run(urls)

    def _print_summary(self, stats: CrawlStats) -> None:
        """Print run summary."""
        console.rule("[bold green]Crawl Complete[/bold green]")
        console.print()

        table = Table(title="Crawl Summary", show_header=True, header_style="bold magenta")
        table.add_column("Metric", style="cyan")
        table.add_column("Value", style="white", justify="right")

        table.add_row("Total URLs", str(stats.total))
        table.add_row("Success", str(stats.success))
        table.add_row("Failed", str(stats.failed))
        table.add_row("Duration", f"{stats.duration_seconds:.1f}s")
        table.add_row("Assets Found", str(len(self.assets)))
        if stats.collisions:
            table.add_row("Name Collisions", str(len(stats.collisions)))
        console.print(table)
        console.print()

        if stats.by_template:
            by_template = Table(title="By Template Type", show_header=True, header_style="bold magenta")
            by_template.add_column("Template", style="cyan")
            by_template.add_column("Pages", justify="right")
            for category, count in stats.by_template.items():
                by_template.add_row(category, str(count))
            console.print(by_template)
            console.print()

        if stats.errors:
            console.print("[bold red]Errors:[/bold red]")
            for error in stats.errors[:MAX_REPORTED_ERRORS]:
                console.print(f"  {error.url}: {error.message}", markup=False)
            if len(stats.errors) > MAX_REPORTED_ERRORS:
                console.print(f"  ... and {len(stats.errors) - MAX_REPORTED_ERRORS} more")
            console.print()


def run_backup(config: BackupConfig, open_session: Optional[SessionOpener] = None) -> CrawlStats:
    """Convenience function to run the backup synchronously."""
    pipeline = BackupPipeline(config, open_session=open_session)
    return asyncio.run(pipeline.run())
