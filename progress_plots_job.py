#!/usr/bin/env python3
"""Regenerate stale EXACT progress and hyperparameter plots.

Intended to be scheduled (cron / Railway) every few minutes. For every search
in the catalog the fitness progress image is used as a freshness marker: when
it is missing, or older than the freshness window, both plotting scripts are
run again for that search. Plotting failures are logged and counted but do not
stop the pass; database failures abort it.
"""
from __future__ import annotations
import enum
import os
import sys
import time
from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Optional

from config import Config, PlotConfig, load_config
from db_utils import DatabaseConnectionError, QueryError
from env_utils import bootstrap_runtime_env, get_database_url
from logging_config import setup_logging, get_logger, get_metrics_logger
from plot_paths import SearchArtifacts
from plot_runner import CommandResult, PlotRunner, SubprocessPlotRunner
from search_catalog import SearchCatalog

logger = get_logger("progress_plots_job")
metrics = get_metrics_logger("progress_plots_job")


class Freshness(enum.Enum):
    MISSING = "missing"
    STALE = "stale"
    FRESH = "fresh"

    @property
    def needs_regeneration(self) -> bool:
        return self is not Freshness.FRESH


@dataclass
class SearchOutcome:
    """What happened to one search during a pass."""
    search_name: str
    freshness: Freshness
    results: List[CommandResult] = field(default_factory=list)

    @property
    def triggered(self) -> bool:
        return self.freshness.needs_regeneration

    @property
    def failures(self) -> int:
        return sum(1 for r in self.results if not r.ok)


@dataclass
class RunSummary:
    searches: int = 0
    regenerated: int = 0
    skipped: int = 0
    missing: int = 0
    command_failures: int = 0
    duration_ms: float = 0.0

    def record(self, outcome: SearchOutcome) -> None:
        self.searches += 1
        if outcome.triggered:
            self.regenerated += 1
        else:
            self.skipped += 1
        if outcome.freshness is Freshness.MISSING:
            self.missing += 1
        self.command_failures += outcome.failures


class ProgressPlotRegenerator:
    """Checks each search's canonical image and reruns the plotters when it is stale."""

    def __init__(self, plot_config: PlotConfig, runner: PlotRunner,
                 clock: Callable[[], float] = time.time):
        self.config = plot_config
        self.runner = runner
        self.clock = clock

    def artifact_age(self, artifacts: SearchArtifacts, now: float) -> Optional[float]:
        """Seconds since the canonical image was written, None if it does not exist."""
        try:
            return now - os.path.getmtime(artifacts.fitness_png)
        except FileNotFoundError:
            return None

    def classify(self, age: Optional[float]) -> Freshness:
        """Fresh only while age <= window; an image exactly at the window is still fresh."""
        if age is None:
            return Freshness.MISSING
        if age > self.config.freshness_window_seconds:
            return Freshness.STALE
        return Freshness.FRESH

    def check_freshness(self, artifacts: SearchArtifacts, now: float) -> Freshness:
        return self.classify(self.artifact_age(artifacts, now))

    def process_search(self, search_name: str) -> SearchOutcome:
        artifacts = SearchArtifacts.for_search(search_name, self.config)
        age = self.artifact_age(artifacts, self.clock())
        freshness = self.classify(age)
        outcome = SearchOutcome(search_name=search_name, freshness=freshness)

        if freshness is Freshness.MISSING:
            logger.info("progress_plot_missing", search_name=search_name,
                        path=artifacts.fitness_png)
        elif freshness is Freshness.STALE:
            logger.info("progress_plots_regenerating", search_name=search_name,
                        age_sec=round(age, 1), window_sec=self.config.freshness_window_seconds)
        else:
            logger.info("progress_plots_skipped", search_name=search_name,
                        age_sec=round(age, 1), window_sec=self.config.freshness_window_seconds)
            return outcome

        outcome.results = self.regenerate(artifacts)
        return outcome

    def regenerate(self, artifacts: SearchArtifacts) -> List[CommandResult]:
        """Run the progress plotter, then the hyperparameter plotter regardless of how the first one went."""
        results = []

        start = time.monotonic()
        result = self.runner.plot_progress(artifacts.progress_input, *artifacts.progress_pngs)
        self._log_result(artifacts.search_name, "plot_progress", result, start)
        results.append(result)

        start = time.monotonic()
        result = self.runner.plot_hyperparameters(artifacts.hyperparameters_input,
                                                  *artifacts.hyperparameter_pngs)
        self._log_result(artifacts.search_name, "plot_hyperparameters", result, start)
        results.append(result)

        return results

    def run(self, search_names: Iterable[str]) -> RunSummary:
        """One sequential pass over the catalog. Catalog errors propagate."""
        summary = RunSummary()
        start = time.monotonic()

        for search_name in search_names:
            summary.record(self.process_search(search_name))

        summary.duration_ms = round((time.monotonic() - start) * 1000, 2)
        metrics.regeneration_run(
            searches=summary.searches,
            regenerated=summary.regenerated,
            skipped=summary.skipped,
            command_failures=summary.command_failures,
            duration_ms=summary.duration_ms,
            missing=summary.missing,
        )
        return summary

    @staticmethod
    def _log_result(search_name: str, command: str, result: CommandResult, start: float) -> None:
        duration_ms = round((time.monotonic() - start) * 1000, 2)
        if result.ok:
            logger.info("plot_command_completed", search_name=search_name, command=command,
                        args=result.command, stdout=result.stdout.strip())
        else:
            logger.warning("plot_command_failed", search_name=search_name, command=command,
                           args=result.command, returncode=result.returncode,
                           stdout=result.stdout.strip(), stderr=result.stderr.strip())
        metrics.plot_command(command=command, search_name=search_name,
                             returncode=result.returncode, duration_ms=duration_ms)


def run_job(config: Config, catalog: Optional[SearchCatalog] = None,
            runner: Optional[PlotRunner] = None, dsn: Optional[str] = None) -> RunSummary:
    """Regenerate stale plots for every search in the catalog."""
    if catalog is None:
        catalog = SearchCatalog(dsn=dsn, fetch_size=config.database.fetch_size,
                                connect_timeout=config.database.connect_timeout)
    if runner is None:
        runner = SubprocessPlotRunner(config.plots)

    regenerator = ProgressPlotRegenerator(config.plots, runner)
    logger.info("progress_plots_job_started",
                progress_dir=config.plots.progress_dir,
                hyperparameters_dir=config.plots.hyperparameters_dir,
                window_sec=config.plots.freshness_window_seconds)
    try:
        summary = regenerator.run(catalog.query_identifiers())
    except (DatabaseConnectionError, QueryError) as e:
        logger.error("progress_plots_job_failed", error=str(e), error_type=type(e).__name__)
        raise

    logger.info("progress_plots_job_completed", searches=summary.searches,
                regenerated=summary.regenerated, command_failures=summary.command_failures)
    return summary


def main(config: Optional[Config] = None) -> int:
    """Cron entrypoint. 0 on completion, 1 on database failure, 2 on bad configuration.

    .env is loaded and logging configured before the config is built, so both
    .env values and invalid settings are seen here rather than at import.
    """
    effective_url = bootstrap_runtime_env()
    setup_logging("progress-plots-job")
    logger.info("runtime_env_loaded", database_url=effective_url)

    try:
        if config is None:
            config = load_config()
        else:
            config.validate()
        dsn = get_database_url()
    except (ValueError, RuntimeError) as e:
        logger.error("configuration_invalid", error=str(e))
        return 2

    try:
        summary = run_job(config, dsn=dsn)
    except (DatabaseConnectionError, QueryError):
        return 1

    if summary.command_failures and config.plots.fail_on_command_error:
        logger.error("plot_commands_failed", command_failures=summary.command_failures)
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
