# plot_runner.py - Launches the external plotting scripts
from __future__ import annotations
import subprocess
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional

from config import PlotConfig
from plot_paths import HYPERPARAMETER_NAMES
from logging_config import get_logger

logger = get_logger("plot_runner")


@dataclass(frozen=True)
class CommandResult:
    """Outcome of one plotting command. returncode is None if it never ran to completion."""
    args: List[str]
    returncode: Optional[int]
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def command(self) -> str:
        return " ".join(self.args)


class PlotRunner(ABC):
    """Produces the progress and hyperparameter images for a search.

    Subclasses implement plot_progress and _plot_hyperparameters; the public
    plot_hyperparameters checks that exactly one output per tracked
    hyperparameter was given before delegating.
    """

    @abstractmethod
    def plot_progress(self, input_path: str, fitness_png: str, epochs_png: str,
                      generated_png: str) -> CommandResult:
        ...

    def plot_hyperparameters(self, input_path: str, *output_pngs: str) -> CommandResult:
        if len(output_pngs) != len(HYPERPARAMETER_NAMES):
            raise ValueError(
                f"plot_hyperparameters expects {len(HYPERPARAMETER_NAMES)} output paths, "
                f"got {len(output_pngs)}"
            )
        return self._plot_hyperparameters(input_path, list(output_pngs))

    @abstractmethod
    def _plot_hyperparameters(self, input_path: str, output_pngs: List[str]) -> CommandResult:
        ...


class SubprocessPlotRunner(PlotRunner):
    """Runs the plotting scripts with an external interpreter, one blocking process each."""

    def __init__(self, plot_config: PlotConfig):
        self.config = plot_config

    def plot_progress(self, input_path, fitness_png, epochs_png, generated_png):
        return self._run(self.config.progress_script,
                         [input_path, fitness_png, epochs_png, generated_png])

    def _plot_hyperparameters(self, input_path, output_pngs):
        return self._run(self.config.hyperparameters_script, [input_path, *output_pngs])

    def _run(self, script: str, paths: List[str]) -> CommandResult:
        args = [self.config.python_executable, script, *paths]
        try:
            result = subprocess.run(args, capture_output=True, text=True, check=False,
                                    timeout=self.config.command_timeout)
        except subprocess.TimeoutExpired as e:
            logger.warning("plot_command_timeout", command=" ".join(args),
                           timeout_sec=self.config.command_timeout)
            return CommandResult(args=args, returncode=None,
                                 stdout=_as_text(e.stdout), stderr=f"timed out after {e.timeout}s")
        except OSError as e:
            logger.warning("plot_command_launch_failed", command=" ".join(args), error=str(e))
            return CommandResult(args=args, returncode=None, stderr=str(e))

        return CommandResult(args=args, returncode=result.returncode,
                             stdout=result.stdout or "", stderr=result.stderr or "")


def _as_text(output) -> str:
    # TimeoutExpired carries bytes even when text=True was requested
    if output is None:
        return ""
    if isinstance(output, bytes):
        return output.decode(errors="replace")
    return output
