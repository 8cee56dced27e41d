# plot_paths.py - File locations for one search's progress data and images
from __future__ import annotations
import os
from dataclasses import dataclass
from typing import List, Tuple

from config import PlotConfig

# Order matches the positional outputs of plot_hyperparameters.py
HYPERPARAMETER_NAMES = (
    "initial_mu",
    "mu_delta",
    "initial_learning_rate",
    "learning_rate_delta",
    "initial_weight_decay",
    "weight_decay_delta",
    "alpha",
    "velocity_reset",
    "input_dropout",
    "hidden_dropout",
    "batch_size",
)


@dataclass(frozen=True)
class SearchArtifacts:
    """Input files and output images for one search.

    fitness_png doubles as the freshness marker for the whole set.
    """
    search_name: str
    progress_input: str
    fitness_png: str
    epochs_png: str
    generated_png: str
    hyperparameters_input: str
    hyperparameter_pngs: Tuple[str, ...]

    @classmethod
    def for_search(cls, search_name: str, plot_config: PlotConfig) -> "SearchArtifacts":
        progress_dir = plot_config.progress_dir
        search_data = os.path.join(plot_config.data_dir, search_name)

        return cls(
            search_name=search_name,
            progress_input=os.path.join(search_data, "progress.txt"),
            fitness_png=os.path.join(progress_dir, f"{search_name}_fitness_progress.png"),
            epochs_png=os.path.join(progress_dir, f"{search_name}_epochs_progress.png"),
            generated_png=os.path.join(progress_dir, f"{search_name}_generated_progress.png"),
            hyperparameters_input=os.path.join(search_data, "hyperparameters.txt"),
            hyperparameter_pngs=tuple(
                os.path.join(plot_config.hyperparameters_dir, f"{search_name}_{name}.png")
                for name in HYPERPARAMETER_NAMES
            ),
        )

    @property
    def progress_pngs(self) -> Tuple[str, str, str]:
        return (self.fitness_png, self.epochs_png, self.generated_png)

    def all_outputs(self) -> List[str]:
        return list(self.progress_pngs) + list(self.hyperparameter_pngs)
