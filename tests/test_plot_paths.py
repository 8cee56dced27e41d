"""Tests for the per-search file layout."""

import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config import PlotConfig
from plot_paths import HYPERPARAMETER_NAMES, SearchArtifacts


PLOT_CONFIG = PlotConfig(
    progress_dir="/srv/www/progress",
    hyperparameters_dir="/srv/www/hyperparameters",
    data_dir="/data/exact",
)


def test_canonical_image_path():
    artifacts = SearchArtifacts.for_search("search1", PLOT_CONFIG)
    assert artifacts.fitness_png == "/srv/www/progress/search1_fitness_progress.png"


def test_progress_inputs_and_outputs():
    artifacts = SearchArtifacts.for_search("mnist_run", PLOT_CONFIG)

    assert artifacts.progress_input == "/data/exact/mnist_run/progress.txt"
    assert artifacts.progress_pngs == (
        "/srv/www/progress/mnist_run_fitness_progress.png",
        "/srv/www/progress/mnist_run_epochs_progress.png",
        "/srv/www/progress/mnist_run_generated_progress.png",
    )


def test_hyperparameter_outputs_follow_fixed_order():
    artifacts = SearchArtifacts.for_search("s", PLOT_CONFIG)

    assert artifacts.hyperparameters_input == "/data/exact/s/hyperparameters.txt"
    assert len(artifacts.hyperparameter_pngs) == 11
    assert artifacts.hyperparameter_pngs[0] == "/srv/www/hyperparameters/s_initial_mu.png"
    assert artifacts.hyperparameter_pngs[5] == "/srv/www/hyperparameters/s_weight_decay_delta.png"
    assert artifacts.hyperparameter_pngs[-1] == "/srv/www/hyperparameters/s_batch_size.png"
    for name, path in zip(HYPERPARAMETER_NAMES, artifacts.hyperparameter_pngs):
        assert path.endswith(f"s_{name}.png")


def test_all_outputs_lists_fourteen_images():
    artifacts = SearchArtifacts.for_search("s", PLOT_CONFIG)
    outputs = artifacts.all_outputs()

    assert len(outputs) == 14
    assert outputs[0] == artifacts.fitness_png
    assert len(set(outputs)) == 14
