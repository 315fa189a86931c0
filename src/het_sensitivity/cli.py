"""Command-line interface for the het SNP sensitivity estimator."""

from __future__ import annotations

import json
import logging
from contextlib import ExitStack
from dataclasses import dataclass
from importlib import resources
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import click
import yaml

from .config import SensitivityConfig, load_config
from .exceptions import HetSensitivityError
from .logging_config import setup_logging
from .rng import choose_rng
from .sensitivity import HetSensitivityEstimator

DEFAULT_CONFIG_NAME = "example.yaml"

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class CLIContext:
    """Shared CLI configuration."""

    seed: Optional[int]
    config_override: Optional[Path]


def _load_run_config(ctx: CLIContext) -> SensitivityConfig:
    """Load a run configuration, falling back to the packaged example config."""
    with ExitStack() as stack:
        if ctx.config_override:
            config_path = Path(ctx.config_override)
            if not config_path.exists():
                raise click.ClickException(f"Configuration file not found: {config_path}")
        else:
            resource = resources.files("het_sensitivity.assets.configs") / DEFAULT_CONFIG_NAME
            config_path = stack.enter_context(resources.as_file(resource))

        try:
            config = load_config(config_path)
        except (HetSensitivityError, yaml.YAMLError) as exc:
            raise click.ClickException(f"Failed to load configuration {config_path}: {exc}") from exc

    if ctx.seed is not None:
        config.seed = ctx.seed
    return config


def _apply_overrides(
    config: SensitivityConfig,
    sample_size: Optional[int],
    workers: Optional[int],
) -> SensitivityConfig:
    if sample_size is not None:
        config.sampling.sample_size = sample_size
    if workers is not None:
        config.sampling.n_workers = workers
    return config


def _build_estimator(config: SensitivityConfig) -> HetSensitivityEstimator:
    try:
        return HetSensitivityEstimator(
            config.depth_distribution(),
            config.quality_distribution(),
            config.sampling.sample_size,
            random_state=choose_rng(config.seed),
            n_workers=config.sampling.n_workers,
        )
    except HetSensitivityError as exc:
        raise click.ClickException(str(exc)) from exc


def _estimate(config: SensitivityConfig, log_odds_threshold: float) -> float:
    estimator = _build_estimator(config)
    try:
        return estimator.sensitivity(log_odds_threshold)
    except HetSensitivityError as exc:
        raise click.ClickException(str(exc)) from exc


def _json_ready(payload: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively convert numpy/scalar values to native Python types for JSON output."""
    import numpy as np

    def _convert(obj: Any) -> Any:
        if isinstance(obj, dict):
            return {str(key): _convert(value) for key, value in obj.items()}
        if isinstance(obj, (list, tuple)):
            return [_convert(item) for item in obj]
        if isinstance(obj, np.floating):
            return float(obj)
        if isinstance(obj, np.integer):
            return int(obj)
        return obj

    return _convert(payload)


@click.group()
@click.option("--seed", default=None, type=click.IntRange(min=0), help="Seed overriding the configuration seed.")
@click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=Path),
    help="Path to a run configuration file. Defaults to the packaged example config.",
)
@click.option(
    "--log-level",
    default="INFO",
    show_default=True,
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
)
@click.pass_context
def main(ctx: click.Context, seed: Optional[int], config_path: Optional[Path], log_level: str) -> None:
    """Theoretical sensitivity to heterozygous SNPs from depth and quality distributions."""
    setup_logging(level=log_level)
    ctx.obj = CLIContext(seed=seed, config_override=config_path)


@main.command("estimate")
@click.option("--log-odds", type=float, default=None, help="log10 likelihood ratio needed to call a SNP.")
@click.option("--sample-size", type=click.IntRange(min=1), default=None, help="Quality sums sampled per read count.")
@click.option("--workers", type=click.IntRange(min=1), default=None, help="Worker processes.")
@click.option("--output", type=click.Path(path_type=Path), default=None, help="Also write the result JSON here.")
@click.pass_obj
def estimate_cmd(
    ctx: CLIContext,
    log_odds: Optional[float],
    sample_size: Optional[int],
    workers: Optional[int],
    output: Optional[Path],
) -> None:
    """Estimate het SNP sensitivity for one log-odds threshold."""
    config = _apply_overrides(_load_run_config(ctx), sample_size, workers)
    if log_odds is not None:
        config.log_odds_threshold = log_odds

    sensitivity = _estimate(config, config.log_odds_threshold)
    payload = _json_ready({
        "run_id": config.run_id,
        "seed": config.seed,
        "config_hash": config.config_hash(),
        "log_odds_threshold": config.log_odds_threshold,
        "sample_size": config.sampling.sample_size,
        "n_workers": config.sampling.n_workers,
        "sensitivity": sensitivity,
    })

    text = json.dumps(payload, indent=2)
    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(text + "\n", encoding="utf-8")
        logger.info(f"Wrote {output}")
    click.echo(text)


@main.command("curve")
@click.option(
    "--log-odds",
    "log_odds_values",
    type=float,
    multiple=True,
    help="Threshold to evaluate; repeat for several. Defaults to the configured threshold.",
)
@click.option("--sample-size", type=click.IntRange(min=1), default=None, help="Quality sums sampled per read count.")
@click.option("--workers", type=click.IntRange(min=1), default=None, help="Worker processes.")
@click.option("--output", type=click.Path(path_type=Path), default=None, help="Write the CSV here instead of stdout.")
@click.pass_obj
def curve_cmd(
    ctx: CLIContext,
    log_odds_values: Tuple[float, ...],
    sample_size: Optional[int],
    workers: Optional[int],
    output: Optional[Path],
) -> None:
    """Sensitivity at several log-odds thresholds, sharing one quality sample."""
    config = _apply_overrides(_load_run_config(ctx), sample_size, workers)
    thresholds = sorted(log_odds_values) if log_odds_values else [config.log_odds_threshold]

    estimator = _build_estimator(config)
    try:
        frame = estimator.sensitivity_curve(thresholds)
    except HetSensitivityError as exc:
        raise click.ClickException(str(exc)) from exc

    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        frame.to_csv(output, index=False)
        logger.info(f"Wrote {output}")
    else:
        click.echo(frame.to_csv(index=False), nl=False)


@main.command("determinism")
@click.option("--sample-size", type=click.IntRange(min=1), default=None, help="Quality sums sampled per read count.")
@click.option("--workers", type=click.IntRange(min=1), default=None, help="Worker processes.")
@click.pass_obj
def determinism_cmd(ctx: CLIContext, sample_size: Optional[int], workers: Optional[int]) -> None:
    """Run the estimation twice with the same seed and assert identical results."""
    config = _apply_overrides(_load_run_config(ctx), sample_size, workers)

    first = _estimate(config, config.log_odds_threshold)
    second = _estimate(config, config.log_odds_threshold)
    if first != second:
        raise click.ClickException(
            f"Results differ for seed {config.seed}: {first!r} != {second!r}"
        )

    click.echo(
        json.dumps(
            _json_ready({
                "stage": "determinism",
                "seed": config.seed,
                "sensitivity": first,
                "status": "results-identical",
            }),
            indent=2,
        )
    )


if __name__ == "__main__":
    main()
