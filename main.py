"""
Diffusion benchmark - unified entry point.

Usage:
    python main.py                                   # serial, default problem
    python main.py strategy=threaded solver.nx=1024 solver.ny=1024
    python main.py -m strategy=serial,threaded,offload
    python main.py compare=true solver.steps=2000 solver.checks=500
    python main.py checkpoint_images=true solver.steps=2000 solver.checks=500
"""

import logging
import os
import sys
from pathlib import Path

import hydra
import mlflow
from dotenv import load_dotenv
from hydra.utils import instantiate
from omegaconf import DictConfig, OmegaConf

load_dotenv()
sys.path.insert(0, str(Path(__file__).parent / "src"))

from cli import console, print_metrics, timing_table  # noqa: E402
from diffusion import DiffusionParameters, DiffusionSolver  # noqa: E402
from diffusion.benchmark import compare_strategies  # noqa: E402

log = logging.getLogger(__name__)


def get_experiment_name(cfg: DictConfig) -> str:
    """Build full experiment name with optional prefix."""
    name = cfg.experiment_name
    prefix = cfg.mlflow.get("project_prefix", "")
    if prefix and not name.startswith("/"):
        return f"{prefix}/{name}"
    return name


def setup_mlflow(cfg: DictConfig) -> str:
    """Setup MLflow tracking and return experiment name."""
    tracking_uri = cfg.mlflow.get("tracking_uri", "./mlruns")
    if str(cfg.mlflow.get("mode", "")).lower() in ("files", "local"):
        os.environ.pop("MLFLOW_TRACKING_URI", None)
    os.environ["MLFLOW_TRACKING_URI"] = str(tracking_uri)
    mlflow.set_tracking_uri(tracking_uri)

    experiment_name = get_experiment_name(cfg)
    try:
        mlflow.set_experiment(experiment_name)
    except Exception as exc:
        experiment_name = f"{experiment_name}-restored"
        log.warning(f"MLflow set_experiment failed ({exc}); using '{experiment_name}'")
        mlflow.set_experiment(experiment_name)

    return experiment_name


def build_strategy(cfg: DictConfig):
    """Instantiate the configured execution strategy."""
    strategy_cfg = OmegaConf.to_container(cfg.strategy, resolve=True)
    strategy_cfg.pop("name", None)
    return instantiate(strategy_cfg)


def run_solver(cfg: DictConfig, params: DiffusionParameters, output_dir: Path):
    """Run one benchmark and log it to MLflow when enabled."""
    strategy = build_strategy(cfg)
    run_name = f"{cfg.strategy.name}_N{params.nx}x{params.ny}"

    image_dir = output_dir if cfg.checkpoint_images else None

    with DiffusionSolver(params, strategy=strategy, image_dir=image_dir) as solver:
        if not cfg.mlflow.enabled:
            solver.solve()
            solver.save(output_dir, image=cfg.image)
            return solver.metrics

        with mlflow.start_run(run_name=run_name, tags={"strategy": cfg.strategy.name}):
            mlflow.log_params(params.to_mlflow())
            mlflow.log_dict(OmegaConf.to_container(cfg, resolve=True), "config.yaml")

            solver.solve()
            paths = solver.save(output_dir, image=cfg.image)

            mlflow.log_metrics(solver.metrics.to_mlflow())
            for path in {*paths.values(), *solver.images}:
                mlflow.log_artifact(str(path))

        return solver.metrics


def run_comparison(cfg: DictConfig, params: DiffusionParameters, output_dir: Path):
    """Run the same problem under every strategy and report timings."""
    strategy_kwargs = {}
    if cfg.strategy.name == "threaded":
        strategy_cfg = OmegaConf.to_container(cfg.strategy, resolve=True)
        strategy_kwargs["threaded"] = {
            k: strategy_cfg[k] for k in ("workers", "bx", "by") if k in strategy_cfg
        }
    df = compare_strategies(params, strategy_kwargs=strategy_kwargs)
    output_dir.mkdir(parents=True, exist_ok=True)
    csv_path = output_dir / "strategy_comparison.csv"
    df.to_csv(csv_path, index=False)
    console.print(timing_table(df))

    if cfg.mlflow.enabled:
        with mlflow.start_run(run_name=f"compare_N{params.nx}x{params.ny}"):
            mlflow.log_params(params.to_mlflow())
            mlflow.log_artifact(str(csv_path))
    return df


@hydra.main(config_path="conf", config_name="config", version_base=None)
def main(cfg: DictConfig) -> None:
    """Main entry point."""
    params = DiffusionParameters(**OmegaConf.to_container(cfg.solver, resolve=True))
    output_dir = Path(cfg.output_dir)
    log.info(f"Strategy: {cfg.strategy.name}, N={params.nx}x{params.ny}, steps={params.steps}")

    if cfg.mlflow.enabled:
        log.info(f"MLflow experiment: {setup_mlflow(cfg)}")

    if cfg.compare:
        run_comparison(cfg, params, output_dir)
    else:
        print_metrics(run_solver(cfg, params, output_dir))


if __name__ == "__main__":
    main()
