#!filepath: dispbdt/cli.py
from pathlib import Path
from typing import Optional

import typer
from rich import print

from dispbdt import __version__, logs
from dispbdt.config.app_config import AppConfig
from dispbdt.utils.errors import DispTrainingError

USAGE = (
    "dispbdt <input list> <output directory> <train vs test fraction> <rec id> <telescope type>"
    " [target] [method options] [array list] [dataset directory] [quality cut]\n"
    "\n"
    "     <input list>              : list of source directories (simulations), one per line\n"
    "     <train vs test fraction>  : fraction of events used for training (typical 0.5)\n"
    "     <rec id>                  : reconstruction method id, e.g. 0,1,2,3\n"
    "     <telescope type>          : telescope type (0 = all telescope types)\n"
    "     [target]                  : disp-angle (default) | disp-error | disp-energy | disp-core\n"
    "     [dataset directory]       : reload training trees from a previous run\n"
)

app = typer.Typer(help="Disp BDT training for telescope-image direction / energy / core reconstruction",
                  add_completion=False)


def _version_callback(value: bool):
    if value:
        typer.echo(__version__)
        raise typer.Exit()


def _opt(value: Optional[str]) -> Optional[str]:
    # empty positional -> configured default
    if value is None or value.strip() == "":
        return None
    return value


@app.command()
def train(
    input_list: Optional[str] = typer.Argument(None, help="list of source directories"),
    output_dir: Optional[str] = typer.Argument(None, help="output directory"),
    train_fraction: Optional[str] = typer.Argument(None, help="train vs test fraction"),
    rec_id: Optional[str] = typer.Argument(None, help="reconstruction method id"),
    tel_type: Optional[str] = typer.Argument(None, help="telescope type (0 = all)"),
    target: Optional[str] = typer.Argument(None, help="regression target"),
    method_options: Optional[str] = typer.Argument(None, help="BDT method options"),
    array_list: Optional[str] = typer.Argument(None, help="list of telescopes to use"),
    dataset_dir: Optional[str] = typer.Argument(None, help="directory with training trees"),
    quality_cut: Optional[str] = typer.Argument(None, help="quality cut"),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="YAML config file"),
    version: bool = typer.Option(
        False, "--version", "-v", callback=_version_callback, is_eager=True,
        help="print the version and exit",
    ),
):
    """
    Assemble per telescope type training datasets and train one disp BDT per type.
    """
    if None in (input_list, output_dir, train_fraction, rec_id, tel_type):
        typer.echo(USAGE)
        raise typer.Exit()

    try:
        fraction = float(train_fraction)
        rec = int(rec_id)
        tel = int(tel_type)
    except ValueError as e:
        logs.error(f"Error, invalid numeric argument: {e}")
        raise typer.Exit(code=1)

    if fraction <= 0.0 or fraction >= 1.0:
        logs.error(
            f"Error, <train vs test fraction> = '{fraction}' "
            f"must fall in the range 0.0 < x < 1.0"
        )
        raise typer.Exit(code=1)

    from dispbdt.workflows.disp_training import run_disp_training

    try:
        app_cfg = AppConfig.load(config)
        logs.reconfigure(
            log_dir=app_cfg.log.dir,
            rotation=app_cfg.log.rotation,
            retention=app_cfg.log.retention,
            log_level=app_cfg.log.level,
        )

        app_cfg = app_cfg.with_training(
            input_list=input_list,
            output_dir=output_dir,
            train_fraction=fraction,
            rec_id=rec,
            tel_type=tel,
            target=_opt(target),
            method_options=_opt(method_options),
            array_list=_opt(array_list),
            dataset_dir=_opt(dataset_dir),
            quality_cut=_opt(quality_cut),
        )
        cfg = app_cfg.training

        print(f"[green]dispbdt {__version__}[/green]")
        print(f"training/testing fraction: {cfg.train_fraction}")
        if cfg.tel_type > 0:
            print(f"training for telescope type {cfg.tel_type}")
        else:
            print("training using data from all telescope types")
        print(f"using events for reconstruction ID {cfg.rec_id}")

        ctx = run_disp_training(cfg)
    except DispTrainingError as e:
        logs.error(f"[dispbdt] {e}")
        raise typer.Exit(code=1)

    if ctx.failed_types:
        logs.error(f"[dispbdt] training failed for telescope types {sorted(ctx.failed_types)}")
        raise typer.Exit(code=1)

    print(f"[green]models written: {len(ctx.artifacts)}[/green]")


def main():
    app()


if __name__ == "__main__":
    main()

# python -m dispbdt.cli inputs.list output 0.5 0 0
