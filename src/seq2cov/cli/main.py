"""Click application entrypoint for seq2cov."""

from __future__ import annotations

import signal
import sys
from pathlib import Path
from types import FrameType
from typing import Optional

import click

from seq2cov import __version__
from seq2cov.cli.exit_codes import (
    EXIT_SUCCESS,
    EXIT_ERROR,
    EXIT_SIGINT,
    EXIT_SIGTERM,
    signal_exit_code,
)
from seq2cov.exceptions import Seq2CovError
from seq2cov.utils.logging import get_logger, setup_logging, verbosity_to_level

from .commands.config import init_config
from .commands.validate import validate
from .common_options import coverage_options
from .pipeline import RunOptions, effective_log_level, execute_run, resolve_config


def _handle_signal(signum: int, frame: Optional[FrameType]) -> None:
    """Turn SIGINT/SIGTERM into KeyboardInterrupt so output is never half-written."""
    sig_name = "SIGINT" if signum == signal.SIGINT else "SIGTERM"
    click.echo(f"\n{sig_name} received, aborting...", err=True)
    raise KeyboardInterrupt(sig_name)


def _print_version(ctx: click.Context, _param: click.Parameter, value: bool) -> None:
    if value and not ctx.resilient_parsing:
        click.echo(f"seq2cov {__version__}")
        ctx.exit()


@click.group(
    context_settings=dict(help_option_names=["-h", "--help"]),
    invoke_without_command=True,
)
@click.option(
    "-V",
    "--version",
    is_flag=True,
    is_eager=True,
    expose_value=False,
    callback=_print_version,
    help="Show the version and exit.",
)
@coverage_options
@click.pass_context
def cli(
    ctx: click.Context,
    bam: Optional[Path],
    sample_name: Optional[str],
    bed: Optional[Path],
    output: Optional[Path],
    config: Optional[Path],
    threads: Optional[int],
    strategy: Optional[str],
    min_mapq: Optional[int],
    mimic_perl_output: bool,
    one_based: bool,
    gene_rows: Optional[bool],
    read_counts: bool,
    strict_chromosomes: bool,
    progress: Optional[bool],
    verbose: int,
    log_file: Optional[Path],
) -> None:
    """seq2cov: seq2c-compatible panel coverage from a BAM file.

    Run directly as: seq2cov -b <sample.bam> -N <sample> -p <panel.bed> [options]
    """
    # If a subcommand was invoked, do not run the coverage here
    if ctx.invoked_subcommand:
        return

    # Console only until the config file has been read
    setup_logging(level=verbosity_to_level(verbose))
    logger = get_logger("cli")

    try:
        opts = RunOptions(
            bam=bam,
            sample_name=sample_name,
            bed=bed,
            output=output,
            config_path=config,
            threads=threads,
            strategy=strategy,
            min_mapq=min_mapq,
            mimic_perl_output=mimic_perl_output,
            one_based=one_based,
            gene_rows=gene_rows,
            read_counts=read_counts,
            strict_chromosomes=strict_chromosomes,
            progress=progress,
            log_file=log_file,
            verbose=verbose,
        )
        cfg = resolve_config(opts)
        setup_logging(level=effective_log_level(cfg, verbose), log_file=cfg.runtime.log_file)
        execute_run(cfg, logger)

    except KeyboardInterrupt:
        logger.error("Interrupted; no output written")
        sys.exit(EXIT_SIGINT)
    except Seq2CovError as exc:
        logger.error(f"{exc.__class__.__name__}: {exc}")
        sys.exit(EXIT_ERROR)
    except Exception as exc:
        logger.exception(f"Unexpected error: {exc}")
        sys.exit(EXIT_ERROR)


cli.add_command(init_config)
cli.add_command(validate)


def main(argv: list[str] | None = None) -> int:
    """Main entry point with signal handling."""
    interrupted = {"signal": None}

    def handler(signum: int, frame: Optional[FrameType]) -> None:
        interrupted["signal"] = signum
        _handle_signal(signum, frame)

    previous = {sig: signal.signal(sig, handler) for sig in (signal.SIGINT, signal.SIGTERM)}

    try:
        cli.main(args=argv, prog_name="seq2cov", standalone_mode=False)
        return EXIT_SUCCESS
    except KeyboardInterrupt:
        return signal_exit_code(interrupted["signal"] or signal.SIGINT)
    except SystemExit as exc:
        # Preserve explicit exit codes from cli()
        if exc.code is None:
            return EXIT_SUCCESS
        if exc.code == EXIT_SIGINT and interrupted["signal"] == signal.SIGTERM:
            return EXIT_SIGTERM
        return exc.code if isinstance(exc.code, int) else EXIT_ERROR
    except click.exceptions.Exit as exc:
        return exc.exit_code
    except click.ClickException as exc:
        exc.show()
        return exc.exit_code
    except click.exceptions.Abort:
        return EXIT_SIGINT
    finally:
        for sig, old in previous.items():
            signal.signal(sig, old)


if __name__ == "__main__":
    sys.exit(main())
