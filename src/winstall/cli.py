"""CLI entry point: copy files into place with optional backups."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

import click

from .config import BackupSettings, resolve_backup_policy
from .diagnostics import DiagnosticSink
from .directories import install_directories
from .errors import InstallError
from .executor import CopyExecutor
from .models import CopyDirective, Destination

logger = logging.getLogger(__name__)


class UsageProblem(Exception):
    """Operands or options that do not form a valid install request."""


class InstallCommand(click.Command):
    """Command that only takes a backup CONTROL written as ``--backup=CONTROL``.

    A bare ``--backup`` stays a flag, so the token after it is always an
    operand. The attached value is moved to the hidden ``--backup-control``.
    """

    def parse_args(self, ctx, args):
        rewritten = []
        for index, arg in enumerate(args):
            if arg == "--":
                rewritten.extend(args[index:])
                break
            if arg.startswith("--backup="):
                rewritten.extend(["--backup-control", arg[len("--backup="):]])
            else:
                rewritten.append(arg)
        return super().parse_args(ctx, rewritten)


def _setup_logging(debug: bool):
    level = logging.DEBUG if debug else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )


def plan_destination(
    operands: list[str],
    target_directory: Optional[str] = None,
    no_target_directory: bool = False,
) -> tuple[list[Path], Destination]:
    """Split operands into sources and a destination.

    Mirrors install(1): ``-t DIR`` takes every operand as a source, ``-T``
    requires exactly SOURCE DEST, two operands with a non-directory DEST name
    a target file, and otherwise the last operand is the target directory.
    """
    if not operands:
        raise UsageProblem("missing file operand")

    if target_directory is not None:
        return [Path(op) for op in operands], Destination(Path(target_directory))

    if len(operands) < 2:
        raise UsageProblem(f"missing destination file operand after '{operands[0]}'")

    if no_target_directory:
        if len(operands) > 2:
            raise UsageProblem(f"extra operand '{operands[2]}'")
        return [Path(operands[0])], Destination.file(Path(operands[1]))

    target = Path(operands[-1])
    if len(operands) == 2 and not target.is_dir():
        return [Path(operands[0])], Destination.file(target)

    return [Path(op) for op in operands[:-1]], Destination(target)


@click.command(cls=InstallCommand, context_settings={"help_option_names": ["--help"]})
@click.argument("operands", nargs=-1, type=click.Path())
@click.option("-b", "--backup", "backup_flag", is_flag=True,
              help="Make a backup of each existing destination file "
                   "(--backup=CONTROL picks the method)")
@click.option("--backup-control", "backup", default=None, hidden=True)
@click.option("-S", "--suffix", default=None,
              help="Override the usual backup suffix")
@click.option("-t", "--target-directory", default=None, type=click.Path(),
              help="Copy all SOURCE arguments into DIRECTORY")
@click.option("-T", "--no-target-directory", is_flag=True,
              help="Treat DEST as a normal file")
@click.option("-d", "--directory", "directory_mode", is_flag=True,
              help="Treat all arguments as directory names; create all components")
@click.option("-D", "make_all_directories", is_flag=True,
              help="Create all leading components of DEST")
@click.option("-p", "--preserve-timestamps", is_flag=True,
              help="Apply access/modification times of SOURCE files to DEST")
@click.option("-v", "--verbose", is_flag=True,
              help="Print the name of each created file or directory")
@click.option("--debug", is_flag=True,
              help="Enable debug logging")
# Unix-only options, accepted and ignored
@click.option("-C", "--compare", is_flag=True, help="Ignored")
@click.option("-s", "--strip", is_flag=True, help="Ignored")
@click.option("--strip-program", default=None, help="Ignored")
@click.option("-g", "--group", default=None, help="Ignored")
@click.option("-m", "--mode", default=None, help="Ignored")
@click.option("-o", "--owner", default=None, help="Ignored")
@click.option("--preserve-context", is_flag=True, help="Ignored")
@click.option("-Z", "--context", is_flag=True, help="Ignored")
@click.version_option(package_name="winstall")
@click.pass_context
def main(ctx, operands, backup_flag, backup, suffix, target_directory,
         no_target_directory, directory_mode, make_all_directories,
         preserve_timestamps, verbose, debug, **ignored):
    """winstall: copy SOURCE to DEST, or multiple SOURCE(s) into DIRECTORY.

    With -d, create every named directory instead.
    """
    _setup_logging(debug)
    sink = DiagnosticSink()

    for name, value in ignored.items():
        if value:
            logger.debug("Ignoring unix-only option --%s", name.replace("_", "-"))

    if not operands:
        sink.usage_error("missing file operand")
        ctx.exit(1)

    if target_directory is not None and no_target_directory:
        sink.usage_error(
            "cannot combine --target-directory (-t) and --no-target-directory (-T)"
        )
        ctx.exit(1)

    if directory_mode:
        ok = install_directories([Path(op) for op in operands], sink, verbose=verbose)
        ctx.exit(0 if ok else 1)

    requested = backup if backup is not None else ("" if backup_flag else None)
    try:
        policy = resolve_backup_policy(requested, suffix, BackupSettings.from_env())
        sources, destination = plan_destination(
            list(operands), target_directory, no_target_directory,
        )
    except (ValueError, UsageProblem) as e:
        sink.usage_error(str(e))
        ctx.exit(1)

    directive = CopyDirective(
        files=tuple(sources),
        destination=destination,
        policy=policy,
        preserve_timestamps=preserve_timestamps,
        make_all_directories=make_all_directories,
        verbose=verbose,
    )
    logger.debug("Directive: %s", directive)

    try:
        report = CopyExecutor(sink).execute(directive)
    except InstallError as e:
        sink.error(e)
        ctx.exit(1)

    ctx.exit(0 if report.success else 1)


if __name__ == "__main__":
    main()
