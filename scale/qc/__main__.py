import click
import json
import sys
import scale.qc.internal as internal


# ---------------------------------------------------------------------------------------
# QC
# ---------------------------------------------------------------------------------------
#
# This is the entry point to run QC as a command line interface.
#
@click.group()
def cli():
    pass


# ---------------------------------------------------------------------------------------
# QC CHECK
# ---------------------------------------------------------------------------------------
#
# This is the entry point to run QC CHECK command.
#
@click.command(name="check")
@click.argument("target", metavar="TARGET", type=str, required=False)
@click.argument("max_tests", metavar="MAX_TESTS", type=int, required=False)
@click.option(
    "--seed",
    "--rand-seed",
    "seed",
    type=int,
    default=None,
    help="seed for the random generator (default: drawn fresh and reported)",
)
@click.option(
    "--shrink/--noshrink",
    default=None,
    is_flag=True,
    help="whether to minimize a counterexample",
)
@click.option(
    "--verbose",
    default=None,
    is_flag=True,
    help="log every input tried",
)
@click.option(
    "--sandbox",
    type=click.Choice(["inprocess", "process"]),
    default=None,
    help="where the property runs (default: inprocess)",
)
@click.option(
    "--timeout",
    type=float,
    default=None,
    help="time limit in seconds for one evaluation (process sandbox only)",
)
@click.option(
    "--failed-file",
    type=click.Path(),
    default=None,
    help="write a reproduction script for a counterexample here",
)
@click.option(
    "--config",
    "config_file",
    metavar="config.qc.json",
    type=click.Path(exists=True),
    default=None,
    help="JSON configuration file",
)
@click.option(
    "--progress/--noprogress",
    "progress_bar",
    default=None,
    is_flag=True,
    help="whether to show a progress bar",
)
@internal.copy_doc(internal.check)
def command_check(**kwargs):
    try:
        result = internal.check(**kwargs)
    except ValueError as ve:
        internal.logger.error(str(ve))
        sys.exit(2)
    sys.exit(result.exit_code)


cli.add_command(command_check)


# ---------------------------------------------------------------------------------------
# QC LIST
# ---------------------------------------------------------------------------------------
#
# This is the entry point to run QC LIST command.
#
@click.command(name="list")
@click.argument("module_name", metavar="MODULE", type=str)
@internal.copy_doc(internal.list_checks)
def command_list(module_name):
    try:
        checks = internal.list_checks(module_name)
    except ValueError as ve:
        internal.logger.error(str(ve))
        sys.exit(2)
    for name, description in checks.items():
        click.echo(f"{name}\t{description}")


cli.add_command(command_list)


# ---------------------------------------------------------------------------------------
# QC SCHEMA
# ---------------------------------------------------------------------------------------
#
# This is the entry point to run QC SCHEMA command.
#
@click.command(name="schema")
@internal.copy_doc(internal.schema)
def command_schema():
    click.echo(json.dumps(internal.schema(), indent=4))


cli.add_command(command_schema)


if __name__ == "__main__":
    cli()
