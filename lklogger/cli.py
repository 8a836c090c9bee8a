import click
import yaml
from beartype.typing import List, Optional, Tuple

from lklogger.config import ConfigOverride, LoggingConfig
from lklogger.facade import LoggingFacade
from lklogger.fields import Field, get_field

CONTEXT_SETTINGS = dict(auto_envvar_prefix="LK_CLI")

EMIT_LEVELS = ["debug", "info", "warn", "error"]


class Environment:
    def __init__(self):
        self.config = ""
        self.override: Optional[ConfigOverride] = None


pass_environment = click.make_pass_decorator(Environment, ensure=True)


def parse_fields(values: Tuple[str, ...]) -> List[Field]:
    fields = []
    for value in values:
        key, separator, text = value.partition("=")
        if not separator or not key:
            raise click.BadParameter(f"'{value}' is not in key=value form.", param_hint="--field")
        fields.append(get_field(key, text))
    return fields


@click.group(context_settings=CONTEXT_SETTINGS)
@pass_environment
@click.option(
    "-c",
    "--config",
    type=click.Path(),
    default="",
    metavar="",
    help="Path to a YAML or INI file with a 'logger' section.",
)
@click.option("-l", "--level", type=click.Choice(EMIT_LEVELS, case_sensitive=False), help="Override log level.")
@click.option("--format", "format_style", type=click.Choice(["text", "json"]), help="Override output format.")
@click.option("-o", "--output-dir", type=click.Path(file_okay=False), help="Override log output directory.")
def cli(environment: Environment, config: str, level: str, format_style: str, output_dir: str):
    """lklogger - per-service logging with an aggregated stream"""
    environment.config = config
    if level or format_style or output_dir:
        environment.override = ConfigOverride(
            level=level or "", format=format_style or "", output_dir=output_dir or ""
        )


@cli.command("show-config", context_settings=CONTEXT_SETTINGS)
@pass_environment
def show_config(environment: Environment):
    """Print the resolved logging configuration."""
    config = LoggingConfig.resolve(environment.config, environment.override)
    click.echo(yaml.safe_dump(config.to_dict(), sort_keys=False), nl=False)


@cli.command(context_settings=CONTEXT_SETTINGS)
@pass_environment
@click.option("-s", "--service", required=True, metavar="", help="Service name, also the log file name.")
@click.option(
    "--level",
    "emit_level",
    type=click.Choice(EMIT_LEVELS, case_sensitive=False),
    default="info",
    show_default=True,
    help="Level of the emitted record.",
)
@click.option("--mirror", is_flag=True, help="Mirror the record into All.log.")
@click.option("-f", "--field", "raw_fields", multiple=True, metavar="", help="Field in key=value form, repeatable.")
@click.argument("message")
def emit(environment: Environment, service: str, emit_level: str, mirror: bool, raw_fields, message: str):
    """Write MESSAGE through a service logger."""
    fields = parse_fields(raw_fields)
    context = LoggingFacade.init(environment.config, environment.override)
    logger = context.new_service_logger(service, mirror=mirror)
    getattr(logger, emit_level.lower())(message, *fields)
