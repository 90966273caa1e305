import json
import sys

import click
from loguru import logger

from .cli_utils import reconstruct_command_line, setup_logging
from .pipeline import Capability, GeneratorConfig, Registry, load_declarations


@click.command()
@click.option("--config", "-c", default=None, type=click.Path(exists=True, resolve_path=True))
@click.option(
    "--json-schema",
    default=None,
    type=click.Path(resolve_path=True),
    help="Also write the bundled JSON Schema document to this path",
)
@click.option(
    "--disable",
    multiple=True,
    type=click.Choice([capability.value for capability in Capability]),
    help="Disable a capability (repeatable)",
)
@click.option("--verbose", "-v", is_flag=True, default=False, help="Log debug details")
@click.argument("declarations", default=None, type=click.Path(exists=True, resolve_path=True))
@click.argument("output", default=None, type=click.Path(resolve_path=True))
def model_schema_to_code(config, json_schema, disable, verbose, declarations, output):
    setup_logging("DEBUG" if verbose else "WARNING")

    if config is not None:
        with open(config) as f:
            config = GeneratorConfig.from_dict(json.load(f))
    else:
        config = GeneratorConfig()

    # CLI flags override the config file
    if disable:
        config.features = config.features.without(*disable)
    logger.debug(f"Enabled features: {', '.join(config.features.enabled_features())}")

    registry = Registry(config).extend(load_declarations(declarations))
    result = registry.generate(generation_comment=f"// Generated by {reconstruct_command_line(model_schema_to_code)}")

    with open(output, "w") as f:
        f.write(result.artifact)

    if json_schema is not None:
        with open(json_schema, "w") as f:
            json.dump(registry.json_schema_document(result), f, indent=2)
            f.write("\n")

    for failure in result.errors:
        click.echo(f"error: {failure}", err=True)

    if not result.success:
        sys.exit(1)
