import json

import click

from .cli_utils import reconstruct_command_line
from .logging import configure_logging, get_logger
from .pipeline import CodeGeneratorConfig, FileSink, GenerationError, PipelineGenerator, RegistryLoader

logger = get_logger("cli")


@click.command()
@click.option("--config", "-c", default=None, type=click.Path(exists=True, resolve_path=True), help="JSON configuration file")
@click.option(
    "--rename-rule",
    "-r",
    default=None,
    type=click.Choice(["identity", "snake_case", "camelCase", "PascalCase", "kebab-case", "SCREAMING_SNAKE_CASE"]),
    help="Rename rule for wire keys (overrides the config file)",
)
@click.option("--verbose", "-v", is_flag=True, default=False, help="Log every type as it is compiled")
@click.argument("registry", type=click.Path(exists=True, resolve_path=True))
@click.argument("output", type=click.Path(resolve_path=True))
def type_model_to_swift(config, rename_rule, verbose, registry, output):
    """Generate Swift Codable types from a REGISTRY document into OUTPUT."""
    configure_logging(verbose=verbose)

    try:
        with open(registry) as f:
            document = json.load(f)

        if config is not None:
            with open(config) as f:
                config = CodeGeneratorConfig.from_dict(json.load(f))
        else:
            config = CodeGeneratorConfig()
    except (TypeError, ValueError) as e:
        # Malformed JSON or an unknown option
        raise click.ClickException(str(e)) from e

    # CLI flag overrides the config file
    if rename_rule is not None:
        config = CodeGeneratorConfig.from_dict({**config.to_dict(), "rename_rule": rename_rule})

    try:
        types = RegistryLoader().load(document)
        codegen = PipelineGenerator(types, config, reconstruct_command_line(type_model_to_swift))
        codegen.write(FileSink(output))
    except GenerationError as e:
        raise click.ClickException(str(e)) from e

    logger.info("Wrote %s", output)
