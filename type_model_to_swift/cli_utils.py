"""
Command line reconstruction for the generation comment.
"""

from pathlib import Path

import click

PROGRAM_NAME = "type_model_to_swift"


def _format_value(param: click.Parameter, value) -> str:
    # Paths keep only their file name so generated files do not depend on the checkout location
    if isinstance(param.type, click.Path):
        return Path(str(value)).name
    return str(value)


def reconstruct_command_line(click_command: click.Command) -> str:
    """
    Rebuild the invocation of a click command from the active context.

    Positional arguments come first, then every option that differs from
    its default. Flags are written without a value.

    Args:
        click_command: Click command whose parameters are inspected

    Returns:
        The command line, or just the program name outside a click context
    """
    try:
        params = click.get_current_context().params
    except RuntimeError:
        return PROGRAM_NAME

    positional = []
    flags = []
    for param in click_command.params:
        value = params.get(param.name)
        if not value:
            continue

        if isinstance(param, click.Argument):
            positional.append(_format_value(param, value))
        elif isinstance(param, click.Option) and value != param.default:
            flag = param.opts[0]
            if param.is_flag:
                flags.append(flag)
            else:
                flags.extend([flag, _format_value(param, value)])

    return " ".join([PROGRAM_NAME, *positional, *flags])
