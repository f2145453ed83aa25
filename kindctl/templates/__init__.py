"""Jinja2 templates for node configuration files.

Templates live beside this module and are rendered with ``StrictUndefined``
so a missing variable fails loudly instead of producing a broken config.
"""
import os

from jinja2 import (
    Environment,
    FileSystemLoader,
    StrictUndefined,
    TemplateNotFound,
    TemplateSyntaxError,
    UndefinedError,
)

from ..errors import PipelineStepError


def get_template_path() -> str:
    """Get the absolute path to the templates directory."""
    return os.path.dirname(os.path.abspath(__file__))


def _environment() -> Environment:
    return Environment(
        loader=FileSystemLoader(get_template_path()),
        trim_blocks=True,
        lstrip_blocks=True,
        undefined=StrictUndefined,
        keep_trailing_newline=True,
    )


def render_template(name: str, **context) -> str:
    """Render the named template file.

    Raises:
        PipelineStepError: If the template is missing, invalid or references
            an undefined variable
    """
    try:
        return _environment().get_template(name).render(**context)
    except TemplateNotFound as e:
        raise PipelineStepError(f"configuration template not found: {e}") from e
    except TemplateSyntaxError as e:
        raise PipelineStepError(f"template syntax error in {name}: {e}") from e
    except UndefinedError as e:
        raise PipelineStepError(f"missing required template variable in {name}: {e}") from e


def render_string(source: str, **context) -> str:
    """Render a template given as a string, e.g. a manifest read from a node."""
    try:
        return _environment().from_string(source).render(**context)
    except TemplateSyntaxError as e:
        raise PipelineStepError(f"template syntax error: {e}") from e
    except UndefinedError as e:
        raise PipelineStepError(f"missing required template variable: {e}") from e
