"""Typed validation for Azure Resource Manager resources and templates.

Entry points for callers that validate template files::

    from atakora import configure_logging, load_options
    from atakora.validation import validate_template

    configure_logging()
    result = validate_template(text, load_options())

``load_options`` and ``configure_logging`` are the only functions that read
the environment; the validation functions take everything as arguments.
"""

from atakora.config import ValidationOptions, configure_logging, load_options

__version__ = "0.1.0"

__all__ = ["ValidationOptions", "configure_logging", "load_options"]
