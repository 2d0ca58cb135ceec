"""JSON-Schema synthesis for tool inputs and outputs.

* :mod:`~clibridge.schema.fragments` -- per-flag fragments and defaults.
* :mod:`~clibridge.schema.templates` -- the template registry and the
  assembly of the ``flags``/``args`` input schema.
"""

from clibridge.schema.fragments import default_for, fragment_for, required_for
from clibridge.schema.templates import (
    SchemaTemplates,
    args_description,
    build_flags_schema,
    build_input_schema,
    select_flags,
)

__all__ = [
    "SchemaTemplates",
    "args_description",
    "build_flags_schema",
    "build_input_schema",
    "default_for",
    "fragment_for",
    "required_for",
    "select_flags",
]
