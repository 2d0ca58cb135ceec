"""Read-only adapters over click command trees.

* :mod:`~clibridge.tree.nodes` -- :class:`CommandNode`, one command plus
  its ancestry.
* :mod:`~clibridge.tree.flags` -- converts click options into
  :class:`~clibridge.models.FlagDescriptor` values.
"""

from clibridge.tree.flags import describe_flag
from clibridge.tree.nodes import CommandNode

__all__ = ["CommandNode", "describe_flag"]
