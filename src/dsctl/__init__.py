"""dsctl - Docker stack control.

Manage a directory of compose stacks: start, stop, reload and update many
services at once under a bounded job count, and watch their state.
"""

__version__ = "0.4.0"

__all__ = ["__version__"]
