"""Lessor: task orchestration and provider health circuit-breaking.

Dispatches due agent tasks through compliance and human-control gates,
and probes external providers to degrade or restore the agents that
depend on them.
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
