"""Behave environment setup for the MockServer steps.

The MockServer to use is read from ``behave.ini`` userdata, or from the
``MOCKSERVER_URL`` environment variable. The bundled ``behave.ini`` points at
the in-memory stub, which needs ``stubs`` on ``PYTHONPATH``::

    PYTHONPATH=stubs behave
"""

from mockserver_bdd import hooks


def before_all(context):
    """Set up the MockServer context before running any features.

    Args:
        context: Behave context object available to all tests
    """
    hooks.before_all(context)


def before_scenario(context, scenario):
    """Reset per-scenario MockServer state.

    Args:
        context: Behave context object
        scenario: The scenario about to run
    """
    hooks.before_scenario(context, scenario)
    context.response = None


def after_scenario(context, scenario):
    """Reset MockServer if the scenario used it.

    Args:
        context: Behave context object
        scenario: The scenario that just ran
    """
    hooks.after_scenario(context, scenario)
