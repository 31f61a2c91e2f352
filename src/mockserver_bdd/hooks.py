"""
Behave environment hooks.

Call these from a project's ``features/environment.py``::

    from mockserver_bdd import hooks


    def before_all(context):
        hooks.before_all(context)


    def before_scenario(context, scenario):
        hooks.before_scenario(context, scenario)


    def after_scenario(context, scenario):
        hooks.after_scenario(context, scenario)

The :class:`~mockserver_bdd.context.MockServerContext` is stored as
``context.mockserver`` and is what the steps in :mod:`mockserver_bdd.steps` use.
"""

import logging
from typing import Any

from mockserver_bdd.config import get_mockserver_setting, get_mockserver_timeout
from mockserver_bdd.context import MockServerContext

logger = logging.getLogger(__name__)


def before_all(context: Any) -> None:
    """
    Create the MockServer context from behave userdata and the environment.

    A ``context.mockserver`` set up beforehand (e.g. around a custom client) is
    kept as it is.

    :param context: Behave context object available to all tests
    """
    if getattr(context, "mockserver", None) is not None:
        return

    userdata = context.config.userdata
    setting = get_mockserver_setting(userdata)
    logger.info("Using MockServer %s", setting)

    context.mockserver = MockServerContext(
        setting, timeout=get_mockserver_timeout(userdata)
    )


def before_scenario(context: Any, scenario: Any) -> None:
    """
    Reset per-scenario state and remember where the feature file lives.

    :param context: Behave context object
    :param scenario: The scenario about to run
    """
    context.mockserver.before_scenario()
    context.mockserver.store_feature_file(scenario.feature.filename)


def after_scenario(context: Any, scenario: Any) -> None:  # noqa: ARG001
    """
    Reset MockServer if the scenario used it.

    :param context: Behave context object
    :param scenario: The scenario that just ran
    """
    context.mockserver.after_scenario()
