"""MockServer step definitions provided by the package."""

import mockserver_bdd.steps  # noqa: F401
