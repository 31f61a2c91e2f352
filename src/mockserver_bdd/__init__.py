"""MockServer expectations and verifications for behave and pytest-bdd scenarios."""

from mockserver_bdd.client import (
    MockServerClient,
    MockServerClientProtocol,
    MockServerError,
    VerificationError,
)
from mockserver_bdd.common.common import ScenarioError
from mockserver_bdd.common.query import decode_form, parse_query_string
from mockserver_bdd.context import MockServerContext
from mockserver_bdd.expectation import (
    ExpectationBuilder,
    ExpectedRequest,
    MockedResponse,
    build_verification,
)

__all__ = [
    "ExpectationBuilder",
    "ExpectedRequest",
    "MockServerClient",
    "MockServerClientProtocol",
    "MockServerContext",
    "MockServerError",
    "MockedResponse",
    "ScenarioError",
    "VerificationError",
    "build_verification",
    "decode_form",
    "parse_query_string",
]
