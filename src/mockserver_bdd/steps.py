"""Behave step definitions for MockServer expectations and verifications.

Importing the module registers the steps; do it from a project's step directory,
e.g. ``features/steps/mockserver.py``::

    import mockserver_bdd.steps  # noqa: F401

The steps expect ``context.mockserver`` to be set by :mod:`mockserver_bdd.hooks`.
"""

from behave import given, then


@given("I reset mocks")
def step_reset_mocks(context):
    """Manually clear mocks.

    Args:
        context: Behave context with mockserver from environment.py
    """
    context.mockserver.reset_mocks()


@given('I will receive the header "{name}" "{value}"')
def step_will_receive_header(context, name, value):
    """Expect a header on the request of the next mocked call.

    Example:

        Given I will receive the header "Content-Type" "application/json"
        And the request "PATCH" "/users/1" will return the json:
            \"\"\"
            {"id": 1, "name": "Zidane edited"}
            \"\"\"

    Args:
        context: Behave context
        name: Header name
        value: Header value
    """
    context.mockserver.will_receive_header(name, value)


@given("I will receive this raw body:")
def step_will_receive_raw_body(context):
    """Expect the doc string as the raw body of the next mocked call."""
    context.mockserver.will_receive_raw_body(context.text)


@given("I will receive this json payload:")
def step_will_receive_json_payload(context):
    """Expect the doc string as the JSON body of the next mocked call.

    Example:

        Given I will receive this json payload:
            \"\"\"
            {"name": "Zidane edited"}
            \"\"\"
        And the request "PATCH" "/users/1" will return the json:
            \"\"\"
            {"id": 1, "name": "Zidane edited"}
            \"\"\"
    """
    context.mockserver.will_receive_json_payload(context.text)


@given("I expect this request:")
def step_expect_request(context):
    """Send a hand-written MockServer expectation.

    Example:

        Given I expect this request:
            \"\"\"
            {
                "httpRequest": {
                    "method": "GET",
                    "path": "/my/custom/path",
                    "queryStringParameters": {"myParam": ["possibleValue"]}
                },
                "httpResponse": {
                    "statusCode": 200,
                    "body": {"my_custom_body": "ok"}
                }
            }
            \"\"\"
    """
    context.mockserver.expect_request(context.text)


@given('the request "{method}" "{path}" will return body from file "{filename}"')
def step_request_will_return_body_from_file(context, method, path, filename):
    """Mock a request with the raw contents of a file next to the feature.

    Example:

        Given the request "GET" "/index.html" will return body from file "index.html"
    """
    context.mockserver.request_will_return_body_from_file(method, path, filename)


@given('the request "{method}" "{path}" will return the json:')
def step_request_will_return_json(context, method, path):
    """Mock a request with the JSON doc string as response body.

    Example:

        Given the request "GET" "/users" will return the json:
            \"\"\"
            [{"id": 1, "name": "Zidane"}, {"id": 2, "name": "Barthez"}]
            \"\"\"
    """
    context.mockserver.request_will_return_json(method, path, context.text)


@given('the request "{method}" "{path}" will return the json from file "{filename}"')
def step_request_will_return_json_from_file(context, method, path, filename):
    """Mock a request with a JSON file next to the feature as response body.

    Example:

        Given the request "GET" "/users" will return the json from file "users.json"
    """
    context.mockserver.request_will_return_json_from_file(method, path, filename)


@then('the request "{method}" "{path}" should have been called exactly {times:d} times')
def step_request_should_have_been_called(context, method, path, times):
    """Verify how many times MockServer received a request.

    Example:

        When I send a "PUT" request on "/users/1"
        Then the request "PUT" "/sso/users/1" should have been called exactly 1 times
    """
    context.mockserver.request_should_have_been_called(method, path, times)
