"""Step definitions standing in for the application under test.

With the in-memory stub configured, requests are sent straight into it with
:meth:`stubs.stub_mockserver.MockServerStub.handle`.
"""

from behave import then, when


@when('the application sends a "{method}" request to "{path}"')
def step_send_request(context, method, path):
    """Send a request to the mocked API.

    Args:
        context: Behave context
        method: HTTP method
        path: Request path, optionally with a query string
    """
    context.response = context.mockserver.client.handle(method, path)


@when('the application sends a "{method}" request to "{path}" with the json:')
def step_send_json_request(context, method, path):
    """Send a request with a JSON body to the mocked API.

    Args:
        context: Behave context
        method: HTTP method
        path: Request path, optionally with a query string
    """
    context.response = context.mockserver.client.handle(
        method,
        path,
        headers={"Content-Type": "application/json"},
        body=context.text,
    )


@then("the response status code should be {expected_status:d}")
def step_check_status_code(context, expected_status):
    """Verify the response status code matches expected value.

    Args:
        context: Behave context containing the response
        expected_status: Expected HTTP status code
    """
    assert context.response.status_code == expected_status, (
        f"Expected status {expected_status}, got {context.response.status_code}"
    )


@then('the response should contain "{expected_text}"')
def step_check_response_contains(context, expected_text):
    """Verify the response contains the expected text.

    Args:
        context: Behave context containing the response
        expected_text: Text that should be in the response
    """
    assert expected_text in context.response.text, (
        f"Expected '{expected_text}' in response, got: {context.response.text}"
    )
