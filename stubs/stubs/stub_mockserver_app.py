"""
Flask front end for :class:`stubs.stub_mockserver.MockServerStub`.

Serves the MockServer control endpoints under ``/mockserver/`` and answers every
other path with the stub's mocked responses, so tests can drive a real
:class:`mockserver_bdd.client.MockServerClient` over HTTP.
"""

from flask import Flask, Response, request

from stubs.stub_mockserver import MockServerStub, RecordedRequest

HTTP_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"]


def create_app(stub: MockServerStub | None = None) -> Flask:
    """
    Create a Flask app serving ``stub``.

    :param stub: Stub backing the app. A fresh one is created if not supplied and
        is available as ``app.config["MOCKSERVER_STUB"]``.
    :return: The Flask application.
    """
    app = Flask(__name__)
    app.config["MOCKSERVER_STUB"] = stub = stub or MockServerStub()

    @app.route("/mockserver/<endpoint>", methods=["PUT"])
    def control(endpoint: str) -> Response:
        """Endpoint for MockServer control requests."""
        payload = request.get_json(silent=True)
        status_code, text = stub.admin(f"/mockserver/{endpoint}", payload)
        return Response(text, status=status_code, content_type="text/plain")

    @app.route("/", defaults={"path": ""}, methods=HTTP_METHODS)
    @app.route("/<path:path>", methods=HTTP_METHODS)
    def mocked(path: str) -> Response:  # noqa: ARG001 (request.path is used)
        """Endpoint answering requests from the system under test."""
        headers: dict[str, list[str]] = {}
        for name, value in request.headers.items():
            headers.setdefault(name, []).append(value)

        recorded = RecordedRequest(
            method=request.method,
            path=request.path,
            query=request.args.to_dict(flat=False),
            headers=headers,
            body=request.get_data(as_text=True),
        )
        stub_response = stub.respond(recorded)

        return Response(
            stub_response.content,
            status=stub_response.status_code,
            headers=dict(stub_response.headers),
        )

    return app
