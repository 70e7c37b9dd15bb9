"""Tests for the configuration generator client."""

from __future__ import annotations

import asyncio

import httpx
import pytest

from pipegen.clients.generator import (
    GENERATION_MESSAGES,
    ConfigGeneratorClient,
    GenerationResponse,
)
from pipegen.config import EndpointConfig
from pipegen.errors import (
    AccessDeniedError,
    NotFoundError,
    RemoteError,
    RequestTimeoutError,
    UnknownError,
)
from pipegen.models import CIProvider, WorkflowRepresentation
from tests._fixtures.backend import FakeBackend

GENERATE_PATH = "/api/cicdgen"
WORKFLOW = WorkflowRepresentation(workflow={"nodes": [{"key": "source-1"}], "links": []})


def _generate(
    backend: FakeBackend,
    provider: CIProvider = CIProvider.GITHUB_ACTIONS,
    timeout: float = 5.0,
) -> GenerationResponse:
    client = ConfigGeneratorClient(
        EndpointConfig(base_url="http://backend.test"),
        timeout=timeout,
        transport=backend.transport(),
    )
    return asyncio.run(client.generate(WORKFLOW, repo_info="Repository: acme/widgets", provider=provider))


def test_generate_posts_workflow_with_repo_info_and_provider(backend: FakeBackend) -> None:
    backend.reply("POST", GENERATE_PATH, body={"yaml": "name: ci\n", "projectName": "widgets"})

    response = _generate(backend, CIProvider.JENKINS)

    assert response == GenerationResponse(yaml="name: ci\n", project_name="widgets")
    (request,) = backend.calls()
    assert request.method == "POST"
    assert backend.json_body() == {
        "workflow": {"nodes": [{"key": "source-1"}], "links": []},
        "repoInfo": "Repository: acme/widgets",
        "ciProvider": "jenkins",
    }


def test_missing_project_name_is_none(backend: FakeBackend) -> None:
    backend.reply("POST", GENERATE_PATH, body={"yaml": "stages: []\n", "projectName": ""})

    assert _generate(backend).project_name is None


def test_error_body_without_yaml_is_remote_error(backend: FakeBackend) -> None:
    backend.reply("POST", GENERATE_PATH, body={"error": "model overloaded"})

    with pytest.raises(RemoteError) as excinfo:
        _generate(backend)

    assert excinfo.value.message == "model overloaded"


def test_forbidden_is_access_denied(backend: FakeBackend) -> None:
    backend.reply("POST", GENERATE_PATH, status=403, body={"error": "forbidden"})

    with pytest.raises(AccessDeniedError) as excinfo:
        _generate(backend)

    assert excinfo.value.message == GENERATION_MESSAGES.access_denied


def test_server_error_message_is_surfaced(backend: FakeBackend) -> None:
    backend.reply("POST", GENERATE_PATH, status=500, body={"error": "Unsupported provider"})

    with pytest.raises(RemoteError) as excinfo:
        _generate(backend)

    assert excinfo.value.message == "Unsupported provider"


def test_gateway_timeout_is_timeout(backend: FakeBackend) -> None:
    backend.reply("POST", GENERATE_PATH, status=504)

    with pytest.raises(RequestTimeoutError):
        _generate(backend)


def test_unstructured_failure_is_unknown(backend: FakeBackend) -> None:
    backend.fail("POST", GENERATE_PATH, lambda request: httpx.RemoteProtocolError("eof", request=request))

    with pytest.raises(UnknownError) as excinfo:
        _generate(backend)

    assert excinfo.value.message == GENERATION_MESSAGES.unknown


def test_missing_generator_is_not_found(backend: FakeBackend) -> None:
    backend.reply("POST", GENERATE_PATH, status=404, body={"error": "no such route"})

    with pytest.raises(NotFoundError) as excinfo:
        _generate(backend)

    assert excinfo.value.message == GENERATION_MESSAGES.not_found


@pytest.mark.parametrize(
    "error",
    [
        lambda request: httpx.ReadTimeout("slow", request=request),
        lambda request: httpx.ConnectTimeout("slow", request=request),
    ],
    ids=["read", "connect"],
)
def test_transport_timeouts_are_timeouts(backend: FakeBackend, error) -> None:
    backend.fail("POST", GENERATE_PATH, error)

    with pytest.raises(RequestTimeoutError) as excinfo:
        _generate(backend)

    assert excinfo.value.message == GENERATION_MESSAGES.timeout


def test_wait_bound_covers_slow_generation(backend: FakeBackend) -> None:
    async def _slow(request: httpx.Request) -> httpx.Response:
        await asyncio.sleep(1.0)
        return httpx.Response(200, json={"yaml": "name: ci\n"})

    backend.route("POST", GENERATE_PATH, _slow)

    with pytest.raises(RequestTimeoutError) as excinfo:
        _generate(backend, timeout=0.05)

    assert excinfo.value.message == GENERATION_MESSAGES.timeout
