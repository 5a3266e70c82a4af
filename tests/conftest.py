"""
Shared fixtures: a stubbed HTTP client and real ``requests.Response`` objects,
so no test ever reaches a provider.
"""

import json
from typing import Any, Dict, Optional
from unittest.mock import Mock

import pytest
import requests

from app import create_app
from gateway import InferenceGateway


TEST_CREDENTIALS = {
    'HUGGINGFACE_API_KEY': 'hf_test',
    'OPENAI_API_KEY': 'sk-test',
    'GEMINI_API_KEY': 'gemini-test',
}


def build_response(status_code: int = 200, json_body: Any = None, content: Optional[bytes] = None,
                   content_type: Optional[str] = None, headers: Optional[Dict[str, str]] = None) -> requests.Response:
    """Build a ``requests.Response`` as a provider would return it."""
    response = requests.Response()
    response.status_code = status_code
    response.encoding = 'utf-8'

    if json_body is not None:
        response._content = json.dumps(json_body).encode('utf-8')
        response.headers['Content-Type'] = content_type or 'application/json'
    else:
        response._content = content if content is not None else b''
        if content_type:
            response.headers['Content-Type'] = content_type

    response.headers.update(headers or {})
    return response


@pytest.fixture
def make_response():
    return build_response


@pytest.fixture
def http():
    """Stub HTTP client; set ``http.post.return_value`` per test."""
    return Mock(spec=['post'])


@pytest.fixture
def gateway(http):
    return InferenceGateway(
        credentials=TEST_CREDENTIALS,
        timeout=5.0,
        gemini_project='test-project',
        retry_after=20,
        http=http,
    )


@pytest.fixture
def app(http):
    return create_app({'ENVIRONMENT': 'testing'}, http=http)


@pytest.fixture
def client(app):
    return app.test_client()
