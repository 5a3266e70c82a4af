"""
Contract tests for the HTTP surface.

Drive the Flask app with its test client and a stubbed provider client:
- status codes and JSON bodies per endpoint
- validation happens before any outbound call
- binary image passthrough and the loading (503) signal
- CORS for the configured origin
"""

import base64

import pytest

from app import create_app

PNG_BYTES = b'\x89PNG\r\n\x1a\nfake-image-data'
ORIGIN = 'http://localhost:3000'


# ============================================================================
# /summarize
# ============================================================================


class TestSummarizeEndpoint:
    def test_success(self, client, http, make_response):
        http.post.return_value = make_response(200, json_body=[{'summary_text': 'X'}])

        response = client.post('/summarize', json={'text': 'A long article'})

        assert response.status_code == 200
        assert response.get_json() == {'model': 'facebook/bart-large-cnn', 'summary': 'X'}

    def test_model_index(self, client, http, make_response):
        http.post.return_value = make_response(200, json_body=[{'generated_text': 'Y'}])

        response = client.post('/summarize', json={'text': 'A long article', 'modelIndex': 1})

        assert response.get_json() == {'model': 'mistralai/Mixtral-8x7B-Instruct-v0.1', 'summary': 'Y'}

    def test_unrecognized_shape_falls_back(self, client, http, make_response):
        http.post.return_value = make_response(200, json_body={'foo': 1})

        response = client.post('/summarize', json={'text': 'A long article'})

        assert response.status_code == 200
        assert response.get_json()['summary'] == '{"foo": 1}'

    @pytest.mark.parametrize('body', [{}, {'text': ''}, {'text': None}, {'modelIndex': 0}])
    def test_missing_text(self, client, http, body):
        response = client.post('/summarize', json=body)

        assert response.status_code == 400
        assert response.get_json()['error'] == "Missing 'text' in request body"
        http.post.assert_not_called()

    @pytest.mark.parametrize('index', [-1, 3, 'one'])
    def test_invalid_model_index(self, client, http, index):
        response = client.post('/summarize', json={'text': 'A long article', 'modelIndex': index})

        assert response.status_code == 400
        assert response.get_json()['code'] == 'validation_error'
        http.post.assert_not_called()

    def test_non_json_body(self, client, http):
        response = client.post('/summarize', data='text=hello', content_type='application/x-www-form-urlencoded')

        assert response.status_code == 400
        assert response.get_json()['error'] == 'Request body must be a JSON object'
        http.post.assert_not_called()

    def test_json_array_body(self, client, http):
        response = client.post('/summarize', json=['text'])

        assert response.status_code == 400
        http.post.assert_not_called()

    def test_upstream_failure(self, client, http, make_response):
        http.post.return_value = make_response(429, json_body={'error': 'Rate limit reached'})

        response = client.post('/summarize', json={'text': 'A long article'})

        assert response.status_code == 500
        assert response.get_json() == {
            'error': 'Failed to summarize text',
            'code': 'upstream_error',
            'details': {'error': 'Rate limit reached'},
        }


# ============================================================================
# /detect-ai
# ============================================================================


class TestDetectEndpoint:
    def test_ai_label(self, client, http, make_response):
        http.post.return_value = make_response(200, json_body=[{'label': 'Fake', 'score': 0.9}])

        response = client.post('/detect-ai', json={'text': 'Some text'})

        assert response.status_code == 200
        assert response.get_json() == {
            'model': 'openai-community/roberta-base-openai-detector',
            'confidence': 90,
            'verdict': 'Likely AI-generated',
        }

    def test_no_ai_label(self, client, http, make_response):
        http.post.return_value = make_response(200, json_body=[{'label': 'Real', 'score': 0.9}])

        body = client.post('/detect-ai', json={'text': 'Some text'}).get_json()

        assert body['confidence'] == 0
        assert body['verdict'] == 'Unknown'

    def test_missing_text(self, client, http):
        response = client.post('/detect-ai', json={'prompt': 'wrong field'})

        assert response.status_code == 400
        http.post.assert_not_called()


# ============================================================================
# /generate and /generate-image
# ============================================================================


class TestGenerateEndpoint:
    def test_binary_passthrough(self, client, http, make_response):
        http.post.return_value = make_response(200, content=PNG_BYTES, content_type='image/png',
                                               headers={'Content-Length': str(len(PNG_BYTES))})

        response = client.post('/generate', json={'prompt': 'a lighthouse'})

        assert response.status_code == 200
        assert response.data == PNG_BYTES
        assert response.headers['Content-Type'] == 'image/png'
        assert response.headers['Content-Length'] == str(len(PNG_BYTES))
        assert response.headers['X-Model-Id'] == 'stabilityai/stable-diffusion-xl-base-1.0'

    def test_loading_returns_503(self, client, http, make_response):
        http.post.return_value = make_response(200, json_body={'error': 'Model is currently loading',
                                                               'estimated_time': 30.0})

        response = client.post('/generate', json={'prompt': 'a lighthouse'})

        assert response.status_code == 503
        body = response.get_json()
        assert body['status'] == 'loading'
        assert body['retry_after'] == 30
        assert body['error'] == 'Model is currently loading'
        assert response.headers['Retry-After'] == '30'

    def test_loading_with_infinite_estimate_returns_503(self, client, http, make_response):
        http.post.return_value = make_response(200, json_body={'error': 'Model is currently loading',
                                                               'estimated_time': float('inf')})

        response = client.post('/generate', json={'prompt': 'a lighthouse'})

        assert response.status_code == 503
        assert response.get_json()['status'] == 'loading'
        assert response.headers['Retry-After'] == '20'

    def test_json_error_returns_500(self, client, http, make_response):
        http.post.return_value = make_response(200, json_body={'error': 'Authorization header is invalid'})

        response = client.post('/generate', json={'prompt': 'a lighthouse'})

        assert response.status_code == 500
        assert response.get_json()['error'] == 'Authorization header is invalid'

    def test_openai_image_is_returned_as_bytes(self, client, http, make_response):
        encoded = base64.b64encode(PNG_BYTES).decode('ascii')
        http.post.return_value = make_response(200, json_body={'data': [{'b64_json': encoded}]})

        response = client.post('/generate', json={'prompt': 'a lighthouse', 'modelIndex': 1})

        assert response.status_code == 200
        assert response.data == PNG_BYTES
        assert response.headers['Content-Type'] == 'image/png'

    def test_query_alias(self, client, http, make_response):
        http.post.return_value = make_response(200, content=PNG_BYTES, content_type='image/png')

        response = client.post('/generate', json={'query': 'a lighthouse'})

        assert response.status_code == 200
        assert http.post.call_args.kwargs['json'] == {'inputs': 'a lighthouse'}

    def test_missing_prompt(self, client, http):
        response = client.post('/generate', json={'text': 'wrong field'})

        assert response.status_code == 400
        assert response.get_json()['error'] == "Missing 'prompt' in request body"
        http.post.assert_not_called()

    def test_invalid_model_index(self, client, http):
        response = client.post('/generate', json={'prompt': 'a lighthouse', 'modelIndex': 7})

        assert response.status_code == 400
        http.post.assert_not_called()

    def test_data_url_variant(self, client, http, make_response):
        http.post.return_value = make_response(200, content=PNG_BYTES, content_type='image/png')

        response = client.post('/generate-image', json={'query': 'a lighthouse'})

        assert response.status_code == 200
        body = response.get_json()
        assert body['model'] == 'stabilityai/stable-diffusion-xl-base-1.0'
        assert body['image'] == 'data:image/png;base64,' + base64.b64encode(PNG_BYTES).decode('ascii')

    def test_data_url_variant_loading(self, client, http, make_response):
        http.post.return_value = make_response(503, json_body={'error': 'Model is currently loading'})

        response = client.post('/generate-image', json={'prompt': 'a lighthouse'})

        assert response.status_code == 503
        assert response.get_json()['status'] == 'loading'


# ============================================================================
# Idempotence
# ============================================================================


class TestIdempotence:
    @pytest.mark.parametrize('path,body,upstream', [
        ('/summarize', {'text': 'A long article'}, {'json_body': [{'summary_text': 'X'}]}),
        ('/detect-ai', {'text': 'Some text'}, {'json_body': [{'label': 'Fake', 'score': 0.42}]}),
        ('/generate', {'prompt': 'a lighthouse'}, {'content': PNG_BYTES, 'content_type': 'image/png'}),
    ])
    def test_same_request_same_response(self, client, http, make_response, path, body, upstream):
        http.post.side_effect = lambda *args, **kwargs: make_response(200, **upstream)

        first = client.post(path, json=body)
        second = client.post(path, json=body)

        assert first.status_code == second.status_code == 200
        assert first.data == second.data
        assert first.headers['Content-Type'] == second.headers['Content-Type']
        assert http.post.call_count == 2


# ============================================================================
# Transport shell
# ============================================================================


class TestShell:
    def test_health(self, client, http):
        response = client.get('/health')

        assert response.status_code == 200
        body = response.get_json()
        assert body['status'] == 'ok'
        assert 'T' in body['timestamp']
        http.post.assert_not_called()

    def test_cors_preflight_for_configured_origin(self, client):
        response = client.options('/summarize', headers={
            'Origin': ORIGIN,
            'Access-Control-Request-Method': 'POST',
            'Access-Control-Request-Headers': 'Content-Type',
        })

        assert response.headers['Access-Control-Allow-Origin'] == ORIGIN
        assert 'POST' in response.headers['Access-Control-Allow-Methods']

    def test_cors_rejects_other_origins(self, client):
        response = client.get('/health', headers={'Origin': 'https://evil.example'})

        assert 'Access-Control-Allow-Origin' not in response.headers

    def test_request_id_header(self, client):
        response = client.get('/health', headers={'X-Request-ID': 'abc123'})

        assert response.headers['X-Request-ID'] == 'abc123'

    def test_unknown_route_is_json_404(self, client):
        response = client.get('/nope')

        assert response.status_code == 404
        assert response.get_json()['code'] == 'not_found'

    def test_wrong_method_is_json_405(self, client):
        response = client.get('/summarize')

        assert response.status_code == 405
        assert response.get_json()['code'] == 'method_not_allowed'

    def test_oversized_body_is_json_413(self, http):
        client = create_app({'ENVIRONMENT': 'testing', 'MAX_CONTENT_LENGTH': 64}, http=http).test_client()

        response = client.post('/summarize', json={'text': 'x' * 1000})

        assert response.status_code == 413
        assert response.get_json()['code'] == 'payload_too_large'
        http.post.assert_not_called()
