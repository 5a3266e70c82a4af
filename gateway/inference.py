"""
Inference Gateway: one inbound task request, one outbound provider call.

The gateway keeps no per-request state; a single instance serves every
request of the application.
"""

import logging
import time
from typing import Any, Dict, Mapping, Optional

import requests

from config import PROVIDER_CREDENTIALS
from utils.error_handlers import UpstreamError, ValidationError
from .decoders import (
    GeneratedImage,
    IMAGE_FAILURE_MESSAGE,
    response_payload,
    normalize_detection,
    normalize_image,
    normalize_summary,
)
from .payloads import build_headers, build_payload
from .providers import DetectionModel, ImageModel, ProviderConfig, SummarizationModel

# Setup logging
logger = logging.getLogger(__name__)

SUMMARIZE_FAILURE_MESSAGE = 'Failed to summarize text'
DETECT_FAILURE_MESSAGE = 'Failed to detect AI-generated text'


def require_text(value: Any, field: str) -> str:
    """
    Validate a required, non-empty string field from the request body.

    Raises:
        ValidationError: field missing, empty or not a string
    """
    if value is None or value == '':
        raise ValidationError(f"Missing '{field}' in request body")
    if not isinstance(value, str):
        raise ValidationError(f"'{field}' must be a string")
    if not value.strip():
        raise ValidationError(f"'{field}' must not be blank")
    return value


class InferenceGateway:
    """
    Translates task requests into provider calls and normalizes the results.

    Args:
        credentials: Mapping of credential env name -> API key
        timeout: Outbound request timeout in seconds
        gemini_project: Google Cloud project for the Gemini endpoint
        retry_after: Default retry hint (seconds) for loading models
        http: Object with a ``requests``-compatible ``post``; defaults to ``requests``
    """

    def __init__(self, credentials: Mapping[str, Optional[str]], timeout: float = 60.0,
                 gemini_project: Optional[str] = None, retry_after: int = 20, http=None):
        self.credentials = dict(credentials)
        self.timeout = timeout
        self.gemini_project = gemini_project
        self.retry_after = retry_after
        self.http = http or requests

    @classmethod
    def from_config(cls, config: Mapping[str, Any], http=None) -> 'InferenceGateway':
        """Build a gateway from a Flask config mapping."""
        return cls(
            credentials={name: config.get(name) for name in PROVIDER_CREDENTIALS.values()},
            timeout=float(config.get('INFERENCE_TIMEOUT', 60.0)),
            gemini_project=config.get('GEMINI_PROJECT_ID'),
            retry_after=int(config.get('IMAGE_RETRY_AFTER_SECONDS', 20)),
            http=http,
        )

    # ===== Operations =====

    def summarize(self, text: Any, model_index: Any = None) -> Dict[str, str]:
        """
        Summarize ``text`` with the selected summarization model.

        Returns:
            ``{"model": ..., "summary": ...}``
        """
        text = require_text(text, 'text')
        config = SummarizationModel.from_index(model_index)

        response = self._post(config, build_payload(config, text), SUMMARIZE_FAILURE_MESSAGE)
        data = self._require_success(response, config, SUMMARIZE_FAILURE_MESSAGE)

        return {
            'model': config.model_id,
            'summary': normalize_summary(config.response_family, data),
        }

    def detect_ai(self, text: Any) -> Dict[str, Any]:
        """
        Score ``text`` for machine authorship.

        Returns:
            ``{"model": ..., "confidence": 0-100, "verdict": ...}``
        """
        text = require_text(text, 'text')
        config = DetectionModel.from_index(0)

        response = self._post(config, build_payload(config, text), DETECT_FAILURE_MESSAGE)
        data = self._require_success(response, config, DETECT_FAILURE_MESSAGE)

        confidence, verdict = normalize_detection(data)
        return {
            'model': config.model_id,
            'confidence': confidence,
            'verdict': verdict,
        }

    def generate_image(self, prompt: Any, model_index: Any = None) -> GeneratedImage:
        """
        Generate an image for ``prompt`` with the selected image model.

        Raises:
            ModelLoadingError: the provider's model is still warming up
            UpstreamError: any other provider failure
        """
        prompt = require_text(prompt, 'prompt')
        config = ImageModel.from_index(model_index)

        response = self._post(config, build_payload(config, prompt), IMAGE_FAILURE_MESSAGE)
        image = normalize_image(config.response_family, config.model_id, response, self.retry_after)

        logger.info(f"Generated image with {config.model_id}: {image.content_type}, {image.content_length} bytes")
        return image

    # ===== Outbound call =====

    def _post(self, config: ProviderConfig, payload: Dict[str, Any], failure_message: str):
        """Issue the single outbound call for a request. Never retried."""
        try:
            url = config.endpoint(self.gemini_project)
        except KeyError:
            logger.error(f"No project configured for {config.model_id}")
            raise UpstreamError(failure_message, details='GEMINI_PROJECT_ID is not configured')

        api_key = self.credentials.get(config.credential_env)
        if not api_key:
            logger.warning(f"{config.credential_env} not configured, calling {config.provider.value} without credentials")

        start_time = time.time()
        try:
            response = self.http.post(
                url,
                json=payload,
                headers=build_headers(config, api_key),
                timeout=self.timeout
            )
        except requests.exceptions.Timeout as e:
            logger.error(f"{config.provider.value} request timed out after {self.timeout}s ({config.model_id})")
            raise UpstreamError(failure_message, details='Upstream request timed out') from e
        except requests.exceptions.RequestException as e:
            logger.error(f"Request error to {config.provider.value} ({config.model_id}): {str(e)}")
            raise UpstreamError(failure_message, details=str(e)) from e

        response_time_ms = int((time.time() - start_time) * 1000)
        logger.info(f"{config.provider.value} {config.model_id} -> {response.status_code} ({response_time_ms}ms)")
        return response

    def _require_success(self, response, config: ProviderConfig, failure_message: str) -> Any:
        """Return the decoded body of a 2xx response, else raise with the upstream payload."""
        data = response_payload(response)
        if not response.ok:
            logger.error(f"{config.provider.value} error {response.status_code} for {config.model_id}: {data}")
            raise UpstreamError(failure_message, details=data)
        return data
