"""
Response decoders for the Inference Gateway.

Providers answer in different shapes: lists of objects (Hugging Face),
nested choices or candidates (OpenAI, Gemini), raw bytes, or base64 inside
JSON, and any of them may return a JSON error with a 200 status. Each
provider family has a small decoder; one normalization function per task
composes them into a single outward shape.
"""

import base64
import binascii
import json
import logging
import math
from typing import Any, Dict, Iterable, List, NamedTuple, Optional, Tuple

from utils.error_handlers import ModelLoadingError, UpstreamError
from .providers import ResponseFamily

logger = logging.getLogger(__name__)

DEFAULT_IMAGE_CONTENT_TYPE = 'image/png'
IMAGE_FAILURE_MESSAGE = 'Failed to generate image'

AI_LABEL_MARKERS = ('ai', 'fake')
VERDICT_AI = 'Likely AI-generated'
VERDICT_HUMAN = 'Likely human-written'
VERDICT_UNKNOWN = 'Unknown'
AI_SCORE_THRESHOLD = 0.5


class GeneratedImage(NamedTuple):
    model: str
    content: bytes
    content_type: str
    content_length: str

    def to_data_url(self) -> str:
        encoded = base64.b64encode(self.content).decode('ascii')
        return f"data:{self.content_type};base64,{encoded}"


# ===== Summaries =====

def _first_item(data: Any) -> Any:
    if isinstance(data, list):
        return data[0] if data else None
    return data


def _text_field(item: Any, *keys: str) -> Optional[str]:
    if not isinstance(item, dict):
        return None
    for key in keys:
        value = item.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


def _decode_hf_summary(data: Any) -> Optional[str]:
    return _text_field(_first_item(data), 'summary_text', 'generated_text')


def _decode_openai_chat(data: Any) -> Optional[str]:
    if not isinstance(data, dict):
        return None
    choice = _first_item(data.get('choices'))
    if not isinstance(choice, dict):
        return None
    return _text_field(choice.get('message'), 'content') or _text_field(choice, 'text')


SUMMARY_DECODERS = {
    ResponseFamily.HF_LIST: _decode_hf_summary,
    ResponseFamily.OPENAI_CHAT: _decode_openai_chat,
}


def normalize_summary(family: ResponseFamily, data: Any) -> str:
    """
    Extract a summary string from a provider response.

    Order: ``summary_text``, ``generated_text``, the family's own field (chat
    message content), and finally the raw response serialized as text.
    Never raises on an unexpected shape.
    """
    summary = _decode_hf_summary(data)
    if summary is None and family in SUMMARY_DECODERS:
        summary = SUMMARY_DECODERS[family](data)
    if summary is not None:
        return summary

    logger.warning(f"Unrecognized summary response shape from {family.value}, returning raw payload")
    if isinstance(data, str):
        return data
    try:
        return json.dumps(data, ensure_ascii=False)
    except (TypeError, ValueError):
        return str(data)


# ===== AI detection =====

def _detection_entries(data: Any) -> List[Dict[str, Any]]:
    """Flatten ``{label, score}``, ``[{...}]`` and ``[[{...}]]`` into one list."""
    if isinstance(data, dict):
        return [data]
    if not isinstance(data, list):
        return []

    entries = []
    for item in data:
        if isinstance(item, dict):
            entries.append(item)
        elif isinstance(item, list):
            entries.extend(entry for entry in item if isinstance(entry, dict))
    return entries


def _is_ai_label(label: Any, markers: Iterable[str] = AI_LABEL_MARKERS) -> bool:
    label = str(label or '').lower()
    return any(marker in label for marker in markers)


def _to_percent(score: float) -> int:
    # Half-up rounding, clamped to 0..100
    return max(0, min(100, int(math.floor(score * 100 + 0.5))))


def normalize_detection(data: Any) -> Tuple[int, str]:
    """
    Score a detector response.

    Returns:
        Tuple of (confidence 0-100, verdict). Without an AI/fake label the
        result is ``(0, "Unknown")``.
    """
    for entry in _detection_entries(data):
        if not _is_ai_label(entry.get('label')):
            continue
        try:
            score = float(entry.get('score'))
        except (TypeError, ValueError):
            continue
        if not math.isfinite(score):
            continue
        verdict = VERDICT_AI if score > AI_SCORE_THRESHOLD else VERDICT_HUMAN
        return _to_percent(score), verdict

    return 0, VERDICT_UNKNOWN


# ===== Images =====

def is_json_content_type(content_type: str) -> bool:
    media_type = (content_type or '').split(';', 1)[0].strip().lower()
    return media_type == 'application/json' or media_type.endswith('+json')


def error_message(data: Any) -> Optional[str]:
    """Pull the provider's error text out of a JSON error body, if any."""
    if not isinstance(data, dict) or 'error' not in data:
        return None

    error = data['error']
    if isinstance(error, dict):
        error = error.get('message') or error.get('status') or json.dumps(error)
    elif isinstance(error, list):
        error = '; '.join(str(item) for item in error)
    return str(error) if error else None


def _retry_after(data: Any, default: int) -> int:
    estimated = data.get('estimated_time') if isinstance(data, dict) else None
    try:
        estimated = float(estimated)
    except (TypeError, ValueError):
        return default
    # 1e400 and Infinity parse as inf
    if not math.isfinite(estimated):
        return default
    return max(1, int(math.ceil(estimated)))


def _b64_image(model: str, encoded: Any, content_type: Optional[str]) -> Optional[GeneratedImage]:
    if not isinstance(encoded, str) or not encoded:
        return None
    try:
        content = base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError) as e:
        raise UpstreamError('Invalid image data returned from API', details=str(e)) from e
    return GeneratedImage(
        model=model,
        content=content,
        content_type=content_type or DEFAULT_IMAGE_CONTENT_TYPE,
        content_length=str(len(content)),
    )


def _decode_openai_image(model: str, data: Any) -> Optional[GeneratedImage]:
    if not isinstance(data, dict):
        return None
    item = _first_item(data.get('data'))
    if not isinstance(item, dict):
        return None
    output_format = data.get('output_format')
    content_type = f"image/{output_format}" if output_format else None
    return _b64_image(model, item.get('b64_json'), content_type)


def _decode_gemini_candidates(model: str, data: Any) -> Optional[GeneratedImage]:
    if not isinstance(data, dict):
        return None
    candidate = _first_item(data.get('candidates'))
    if not isinstance(candidate, dict):
        return None
    content = candidate.get('content')
    parts = content.get('parts') if isinstance(content, dict) else None

    # Text parts may precede the image part
    for part in parts or []:
        if not isinstance(part, dict):
            continue
        inline = part.get('inline_data') or part.get('inlineData')
        if isinstance(inline, dict) and inline.get('data'):
            mime_type = inline.get('mime_type') or inline.get('mimeType')
            return _b64_image(model, inline['data'], mime_type)
    return None


JSON_IMAGE_DECODERS = {
    ResponseFamily.OPENAI_IMAGE: _decode_openai_image,
    ResponseFamily.GEMINI_CANDIDATES: _decode_gemini_candidates,
}


def response_payload(response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text


def normalize_image(family: ResponseFamily, model: str, response, retry_after_default: int) -> GeneratedImage:
    """
    Turn an image-generation response into image bytes.

    The content type decides the branch, not the status code: some providers
    answer 200 with a JSON error while the model is still loading.

    Raises:
        ModelLoadingError: upstream error text mentions "loading"
        UpstreamError: any other upstream error or a body without image data
    """
    content_type = response.headers.get('Content-Type', '')

    if is_json_content_type(content_type):
        data = response_payload(response)
        message = error_message(data)
        if message:
            if 'loading' in message.lower():
                raise ModelLoadingError(message, retry_after=_retry_after(data, retry_after_default))
            raise UpstreamError(message)

        if not response.ok:
            raise UpstreamError(IMAGE_FAILURE_MESSAGE, details=data)

        decoder = JSON_IMAGE_DECODERS.get(family)
        image = decoder(model, data) if decoder else None
        if image is None:
            raise UpstreamError('No image data returned from API')
        return image

    if not response.ok:
        raise UpstreamError(IMAGE_FAILURE_MESSAGE, details={
            'status_code': response.status_code,
            'body': response.text[:500],
        })

    media_type = content_type.split(';', 1)[0].strip().lower()
    if media_type and not media_type.startswith('image/') and media_type != 'application/octet-stream':
        raise UpstreamError(IMAGE_FAILURE_MESSAGE, details={
            'reason': f"Unexpected content type from provider: {media_type}",
        })

    content = response.content
    actual_length = str(len(content))
    # A compressed upstream reports the encoded length; only keep it when it matches
    upstream_length = response.headers.get('Content-Length')
    content_length = upstream_length if upstream_length == actual_length else actual_length

    return GeneratedImage(
        model=model,
        content=content,
        content_type=content_type if media_type.startswith('image/') else DEFAULT_IMAGE_CONTENT_TYPE,
        content_length=content_length,
    )
