"""
Outbound request bodies, one builder per payload shape.
"""

from typing import Any, Dict

from .providers import PayloadShape, ProviderConfig, ResponseFamily

SUMMARY_INSTRUCTION = 'Summarize this text in a clear and concise way:'
SUMMARY_MAX_NEW_TOKENS = 200
SUMMARY_TEMPERATURE = 0.3
OPENAI_IMAGE_SIZE = '1024x1024'


def _inputs(config: ProviderConfig, text: str) -> Dict[str, Any]:
    return {'inputs': text}


def _instruct(config: ProviderConfig, text: str) -> Dict[str, Any]:
    return {
        'inputs': f"{SUMMARY_INSTRUCTION}\n\n{text}",
        'parameters': {
            'max_new_tokens': SUMMARY_MAX_NEW_TOKENS,
            'temperature': SUMMARY_TEMPERATURE,
            'return_full_text': False,
        },
    }


def _chat(config: ProviderConfig, text: str) -> Dict[str, Any]:
    return {
        'model': config.model_id,
        'messages': [
            {'role': 'system', 'content': SUMMARY_INSTRUCTION},
            {'role': 'user', 'content': text},
        ],
        'max_tokens': SUMMARY_MAX_NEW_TOKENS,
        'temperature': SUMMARY_TEMPERATURE,
    }


def _image_generation(config: ProviderConfig, prompt: str) -> Dict[str, Any]:
    return {
        'model': config.model_id,
        'prompt': prompt,
        'n': 1,
        'size': OPENAI_IMAGE_SIZE,
    }


def _gemini_content(config: ProviderConfig, prompt: str) -> Dict[str, Any]:
    return {
        'contents': [
            {'role': 'user', 'parts': [{'text': prompt}]},
        ],
        'generationConfig': {'responseModalities': ['IMAGE']},
    }


PAYLOAD_BUILDERS = {
    PayloadShape.INPUTS: _inputs,
    PayloadShape.INSTRUCT: _instruct,
    PayloadShape.CHAT: _chat,
    PayloadShape.IMAGE_GENERATION: _image_generation,
    PayloadShape.GEMINI_CONTENT: _gemini_content,
}


def build_payload(config: ProviderConfig, text: str) -> Dict[str, Any]:
    """Build the JSON body for ``config`` around the caller's text or prompt."""
    return PAYLOAD_BUILDERS[config.payload_shape](config, text)


def build_headers(config: ProviderConfig, api_key: str = None) -> Dict[str, str]:
    """
    Build outbound headers for ``config``.

    A missing credential is not an error here; the provider rejects the call
    and the failure is reported as an upstream error.
    """
    headers = {
        'Content-Type': 'application/json',
        'User-Agent': 'inference-gateway/1.0',
    }
    if api_key:
        headers['Authorization'] = f"Bearer {api_key}"
    if config.response_family is ResponseFamily.HF_BINARY:
        headers['Accept'] = 'image/png'
    return headers
