"""
Provider tables for the Inference Gateway.

Each task (summarization, detection, image generation) has a fixed, ordered
table of provider configurations. Callers select an entry with ``modelIndex``;
an index that does not resolve is a validation error, never an index error.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from config import PROVIDER_CREDENTIALS
from utils.error_handlers import ValidationError


class Provider(Enum):
    HUGGINGFACE = 'huggingface'
    OPENAI = 'openai'
    GEMINI = 'gemini'

    @property
    def credential_env(self) -> str:
        """Environment variable holding this provider's bearer credential."""
        return PROVIDER_CREDENTIALS[self.value]


class PayloadShape(Enum):
    """How the outbound request body is built."""
    INPUTS = 'inputs'                  # {"inputs": text}
    INSTRUCT = 'instruct'              # {"inputs": instruction + text, "parameters": {...}}
    CHAT = 'chat'                      # OpenAI chat completion
    IMAGE_GENERATION = 'image_generation'  # OpenAI images API
    GEMINI_CONTENT = 'gemini_content'  # generateContent with IMAGE modality


class ResponseFamily(Enum):
    """How the upstream response body is decoded."""
    HF_LIST = 'hf_list'                  # [{"summary_text" | "generated_text" | "label", ...}]
    OPENAI_CHAT = 'openai_chat'          # {"choices": [{"message": {"content"}}]}
    HF_BINARY = 'hf_binary'              # raw image bytes, or a JSON error
    OPENAI_IMAGE = 'openai_image'        # {"data": [{"b64_json"}]}
    GEMINI_CANDIDATES = 'gemini_candidates'  # {"candidates": [{"content": {"parts": [...]}}]}


HUGGINGFACE_ENDPOINT = 'https://api-inference.huggingface.co/models/{model}'
OPENAI_CHAT_ENDPOINT = 'https://api.openai.com/v1/chat/completions'
OPENAI_IMAGES_ENDPOINT = 'https://api.openai.com/v1/images/generations'
GEMINI_ENDPOINT = (
    'https://aiplatform.googleapis.com/v1/projects/{project}/locations/global'
    '/publishers/google/models/{model}:generateContent'
)


@dataclass(frozen=True)
class ProviderConfig:
    model_id: str
    provider: Provider
    endpoint_template: str
    payload_shape: PayloadShape
    response_family: ResponseFamily

    @property
    def credential_env(self) -> str:
        return self.provider.credential_env

    def endpoint(self, project: Optional[str] = None) -> str:
        """
        Resolve the endpoint URL for this model.

        Raises:
            KeyError: if the template needs a project and none was given
        """
        if '{project}' in self.endpoint_template and not project:
            raise KeyError('project')
        return self.endpoint_template.format(model=self.model_id, project=project)


class ModelTable(Enum):
    """Base class for ordered provider tables; declaration order is the index."""

    @classmethod
    def from_index(cls, index: Any = None) -> ProviderConfig:
        """
        Look up the provider configuration for a request's ``modelIndex``.

        Args:
            index: Requested index; ``None`` selects the first entry

        Returns:
            ProviderConfig for the selected model

        Raises:
            ValidationError: if the index is not an integer inside the table
        """
        members = list(cls)
        if index is None:
            return members[0].value

        # bool is an int subclass; "modelIndex": true is not an index
        if isinstance(index, bool) or not isinstance(index, int):
            raise ValidationError(
                "'modelIndex' must be an integer",
                details={'modelIndex': index, 'valid_range': [0, len(members) - 1]}
            )

        if not 0 <= index < len(members):
            raise ValidationError(
                f"Invalid modelIndex {index}: expected a value between 0 and {len(members) - 1}",
                details={'modelIndex': index, 'valid_range': [0, len(members) - 1]}
            )

        return members[index].value

    @classmethod
    def model_ids(cls):
        return [member.value.model_id for member in cls]


class SummarizationModel(ModelTable):
    BART_CNN = ProviderConfig(
        model_id='facebook/bart-large-cnn',
        provider=Provider.HUGGINGFACE,
        endpoint_template=HUGGINGFACE_ENDPOINT,
        payload_shape=PayloadShape.INPUTS,
        response_family=ResponseFamily.HF_LIST,
    )
    MIXTRAL_INSTRUCT = ProviderConfig(
        model_id='mistralai/Mixtral-8x7B-Instruct-v0.1',
        provider=Provider.HUGGINGFACE,
        endpoint_template=HUGGINGFACE_ENDPOINT,
        payload_shape=PayloadShape.INSTRUCT,
        response_family=ResponseFamily.HF_LIST,
    )
    GPT_4O_MINI = ProviderConfig(
        model_id='gpt-4o-mini',
        provider=Provider.OPENAI,
        endpoint_template=OPENAI_CHAT_ENDPOINT,
        payload_shape=PayloadShape.CHAT,
        response_family=ResponseFamily.OPENAI_CHAT,
    )


class DetectionModel(ModelTable):
    ROBERTA_OPENAI_DETECTOR = ProviderConfig(
        model_id='openai-community/roberta-base-openai-detector',
        provider=Provider.HUGGINGFACE,
        endpoint_template=HUGGINGFACE_ENDPOINT,
        payload_shape=PayloadShape.INPUTS,
        response_family=ResponseFamily.HF_LIST,
    )


class ImageModel(ModelTable):
    STABLE_DIFFUSION_XL = ProviderConfig(
        model_id='stabilityai/stable-diffusion-xl-base-1.0',
        provider=Provider.HUGGINGFACE,
        endpoint_template=HUGGINGFACE_ENDPOINT,
        payload_shape=PayloadShape.INPUTS,
        response_family=ResponseFamily.HF_BINARY,
    )
    GPT_IMAGE = ProviderConfig(
        model_id='gpt-image-1',
        provider=Provider.OPENAI,
        endpoint_template=OPENAI_IMAGES_ENDPOINT,
        payload_shape=PayloadShape.IMAGE_GENERATION,
        response_family=ResponseFamily.OPENAI_IMAGE,
    )
    GEMINI_FLASH_IMAGE = ProviderConfig(
        model_id='gemini-2.5-flash-image',
        provider=Provider.GEMINI,
        endpoint_template=GEMINI_ENDPOINT,
        payload_shape=PayloadShape.GEMINI_CONTENT,
        response_family=ResponseFamily.GEMINI_CANDIDATES,
    )
