import logging
from typing import Optional, Protocol

from doodle.infrastructure import settings

logger = logging.getLogger(__name__)


class LLMClient(Protocol):
    def generate(self, *, system_prompt: str, user_prompt: str) -> str:
        """Completion text for one system/user prompt pair; may raise on transport errors."""
        ...


def create_llm_client() -> Optional[LLMClient]:
    """Chat client from settings, or None when no Hugging Face token is configured."""
    if not settings.HF_TOKEN:
        logger.info("HF_TOKEN not set, AI features run in mock mode")
        return None

    # LangChain is only loaded once a token is configured
    from .huggingface_client import HuggingFaceChatClient

    return HuggingFaceChatClient(
        repo_id=settings.HF_REPO_ID,
        max_new_tokens=settings.HF_MAX_NEW_TOKENS,
        huggingfacehub_api_token=settings.HF_TOKEN,
    )
