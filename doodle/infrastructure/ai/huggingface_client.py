import logging
from typing import Optional

from langchain_core.messages import HumanMessage, SystemMessage
from langchain_huggingface import ChatHuggingFace, HuggingFaceEndpoint
from tenacity import retry, stop_after_attempt, wait_exponential

logger = logging.getLogger(__name__)


class HuggingFaceChatClient:
    """
    LLMClient backed by a Hugging Face inference endpoint.

    Generation is deterministic (no sampling). A failed call is retried once;
    a second failure propagates to the AI service, which falls back to canned
    content.
    """

    def __init__(
        self,
        *,
        repo_id: str,
        max_new_tokens: int = 1500,
        timeout: int = 60,
        huggingfacehub_api_token: Optional[str] = None,
    ):
        self.repo_id = repo_id
        endpoint = HuggingFaceEndpoint(
            repo_id=repo_id,
            task="text-generation",
            max_new_tokens=max_new_tokens,
            do_sample=False,
            repetition_penalty=1.03,
            timeout=timeout,
            huggingfacehub_api_token=huggingfacehub_api_token,
        )
        self._chat = ChatHuggingFace(llm=endpoint)
        logger.info(f"Hugging Face chat client ready for {repo_id}")

    @retry(stop=stop_after_attempt(2), wait=wait_exponential(multiplier=1, max=8), reraise=True)
    def generate(self, *, system_prompt: str, user_prompt: str) -> str:
        logger.debug(f"Requesting completion from {self.repo_id} ({len(user_prompt)} prompt chars)")
        result = self._chat.invoke([SystemMessage(content=system_prompt), HumanMessage(content=user_prompt)])
        return str(result.content)
