from __future__ import annotations

from typing import Optional, Protocol, runtime_checkable

import pybreaker
from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.messages import HumanMessage, SystemMessage

from nl2cosmos.common.logger import get_logger
from nl2cosmos.common.settings import Settings

logger = get_logger("llm")


@runtime_checkable
class CompletionOracle(Protocol):
    """Single-shot text completion: instructions plus prompt in, text out."""

    def complete(self, system_instructions: str, user_prompt: str) -> str:
        ...


class ChatModelOracle:
    """
    Adapts a langchain chat model to the CompletionOracle contract.

    Every call is a fresh two-message exchange; no conversation state is kept.
    When a breaker is supplied, calls go through it so repeated transport
    failures fail fast.
    """

    def __init__(self, llm: BaseChatModel, breaker: Optional[pybreaker.CircuitBreaker] = None):
        self.llm = llm
        self.breaker = breaker

    def complete(self, system_instructions: str, user_prompt: str) -> str:
        messages = [
            SystemMessage(content=system_instructions),
            HumanMessage(content=user_prompt),
        ]
        if self.breaker is not None:
            response = self.breaker.call(self.llm.invoke, messages)
        else:
            response = self.llm.invoke(messages)
        return _message_text(response.content)


def _message_text(content) -> str:
    # Some providers return a list of content blocks instead of a string.
    if isinstance(content, str):
        return content
    parts = []
    for block in content or []:
        if isinstance(block, str):
            parts.append(block)
        elif isinstance(block, dict) and block.get("type") == "text":
            parts.append(block.get("text", ""))
    return "".join(parts)


def build_chat_model(cfg: Settings) -> Optional[BaseChatModel]:
    """
    Builds the chat model used for query generation from settings.

    Azure OpenAI is preferred when an endpoint and deployment are configured;
    without an API key it authenticates through Azure AD. Otherwise plain
    OpenAI is used when a key is present.

    Returns:
        The chat model, or None when no provider is configured.
    """
    if cfg.azure_openai_endpoint and cfg.azure_openai_deployment:
        from langchain_openai import AzureChatOpenAI

        kwargs = {
            "azure_endpoint": cfg.azure_openai_endpoint,
            "azure_deployment": cfg.azure_openai_deployment,
            "api_version": cfg.azure_openai_api_version,
            "temperature": 0.0,
        }
        if cfg.azure_openai_api_key:
            kwargs["api_key"] = cfg.azure_openai_api_key
        else:
            from azure.identity import DefaultAzureCredential, get_bearer_token_provider

            kwargs["azure_ad_token_provider"] = get_bearer_token_provider(
                DefaultAzureCredential(), "https://cognitiveservices.azure.com/.default"
            )
        logger.info(f"Using Azure OpenAI deployment '{cfg.azure_openai_deployment}' for query generation.")
        return AzureChatOpenAI(**kwargs)

    if cfg.openai_api_key:
        from langchain_openai import ChatOpenAI

        logger.info(f"Using OpenAI model '{cfg.openai_model}' for query generation.")
        # Enforce determinism: Temperature 0 and fixed seed
        return ChatOpenAI(
            model=cfg.openai_model,
            temperature=0.0,
            api_key=cfg.openai_api_key,
            seed=42,
        )

    logger.warning("No completion service configured (set AZURE_OPENAI_* or OPENAI_API_KEY).")
    return None
