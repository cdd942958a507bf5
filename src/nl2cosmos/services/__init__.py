from .llm import ChatModelOracle, CompletionOracle, build_chat_model

__all__ = ["ChatModelOracle", "CompletionOracle", "build_chat_model"]
