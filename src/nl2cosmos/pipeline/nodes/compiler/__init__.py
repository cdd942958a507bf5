from .node import PromptCompiler

__all__ = ["PromptCompiler"]
