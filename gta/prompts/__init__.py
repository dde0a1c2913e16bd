"""Prompt Construction Package"""

from gta.prompts.builder import PromptBuilder, PromptConfig, DIFF_CHAR_LIMIT

__all__ = ["PromptBuilder", "PromptConfig", "DIFF_CHAR_LIMIT"]
