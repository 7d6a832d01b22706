"""
Prompt Management Module

The system instruction lives in a text file next to this module so it can
be edited without touching code. Task instructions are one fixed literal per
mode.
"""

from __future__ import annotations

from pathlib import Path

from companion.assist.types import Mode

PROMPTS_DIR = Path(__file__).parent

SYSTEM_PROMPT_NAME = "system_instruction"

TASK_INSTRUCTIONS: dict[Mode, str] = {
    Mode.DESCRIBE: (
        "Task: Perform a 'Describe' analysis. "
        "Focus on layout, sections, and accessibility relevant details."
    ),
    Mode.SIMPLIFY: (
        "Task: Perform a 'Simplify' analysis. "
        "Extract text and rewrite it in plain, simple language with bullet points."
    ),
    Mode.GUIDE: (
        "Task: Perform a 'Guide' analysis. "
        "Provide step-by-step instructions on how to interact with this content."
    ),
}


class PromptLoader:
    """Load and cache prompt templates from files"""

    def __init__(self):
        self._cache: dict[str, str] = {}

    def load_prompt(self, prompt_name: str) -> str:
        """
        Load a prompt template from file.

        Args:
            prompt_name: Name of the prompt file (without .txt extension)

        Returns:
            Prompt text with the trailing newline stripped

        Raises:
            FileNotFoundError: If no such prompt file exists
        """
        if prompt_name not in self._cache:
            prompt_path = PROMPTS_DIR / f"{prompt_name}.txt"

            if not prompt_path.exists():
                raise FileNotFoundError(f"Prompt file not found: {prompt_path}")

            with open(prompt_path, encoding="utf-8") as f:
                self._cache[prompt_name] = f.read().rstrip("\n")

        return self._cache[prompt_name]

    def get_system_instruction(self) -> str:
        return self.load_prompt(SYSTEM_PROMPT_NAME)


_loader = PromptLoader()


def get_system_instruction() -> str:
    """Accessibility-assistant persona and formatting rules."""
    return _loader.get_system_instruction()


def get_task_instruction(mode: Mode) -> str:
    return TASK_INSTRUCTIONS[Mode(mode)]
