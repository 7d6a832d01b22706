"""Registry of the selectable interaction modes."""

from __future__ import annotations

from companion.assist.types import Mode, ModeConfig

DEFAULT_MODE = Mode.DESCRIBE

APP_MODES: tuple[ModeConfig, ...] = (
    ModeConfig(
        id=Mode.DESCRIBE,
        title="Describe",
        description="Get a detailed description of the screen layout and content.",
        icon="👁️",
        aria_label="Select Describe mode to hear details about the visual layout",
    ),
    ModeConfig(
        id=Mode.SIMPLIFY,
        title="Simplify",
        description="Summarize text into plain, easy-to-read language.",
        icon="📝",
        aria_label="Select Simplify mode to get a plain language summary",
    ),
    ModeConfig(
        id=Mode.GUIDE,
        title="Guide",
        description="Get step-by-step instructions for navigation or forms.",
        icon="🧭",
        aria_label="Select Guide mode for step-by-step navigation instructions",
    ),
)

_BY_ID = {config.id: config for config in APP_MODES}


def get_mode_config(mode: Mode | str) -> ModeConfig:
    """Look up a mode's display metadata.

    Raises:
        ValueError: If ``mode`` is not a known identifier
    """
    return _BY_ID[Mode(mode)]
