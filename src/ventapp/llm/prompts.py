"""System prompt table loading."""

from pathlib import Path

import yaml
from pydantic import BaseModel, ValidationError, model_validator

from ventapp.errors import PromptTableError
from ventapp.i18n import Language

DEFAULT_PROMPTS_PATH = Path(__file__).with_name("prompts.yaml")


class SystemPromptTable(BaseModel):
    """Read-only mapping from language to persona prompt.

    Validation guarantees the mapping is total over Language, so
    lookups never miss.
    """

    version: str = "unknown"
    system_prompts: dict[Language, str]

    @model_validator(mode="after")
    def _covers_every_language(self) -> "SystemPromptTable":
        missing = [lang.value for lang in Language if lang not in self.system_prompts]
        if missing:
            raise ValueError(f"missing system prompts for: {', '.join(missing)}")
        blank = [lang.value for lang, text in self.system_prompts.items() if not text]
        if blank:
            raise ValueError(f"blank system prompts for: {', '.join(blank)}")
        return self

    def for_language(self, language: Language) -> str:
        return self.system_prompts[language]


def load_prompt_table(path: str | Path = DEFAULT_PROMPTS_PATH) -> SystemPromptTable:
    """Load the system prompt table from YAML.

    Raises:
        PromptTableError: If the file is missing, unparsable, or does
            not define a prompt for every supported language.
    """
    prompt_path = Path(path)
    if not prompt_path.exists():
        raise PromptTableError(f"Prompt file not found: {prompt_path}")

    with prompt_path.open(encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as exc:
            raise PromptTableError(f"Invalid YAML in {prompt_path}") from exc

    try:
        return SystemPromptTable.model_validate(data)
    except ValidationError as exc:
        raise PromptTableError(f"Invalid prompt table {prompt_path}: {exc}") from exc
