# access_control/schemas/template.py
"""
Permission template schemas.

The template is the canonical tree of modules -> submodules -> sections and
actions. It is seeded once and is read-only afterwards.
"""

from typing import Any, List, Optional

from pydantic import Field, field_validator

from .base import StandardizedModel

IDENTIFIER_PATTERN = r"^[^:\s][^:]*$"


class TemplateAction(StandardizedModel):
    """A named operation, e.g. ``delete:account:[]``."""

    name: str = Field(..., min_length=1)
    title: str = ""


class TemplateSubModule(StandardizedModel):
    name: str = Field(..., pattern=IDENTIFIER_PATTERN)
    sections: List[str] = Field(default_factory=list)
    actions: List[TemplateAction] = Field(default_factory=list)

    @field_validator("sections")
    @classmethod
    def _validate_sections(cls, value: List[str]) -> List[str]:
        for section in value:
            if not section or ":" in section:
                raise ValueError(f"invalid section name: {section!r}")
        return value

    @field_validator("actions", mode="before")
    @classmethod
    def _coerce_action_mapping(cls, value: Any) -> Any:
        # Legacy templates list actions as {"<action>": "<title>"}
        if isinstance(value, dict):
            return [{"name": name, "title": title or ""} for name, title in value.items()]
        return value

    def action(self, name: str) -> Optional[TemplateAction]:
        for action in self.actions:
            if action.name == name:
                return action
        return None


class TemplateModule(StandardizedModel):
    name: str = Field(..., pattern=IDENTIFIER_PATTERN)
    submodules: List[TemplateSubModule] = Field(default_factory=list)

    def submodule(self, name: str) -> Optional[TemplateSubModule]:
        for submodule in self.submodules:
            if submodule.name == name:
                return submodule
        return None
