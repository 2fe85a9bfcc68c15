# access_control/schemas/access.py
"""
Resolved (per-user, cached) views of the permission template.

``ResolvedAccess`` is the UI-facing tree annotated with access flags.
``ResolvedActions`` carries the per-module action lists plus the flattened
permission set used for O(1) checks.
"""

from typing import Dict, List, Set

from pydantic import Field, field_serializer

from .base import StandardizedModel


class ResolvedSubModuleAccess(StandardizedModel):
    name: str
    access: bool = False
    sections: Dict[str, bool] = Field(default_factory=dict)


class ResolvedModuleAccess(StandardizedModel):
    name: str
    access: bool = False
    submodules: List[ResolvedSubModuleAccess] = Field(default_factory=list)


class ActionState(StandardizedModel):
    title: str = ""
    allowed: bool = False


class ResolvedSubModuleActions(StandardizedModel):
    name: str
    access: bool = False
    actions: Dict[str, ActionState] = Field(default_factory=dict)


class ResolvedModuleActions(StandardizedModel):
    name: str
    access: bool = False
    submodules: List[ResolvedSubModuleActions] = Field(default_factory=list)

    def allowed_actions(self) -> Set[str]:
        return {
            name
            for submodule in self.submodules
            if submodule.access
            for name, state in submodule.actions.items()
            if state.allowed
        }


ResolvedAccess = Dict[str, ResolvedModuleAccess]


class ResolvedActions(StandardizedModel):
    modules: Dict[str, ResolvedModuleActions] = Field(default_factory=dict)
    permissions: Set[str] = Field(default_factory=set)

    @field_serializer("permissions")
    def _serialize_permissions(self, value: Set[str]) -> List[str]:
        return sorted(value)
