# access_control/services/template_service.py
"""
Template Service

Seeds the permission template from a folder of JSON files and answers
questions about its structure. Seeding runs once: later startups skip it
unless a reload is forced.

Accepted files (searched recursively, in sorted order):
- a module document ``{"name": ..., "submodules": [...]}``
- a list of module documents
- a Postman collection, turned into a module named after the file
"""

import json
import logging
from pathlib import Path
from typing import Any, List, Optional

from pydantic import ValidationError

from ..core.exceptions import NotFoundException, ValidationException
from ..core.keys import validate_identifier
from ..repositories.template_repository import TemplateRepository
from ..schemas.template import TemplateModule
from ..utils.postman_parser import PostmanParser
from .base import BaseService

logger = logging.getLogger(__name__)

POSTMAN_SUFFIX = ".postman_collection"


def _is_postman_collection(document: Any) -> bool:
    return isinstance(document, dict) and "info" in document and "item" in document


class TemplateService(BaseService):
    """Loads and serves the module template."""

    def __init__(
        self,
        templates: TemplateRepository,
        template_dir: Optional[Path] = None,
        postman_parser: Optional[PostmanParser] = None,
    ):
        super().__init__()
        self.templates = templates
        self.template_dir = template_dir
        self.postman_parser = postman_parser or PostmanParser()

    def load_modules(self, template_dir: Optional[Path] = None) -> List[TemplateModule]:
        """Read every module definition under the template folder."""
        folder = template_dir or self.template_dir
        if folder is None:
            return []
        folder = Path(folder)
        if not folder.is_dir():
            raise ValidationException(
                f"Template folder {folder} does not exist", details={"field": "template_dir"}
            )

        modules: List[TemplateModule] = []
        for path in sorted(folder.rglob("*.json")):
            try:
                document = json.loads(path.read_text(encoding="utf-8"))
                if _is_postman_collection(document):
                    module_name = path.stem
                    if module_name.endswith(POSTMAN_SUFFIX):
                        module_name = module_name[: -len(POSTMAN_SUFFIX)]
                    modules.append(self.postman_parser.parse(document, module_name))
                elif isinstance(document, list):
                    modules.extend(TemplateModule.model_validate(item) for item in document)
                else:
                    modules.append(TemplateModule.model_validate(document))
            except (ValueError, ValidationError) as e:
                raise ValidationException(
                    f"Invalid template file {path.name}: {str(e)}",
                    details={"file": str(path)},
                ) from e
        logger.debug(f"[TEMPLATE] Read {len(modules)} modules from {folder}")
        return modules

    @BaseService.measure_operation("seed_template")
    async def seed(self, modules: List[TemplateModule], *, force: bool = False) -> int:
        """
        Replace the stored template with ``modules`` and mark it configured.

        Returns 0 without writing anything when the template is already
        configured and ``force`` is false.
        """
        if not force and await self.templates.is_configured():
            logger.info("[TEMPLATE] Template already configured, skipping seed")
            return 0
        names = [module.name for module in modules]
        if len(set(names)) != len(names):
            raise ValidationException("Template defines the same module more than once")
        removed = await self.templates.clear_template()
        for module in modules:
            await self.templates.add_module(module)
        await self.templates.mark_configured()
        logger.info(
            f"[TEMPLATE] Seeded {len(modules)} modules (replaced {removed} stored keys)"
        )
        return len(modules)

    async def initialize(self, force: bool = False) -> int:
        """Seed from the template folder unless a template is already stored."""
        if not force and await self.templates.is_configured():
            logger.info("[TEMPLATE] Template already configured, skipping seed")
            return 0
        return await self.seed(self.load_modules(), force=True)

    async def module_structure(self, name: str) -> TemplateModule:
        validate_identifier(name, "module")
        module = await self.templates.get_module(name)
        if module is None:
            raise NotFoundException(f"Module {name} not found", code="MODULE_NOT_FOUND")
        return module

    async def list_modules(self) -> List[str]:
        return await self.templates.list_modules()
