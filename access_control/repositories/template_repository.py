# access_control/repositories/template_repository.py
"""
Permission Template Repository

Stores the canonical module tree, one JSON document per module. The tree is
seeded once and is read-only for the resolver and the mutation services.
"""

import json
from typing import List, Optional

from pydantic import ValidationError

from ..schemas.template import TemplateModule
from .base_repository import RedisRepository


class TemplateRepository(RedisRepository):
    """Repository for the seeded permission template."""

    async def get_module(self, name: str) -> Optional[TemplateModule]:
        """
        Return the full tree of a module, or None when the module is unknown.

        A stored document that no longer parses is treated as unknown.
        """
        async with self.store_call("get_module"):
            raw = await self.redis.get(self.keys.template_module(name))
        if raw is None:
            return None
        try:
            return TemplateModule.model_validate(json.loads(raw))
        except (ValueError, ValidationError) as exc:
            self.logger.warning(f"[TEMPLATE] Ignoring unreadable template for module {name}: {exc}")
            return None

    async def list_modules(self) -> List[str]:
        """Return every module name in the template, sorted."""
        prefix = self.keys.template_module("")
        async with self.store_call("list_modules"):
            found = await self.scan_keys(self.keys.template_module_pattern())
        return sorted(key[len(prefix):] for key in found)

    async def add_module(self, module: TemplateModule) -> None:
        async with self.store_call("add_module"):
            await self.redis.set(self.keys.template_module(module.name), module.model_dump_json())

    async def is_configured(self) -> bool:
        async with self.store_call("is_configured"):
            return await self.redis.get(self.keys.template_configured()) == "true"

    async def mark_configured(self) -> None:
        async with self.store_call("mark_configured"):
            await self.redis.set(self.keys.template_configured(), "true")

    async def clear_template(self) -> int:
        """Delete every template key (modules and the configured flag)."""
        async with self.store_call("clear_template"):
            found = await self.scan_keys(self.keys.template_pattern())
            if not found:
                return 0
            async with self.redis.pipeline(transaction=True) as pipe:
                for key in found:
                    pipe.delete(key)
                await pipe.execute()
        return len(found)
