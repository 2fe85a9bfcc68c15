"""Template seeding from a folder of JSON files."""

import json

import pytest

from access_control.core.exceptions import NotFoundException, ValidationException
from access_control.services.template_service import TemplateService
from tests.helpers.templates import BANK_TEMPLATE, CRM_TEMPLATE

POSTMAN_COLLECTION = {
    "info": {"name": "Payroll API"},
    "item": [
        {
            "name": "Employees",
            "item": [
                {"request": {"method": "GET", "url": {"raw": "{{baseUrl}}/employee", "path": ["employee"]}}},
                {
                    "request": {
                        "method": "DELETE",
                        "url": {"raw": "{{baseUrl}}/employee/:id", "path": ["employee", ":id"]},
                    }
                },
            ],
        }
    ],
}


@pytest.fixture
def template_dir(tmp_path):
    (tmp_path / "bank.json").write_text(json.dumps(BANK_TEMPLATE))
    nested = tmp_path / "more"
    nested.mkdir()
    (nested / "crm.json").write_text(json.dumps([CRM_TEMPLATE]))
    (nested / "payroll.postman_collection.json").write_text(json.dumps(POSTMAN_COLLECTION))
    return tmp_path


@pytest.mark.asyncio
async def test_initialize_seeds_once(repositories, template_dir):
    service = TemplateService(repositories.templates, template_dir)

    assert await service.initialize() == 3
    assert await service.list_modules() == ["bank", "crm", "payroll"]
    payroll = await service.module_structure("payroll")
    assert payroll.submodule("employee").action("delete:employee:[]") is not None

    # Already configured: nothing is reloaded unless forced.
    (template_dir / "bank.json").unlink()
    assert await service.initialize() == 0
    assert await service.list_modules() == ["bank", "crm", "payroll"]
    assert await service.initialize(force=True) == 2
    assert await service.list_modules() == ["crm", "payroll"]


@pytest.mark.asyncio
async def test_invalid_file_is_reported(repositories, tmp_path):
    (tmp_path / "broken.json").write_text('{"name": "bad:name"}')
    service = TemplateService(repositories.templates, tmp_path)
    with pytest.raises(ValidationException):
        await service.initialize()
    assert await repositories.templates.is_configured() is False


@pytest.mark.asyncio
async def test_duplicate_modules_are_rejected(repositories, template_modules):
    service = TemplateService(repositories.templates)
    with pytest.raises(ValidationException):
        await service.seed(template_modules + template_modules[:1])


@pytest.mark.asyncio
async def test_unknown_module_structure(repositories):
    service = TemplateService(repositories.templates)
    with pytest.raises(NotFoundException):
        await service.module_structure("bank")
