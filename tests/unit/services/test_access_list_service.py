"""Access-list resolution: merge order, gating, caching and failure behaviour."""

import pytest

from access_control.core.exceptions import NotFoundException, StoreUnavailableException
from tests.helpers.scenario import add_users, bank_role, seed_template


@pytest.mark.asyncio
async def test_only_assigned_modules_are_present(engine, template_modules):
    await seed_template(engine, template_modules)
    await add_users(engine, "1")
    role_id = await bank_role(engine)
    await engine.authorization.assign_role("1", role_id)

    access = await engine.access_lists.resolve_access("1")

    assert list(access) == ["bank"]
    bank = access["bank"]
    assert bank.access is True
    by_name = {sub.name: sub for sub in bank.submodules}
    assert by_name["accounts"].access is True
    assert by_name["accounts"].sections == {"summary": True, "history": False}
    assert by_name["transfers"].access is False
    assert by_name["transfers"].sections == {"pending": False}


@pytest.mark.asyncio
async def test_later_role_replaces_module_entry(engine, template_modules):
    await seed_template(engine, template_modules)
    await add_users(engine, "1")
    r1 = await engine.roles.add_role("first")
    r2 = await engine.roles.add_role("second")
    assert (r1.id, r2.id) == ("r1", "r2")
    await engine.roles.assign_modules(r1.id, ["bank"])
    await engine.roles.assign_submodules(r1.id, "bank", ["accounts"])
    await engine.roles.assign_modules(r2.id, ["bank"])
    await engine.roles.assign_submodules(r2.id, "bank", ["transfers"])
    await engine.authorization.assign_roles("1", [r1.id, r2.id])

    access = await engine.access_lists.resolve_access("1")

    granted = {sub.name for sub in access["bank"].submodules if sub.access}
    assert granted == {"transfers"}


@pytest.mark.asyncio
async def test_resolution_is_byte_identical_across_runs(engine, template_modules, fake_redis, keys):
    await seed_template(engine, template_modules)
    await add_users(engine, "1")
    role_id = await bank_role(engine)
    await engine.roles.assign_modules(role_id, ["crm"])
    await engine.authorization.assign_role("1", role_id)

    await engine.access_lists.resolve_access("1")
    first = fake_redis.store[keys.access_cache("1")]
    await engine.access_lists.resolve_access("1")
    assert fake_redis.store[keys.access_cache("1")] == first


@pytest.mark.asyncio
async def test_user_without_roles_has_no_cache_entry(engine, template_modules, fake_redis, keys):
    await seed_template(engine, template_modules)
    await add_users(engine, "1")
    role_id = await bank_role(engine)
    await engine.authorization.assign_role("1", role_id)
    await engine.access_lists.resolve_access("1")
    await engine.access_lists.resolve_actions("1")

    await engine.authorization.unassign_role("1", role_id)
    assert await engine.access_lists.resolve_access("1") == {}
    await engine.access_lists.resolve_actions("1")

    assert keys.access_cache("1") not in fake_redis.store
    assert keys.permissions_cache("1") not in fake_redis.store
    with pytest.raises(NotFoundException):
        await engine.access_lists.get_access_list("1")


@pytest.mark.asyncio
async def test_modules_missing_from_template_are_skipped(engine, template_modules, repositories):
    await seed_template(engine, template_modules)
    await add_users(engine, "1")
    role_id = await bank_role(engine)
    # Written behind the service's back, as if the template had changed.
    await repositories.assignments.assign_modules(role_id, ["legacy"])
    await engine.authorization.assign_role("1", role_id)

    access = await engine.access_lists.resolve_access("1")
    assert "legacy" not in access


@pytest.mark.asyncio
async def test_permission_set_unions_roles_and_respects_gating(engine, template_modules):
    await seed_template(engine, template_modules)
    await add_users(engine, "1")
    teller = await bank_role(engine)
    auditor = await engine.roles.add_role("auditor")
    await engine.roles.assign_modules(auditor.id, ["bank"])
    await engine.roles.assign_submodules(auditor.id, "bank", ["transfers"])
    await engine.authorization.assign_actions(auditor.id, "bank", "transfers", ["post:transfer"])
    # Assigned action whose submodule is not assigned: never allowed.
    await engine.authorization.assign_actions(auditor.id, "bank", "accounts", ["post:account"])
    await engine.authorization.assign_roles("1", [teller, auditor.id])

    actions = await engine.access_lists.resolve_actions("1")

    assert actions.permissions == {"delete:account:[]", "post:transfer"}
    assert await engine.access_lists.check_permission("1", "delete:account:[]") is True
    assert await engine.access_lists.check_permission("1", "post:account") is False
    bank = await engine.access_lists.get_action_list_by_module("1", "bank")
    by_name = {sub.name: sub for sub in bank.submodules}
    # r2 (auditor) sorts last and replaces the module entry.
    assert by_name["accounts"].access is False
    assert by_name["accounts"].actions == {}
    assert by_name["transfers"].actions["post:transfer"].allowed is True


@pytest.mark.asyncio
async def test_store_failure_keeps_previous_cache(engine, template_modules, fake_redis, keys):
    await seed_template(engine, template_modules)
    await add_users(engine, "1")
    role_id = await bank_role(engine)
    await engine.authorization.assign_role("1", role_id)
    await engine.access_lists.resolve_access("1")
    before = fake_redis.store[keys.access_cache("1")]

    await engine.roles.assign_modules(role_id, ["crm"])
    fake_redis.failing.add("smembers")
    with pytest.raises(StoreUnavailableException):
        await engine.access_lists.resolve_access("1")

    assert fake_redis.store[keys.access_cache("1")] == before


@pytest.mark.asyncio
async def test_reads_fail_closed_without_cache(engine):
    assert await engine.access_lists.check_permission("9", "delete:account:[]") is False
    with pytest.raises(NotFoundException):
        await engine.access_lists.get_access_list("9")
    with pytest.raises(NotFoundException):
        await engine.access_lists.get_action_list_by_module("9", "bank")


@pytest.mark.asyncio
async def test_role_access_list(engine, template_modules):
    await seed_template(engine, template_modules)
    role_id = await bank_role(engine)

    tree = await engine.access_lists.role_access_list(role_id)
    assert list(tree) == ["bank"]

    with pytest.raises(NotFoundException):
        await engine.access_lists.role_access_list("r99")


@pytest.mark.asyncio
async def test_teardown_of_wildcard_user_id_keeps_other_caches(engine, template_modules):
    await seed_template(engine, template_modules)
    await add_users(engine, "10", "1*")
    role_id = await bank_role(engine)
    await engine.authorization.assign_role("10", role_id)
    await engine.access_lists.resolve_actions("10")

    await engine.access_lists.resolve_actions("1*")

    bank = await engine.access_lists.get_action_list_by_module("10", "bank")
    assert bank.access is True
    assert await engine.access_lists.check_permission("10", "delete:account:[]") is True
