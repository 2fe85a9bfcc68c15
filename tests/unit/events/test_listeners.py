"""Cache invalidation listeners running against the fake store."""

import pytest

from access_control.events.role_events import RoleEvent
from access_control.schemas.rbac import RoleEventType
from tests.helpers.scenario import add_users, bank_role, seed_template


@pytest.mark.asyncio
async def test_assigning_a_module_refreshes_every_holder(engine, template_modules):
    await seed_template(engine, template_modules)
    await add_users(engine, "1", "2")
    role_id = await bank_role(engine)
    await engine.authorization.assign_role("1", role_id)
    await engine.authorization.assign_role("2", role_id)
    engine.start_listeners()
    try:
        await engine.roles.assign_modules(role_id, ["crm"])
        await engine.wait_idle()

        for user_id in ("1", "2"):
            access = await engine.access_lists.get_access_list(user_id)
            assert access["crm"].access is True
    finally:
        await engine.stop_listeners()


@pytest.mark.asyncio
async def test_losing_the_last_role_removes_caches(engine, template_modules, fake_redis, keys):
    await seed_template(engine, template_modules)
    await add_users(engine, "1")
    role_id = await bank_role(engine)
    engine.start_listeners()
    try:
        await engine.authorization.assign_role("1", role_id)
        await engine.wait_idle()
        assert keys.access_cache("1") in fake_redis.store

        await engine.authorization.unassign_role("1", role_id)
        await engine.wait_idle()

        assert keys.access_cache("1") not in fake_redis.store
        assert keys.permissions_cache("1") not in fake_redis.store
        assert keys.actions_cache("1", "bank") not in fake_redis.store
    finally:
        await engine.stop_listeners()


@pytest.mark.asyncio
async def test_unassigned_user_is_recomputed_while_others_keep_the_role(engine, template_modules):
    await seed_template(engine, template_modules)
    await add_users(engine, "1", "2")
    teller = await bank_role(engine)
    viewer = await engine.roles.add_role("viewer")
    await engine.roles.assign_modules(viewer.id, ["crm"])
    engine.start_listeners()
    try:
        await engine.authorization.assign_roles("1", [teller, viewer.id])
        await engine.authorization.assign_role("2", teller)
        await engine.wait_idle()

        await engine.authorization.unassign_role("1", teller)
        await engine.wait_idle()

        assert list(await engine.access_lists.get_access_list("1")) == ["crm"]
        assert list(await engine.access_lists.get_access_list("2")) == ["bank"]
    finally:
        await engine.stop_listeners()


@pytest.mark.asyncio
async def test_deleting_a_role_tears_down_former_holders(engine, template_modules, fake_redis, keys):
    await seed_template(engine, template_modules)
    await add_users(engine, "1")
    role_id = await bank_role(engine)
    engine.start_listeners()
    try:
        await engine.authorization.assign_role("1", role_id)
        await engine.wait_idle()

        await engine.roles.delete_role(role_id)
        await engine.wait_idle()

        assert keys.access_cache("1") not in fake_redis.store
        assert await engine.access_lists.check_permission("1", "delete:account:[]") is False
    finally:
        await engine.stop_listeners()


@pytest.mark.asyncio
async def test_bank_scenario(engine, template_modules):
    await seed_template(engine, template_modules)
    await add_users(engine, "1")
    engine.start_listeners()
    try:
        role_id = await bank_role(engine)
        assert role_id == "r1"
        await engine.authorization.assign_role("1", role_id)
        await engine.wait_idle()
        assert await engine.access_lists.check_permission("1", "delete:account:[]") is True

        await engine.authorization.unassign_role("1", role_id)
        await engine.wait_idle()
        assert await engine.access_lists.check_permission("1", "delete:account:[]") is False
    finally:
        await engine.stop_listeners()


@pytest.mark.asyncio
async def test_store_failure_does_not_stop_the_loop(engine, template_modules, fake_redis):
    await seed_template(engine, template_modules)
    await add_users(engine, "1")
    role_id = await bank_role(engine)
    await engine.authorization.assign_role("1", role_id)
    engine.start_listeners()
    try:
        fake_redis.failing.add("smembers")
        engine.event_bus.publish(RoleEvent(role_id=role_id, event_type=RoleEventType.ACCESS))
        await engine.wait_idle()
        fake_redis.failing.clear()

        await engine.roles.assign_sections(role_id, "bank", "accounts", ["history"])
        await engine.wait_idle()

        access = await engine.access_lists.get_access_list("1")
        accounts = {sub.name: sub for sub in access["bank"].submodules}["accounts"]
        assert accounts.sections == {"summary": True, "history": True}
    finally:
        await engine.stop_listeners()


@pytest.mark.asyncio
async def test_stop_is_clean_and_restartable(engine):
    engine.start_listeners()
    await engine.stop_listeners()
    assert all(not listener.running for listener in engine.listeners)
    assert engine.event_bus.subscription(RoleEventType.ACCESS) is None

    engine.start_listeners()
    assert all(listener.running for listener in engine.listeners)
    await engine.stop_listeners()
