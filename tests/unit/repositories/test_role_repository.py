"""Role records, the role <-> user indexes and cascading deletion."""

import pytest

from access_control.core.exceptions import StoreUnavailableException


@pytest.mark.asyncio
async def test_add_role_uses_monotonic_ids(repositories):
    first = await repositories.roles.add_role("admin")
    second = await repositories.roles.add_role("auditor")
    assert (first, second) == ("r1", "r2")
    assert [role.name for role in await repositories.roles.list_roles()] == ["admin", "auditor"]


@pytest.mark.asyncio
async def test_assign_roles_keeps_indexes_symmetric(repositories):
    role_id = await repositories.roles.add_role("admin")
    await repositories.roles.assign_roles("1", [role_id])
    assert await repositories.roles.roles_by_user("1") == [role_id]
    assert await repositories.roles.users_by_role(role_id) == ["1"]

    await repositories.roles.unassign_roles("1", [role_id])
    assert await repositories.roles.roles_by_user("1") == []
    assert await repositories.roles.users_by_role(role_id) == []


@pytest.mark.asyncio
async def test_roles_by_user_is_sorted_lexicographically(repositories):
    await repositories.roles.assign_roles("1", ["r2", "r10", "r1"])
    assert await repositories.roles.roles_by_user("1") == ["r1", "r10", "r2"]


@pytest.mark.asyncio
async def test_delete_role_cascades(repositories, fake_redis, keys):
    role_id = await repositories.roles.add_role("admin")
    other = await repositories.roles.add_role("viewer")
    await repositories.assignments.assign_modules(role_id, ["bank"])
    await repositories.assignments.assign_submodules(role_id, "bank", ["accounts"])
    await repositories.assignments.assign_actions(role_id, "bank", "accounts", ["post:account"])
    await repositories.roles.assign_roles("1", [role_id, other])
    await repositories.roles.assign_roles("2", [role_id])

    affected = await repositories.roles.delete_role(role_id)

    assert affected == ["1", "2"]
    assert await repositories.roles.role_exists(role_id) is False
    assert await repositories.roles.roles_by_user("1") == [other]
    assert await repositories.roles.roles_by_user("2") == []
    assert not [key for key in fake_redis.store if key.startswith(f"rbac:role:{role_id}:")]
    assert await repositories.roles.role_exists(other) is True


@pytest.mark.asyncio
async def test_delete_role_failure_leaves_store_untouched(repositories, fake_redis):
    role_id = await repositories.roles.add_role("admin")
    await repositories.roles.assign_roles("1", [role_id])
    fake_redis.failing.add("execute")

    with pytest.raises(StoreUnavailableException) as exc:
        await repositories.roles.delete_role(role_id)

    assert exc.value.status_code == 503
    fake_redis.failing.clear()
    assert await repositories.roles.role_exists(role_id) is True
    assert await repositories.roles.roles_by_user("1") == [role_id]
