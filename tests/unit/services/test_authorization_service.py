"""Users, role assignment and action assignment."""

import pytest

from access_control.core.exceptions import NotFoundException, ValidationException
from access_control.schemas.rbac import RoleEventType, User
from tests.helpers.scenario import add_users, bank_role, seed_template


class TestUsers:
    @pytest.mark.asyncio
    async def test_duplicate_email_is_rejected(self, engine):
        await add_users(engine, "1")
        with pytest.raises(ValidationException):
            await engine.authorization.add_user(User(id="2", email="user1@acme.io", name="Copy"))

    @pytest.mark.asyncio
    async def test_duplicate_id_is_rejected(self, engine):
        await add_users(engine, "1")
        with pytest.raises(ValidationException):
            await engine.authorization.add_user(User(id="1", email="other@acme.io", name="Other"))

    @pytest.mark.asyncio
    async def test_lookups(self, engine, template_modules):
        await seed_template(engine, template_modules)
        await add_users(engine, "1", "2")
        role_id = await bank_role(engine)
        await engine.authorization.assign_role("2", role_id)

        assert (await engine.authorization.get_user_by_email("user1@acme.io")).id == "1"
        assert [u.id for u in await engine.authorization.list_users()] == ["1", "2"]
        assert [u.id for u in await engine.authorization.list_users_by_role(role_id)] == ["2"]
        with pytest.raises(NotFoundException):
            await engine.authorization.get_user("3")


class TestRoleAssignment:
    @pytest.mark.asyncio
    async def test_assign_requires_known_user_and_role(self, engine):
        role = await engine.roles.add_role("admin")
        with pytest.raises(NotFoundException):
            await engine.authorization.assign_role("1", role.id)
        await add_users(engine, "1")
        with pytest.raises(NotFoundException):
            await engine.authorization.assign_role("1", "r99")

    @pytest.mark.asyncio
    async def test_assign_publishes_both_classes_with_user(self, engine):
        await add_users(engine, "1")
        role = await engine.roles.add_role("admin")
        access = engine.event_bus.subscribe(RoleEventType.ACCESS)
        action = engine.event_bus.subscribe(RoleEventType.ACTION)

        await engine.authorization.assign_role("1", role.id)

        for subscription in (access, action):
            event = subscription.events.get_nowait()
            assert (event.role_id, event.user_id) == (role.id, "1")
        assert await engine.authorization.roles_by_user("1") == [role.id]


class TestActions:
    @pytest.mark.asyncio
    async def test_assign_actions_publishes_action_only(self, engine, template_modules):
        await seed_template(engine, template_modules)
        role = await engine.roles.add_role("admin")
        access = engine.event_bus.subscribe(RoleEventType.ACCESS)
        action = engine.event_bus.subscribe(RoleEventType.ACTION)

        await engine.authorization.assign_actions(role.id, "bank", "accounts", ["post:account"])

        assert access.events.empty()
        assert action.events.qsize() == 1
        assert await engine.authorization.actions_by_role(role.id) == {
            "bank": {"accounts": ["post:account"]}
        }

    @pytest.mark.asyncio
    async def test_unknown_action_is_rejected(self, engine, template_modules):
        await seed_template(engine, template_modules)
        role = await engine.roles.add_role("admin")
        with pytest.raises(NotFoundException):
            await engine.authorization.assign_actions(role.id, "bank", "accounts", ["get:secret"])

    @pytest.mark.asyncio
    async def test_unassign_actions(self, engine, template_modules):
        await seed_template(engine, template_modules)
        role_id = await bank_role(engine)
        await engine.authorization.unassign_actions(role_id, "bank", "accounts", ["delete:account:[]"])
        assert await engine.authorization.actions_by_role(role_id) == {}
