"""Postman collection to module template conversion."""

import pytest

from access_control.utils.postman_parser import PostmanParser


def _request(method, raw, description=None):
    path = [part for part in raw.replace("{{baseUrl}}/", "").split("?")[0].split("/") if part]
    request = {"method": method, "url": {"raw": raw, "path": path}}
    if description is not None:
        request["description"] = description
    return {"request": request}


COLLECTION = {
    "info": {"name": "Bank"},
    "item": [
        {
            "name": "Accounts",
            "item": [
                _request("GET", "{{baseUrl}}/account/:id"),
                _request("POST", "{{baseUrl}}/account?dry_run=true", "Open a new account"),
                _request("DELETE", "{{baseUrl}}/account/:id"),
                _request("PUT", "{{baseUrl}}/account/:id/owner"),
            ],
        },
        {"name": "Reports", "item": [_request("GET", "{{baseUrl}}/report")]},
    ],
}


@pytest.mark.parametrize(
    "method,raw,expected",
    [
        ("DELETE", "{{baseUrl}}/account/:id", "delete:account:[]"),
        ("PUT", "{{baseUrl}}/account/:id/owner", "put:account:[]:owner"),
        ("POST", "{{baseUrl}}/account?dry_run=true", "post:account"),
        ("PATCH", "{{baseUrl}}/bank/branch/:code", "patch:bank:branch:[]"),
    ],
)
def test_action_names(method, raw, expected):
    name, _ = PostmanParser().parse_request(_request(method, raw)["request"])
    assert name == expected


def test_generated_titles():
    assert PostmanParser.describe("delete", "account:[]") == "Delete account"
    assert PostmanParser.describe("put", "account:[]:owner") == "Update account owner"


def test_parse_collection():
    module = PostmanParser().parse(COLLECTION, "bank")

    assert module.name == "bank"
    assert [sub.name for sub in module.submodules] == ["account"]
    account = module.submodule("account")
    assert {action.name for action in account.actions} == {
        "post:account",
        "delete:account:[]",
        "put:account:[]:owner",
    }
    assert account.action("post:account").title == "Create account"


def test_descriptions_are_used_when_requested():
    module = PostmanParser(use_description=True).parse(COLLECTION, "bank")
    account = module.submodule("account")
    assert account.action("post:account").title == "Open a new account"
    assert account.action("delete:account:[]").title == "Delete account"
