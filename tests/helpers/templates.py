"""Module templates shared by the tests."""

BANK_TEMPLATE = {
    "name": "bank",
    "submodules": [
        {
            "name": "accounts",
            "sections": ["summary", "history"],
            "actions": [
                {"name": "post:account", "title": "Create account"},
                {"name": "delete:account:[]", "title": "Delete account"},
            ],
        },
        {
            "name": "transfers",
            "sections": ["pending"],
            "actions": {"post:transfer": "Create transfer"},
        },
    ],
}

CRM_TEMPLATE = {
    "name": "crm",
    "submodules": [
        {
            "name": "contacts",
            "sections": ["list"],
            "actions": [{"name": "put:contact:[]", "title": "Update contact"}],
        }
    ],
}


