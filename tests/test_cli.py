import json

import pytest
from google.auth.exceptions import DefaultCredentialsError, RefreshError

from workspace_admin import cli
from workspace_admin.apis.directory import DirectoryAPI
from workspace_admin.apis.licensing import LicensingAPI


@pytest.fixture
def wired(monkeypatch, service, config):
    """Point the CLI at the fake service instead of real credentials."""
    monkeypatch.setattr(cli, "load_config", lambda: config)
    monkeypatch.setattr(
        DirectoryAPI, "from_config", classmethod(lambda cls, cfg: cls(service, cfg))
    )
    monkeypatch.setattr(
        LicensingAPI, "from_config", classmethod(lambda cls, cfg: cls(service, cfg))
    )
    return service


def test_products_lists_catalog(capsys):
    assert cli.main(["products"]) == 0
    products = json.loads(capsys.readouterr().out)
    assert len(products) == 14
    assert products[0]["sku_id"] == "1010020027"


def test_members_command(wired, capsys, paged_handler):
    wired.members().handlers["list"] = paged_handler("members", [[{"email": "a@example.com"}]])
    assert cli.main(["members", "eng@example.com", "--roles", "owner"]) == 0
    assert json.loads(capsys.readouterr().out) == [{"email": "a@example.com"}]
    assert wired.members().calls_to("list")[0]["roles"] == "OWNER"


def test_add_members_reads_file_and_reports(wired, capsys, tmp_path, http_error):
    def insert(groupKey, body):
        if body["email"] == "bad@example.com":
            raise http_error(400, "Invalid Input: memberKey")
        return body

    wired.members().handlers["insert"] = insert
    members_file = tmp_path / "members.txt"
    members_file.write_text("b@example.com\n\nbad@example.com\n")

    code = cli.main([
        "add-members", "eng@example.com", "a@example.com",
        "--file", str(members_file), "--role", "manager", "--workers", "2",
    ])

    report = json.loads(capsys.readouterr().out)
    assert code == 1
    assert report["total"] == 3
    assert report["succeeded"] == 2
    assert report["failures"][0]["item"] == {"email": "bad@example.com", "role": "MANAGER"}


def test_remove_members_without_emails_is_a_usage_error(wired):
    assert cli.main(["remove-members", "eng@example.com"]) == 2


def test_licenses_summary(wired, capsys):
    wired.licenseAssignments().handlers["listForProductAndSku"] = lambda **kw: {
        "items": [{"userId": "a@example.com", "skuId": kw["skuId"]}]
    }
    assert cli.main(["licenses", "--sku", "1010020020", "--sku", "Google Vault", "--summary"]) == 0
    summary = json.loads(capsys.readouterr().out)
    assert summary == {
        "Google Workspace Enterprise Plus (formerly G Suite Enterprise)": 1,
        "Google Vault": 1,
    }
    assert wired.licenseAssignments().calls_to("listForProductAndSku")[0]["customerId"] == "C0123abc"


def test_assign_license_unknown_sku(wired):
    assert cli.main(["assign-license", "Google Workspace Ultra", "a@example.com"]) == 2


def test_revoke_license(wired, capsys):
    wired.licenseAssignments().handlers["delete"] = lambda productId, skuId, userId: ""
    assert cli.main(["revoke-license", "1010020025", "a@example.com", "b@example.com"]) == 0
    assert json.loads(capsys.readouterr().out)["succeeded"] == 2


def test_api_errors_exit_non_zero(wired, http_error):
    def deny(**kw):
        raise http_error(403, "Not Authorized to access this resource/api")

    wired.groups().handlers["list"] = deny
    assert cli.main(["groups"]) == 1


def test_credential_failures_exit_with_usage_code(monkeypatch, config):
    def refuse(cls, cfg):
        raise DefaultCredentialsError("Could not automatically determine credentials.")

    monkeypatch.setattr(cli, "load_config", lambda: config)
    monkeypatch.setattr(DirectoryAPI, "from_config", classmethod(refuse))
    assert cli.main(["users"]) == 2


def test_delegation_refresh_failure_exits_with_usage_code(monkeypatch, config):
    def refuse(cls, cfg):
        raise RefreshError("unauthorized_client: Client is unauthorized to retrieve access tokens")

    monkeypatch.setattr(cli, "load_config", lambda: config)
    monkeypatch.setattr(LicensingAPI, "from_config", classmethod(refuse))
    assert cli.main(["revoke-license", "1010020025", "a@example.com"]) == 2
