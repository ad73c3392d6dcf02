"""Tests for application, tenant, user, federated-app and role provisioning."""
import pytest

from authz_admin.core import provisioning_service
from authz_admin.core.descope import DescopeAPIError, DescopeOperationError
from authz_admin.core.models import FederatedAppType
from authz_admin.core.operation_result import ResultStatus
from authz_admin.core.validators import ValidationError


def route(responses):
    """Build a client side_effect answering by endpoint path."""

    def _handler(path, *args, **kwargs):
        value = responses[path]
        if isinstance(value, Exception):
            raise value
        return value(*args, **kwargs) if callable(value) else value

    return _handler


class TestDeriveTenantId:
    @pytest.mark.parametrize(
        "name, expected",
        [("My Tenant", "my-tenant"), ("  ACME   Corp ", "acme-corp"), ("tab\tname", "tab-name"), ("solo", "solo")],
    )
    def test_derivation(self, name, expected):
        assert provisioning_service.derive_tenant_id(name) == expected

    def test_is_repeatable(self):
        assert provisioning_service.derive_tenant_id("My Tenant") == provisioning_service.derive_tenant_id("My Tenant")


class TestCreateTenant:
    def test_creates_with_derived_id(self, descope_config, fake_client):
        fake_client.get.return_value = {"tenants": [{"id": "other", "name": "Other"}]}
        fake_client.post.return_value = {"id": "my-tenant"}

        result = provisioning_service.create_tenant(descope_config, "My Tenant", app_id="app-1")

        assert result.status is ResultStatus.CREATED
        assert result.data.id == "my-tenant"
        assert result.data.app_id == "app-1"
        fake_client.post.assert_called_once_with("/v1/mgmt/tenant/create", json={"name": "My Tenant", "id": "my-tenant"})

    def test_existing_tenant_is_reported(self, descope_config, fake_client):
        fake_client.get.return_value = {"tenants": [{"id": "acme", "name": "Acme"}]}

        result = provisioning_service.create_tenant(descope_config, "Acme")

        assert result.status is ResultStatus.ALREADY_EXISTS
        assert result.data.id == "acme"
        fake_client.post.assert_not_called()

    def test_blank_name_is_rejected_before_backend(self, descope_config, fake_client):
        with pytest.raises(ValidationError):
            provisioning_service.create_tenant(descope_config, "   ")
        fake_client.get.assert_not_called()

    def test_backend_error_is_wrapped(self, descope_config, fake_client):
        fake_client.get.side_effect = DescopeAPIError(500, "boom", "/v1/mgmt/tenant/all")

        with pytest.raises(DescopeOperationError) as exc:
            provisioning_service.create_tenant(descope_config, "Acme")

        assert str(exc.value).startswith("Failed to create tenant 'Acme': ")
        assert isinstance(exc.value.__cause__, DescopeAPIError)


class TestCreateApplication:
    def test_creates_when_absent(self, descope_config, fake_client):
        fake_client.get.return_value = {"apps": []}
        fake_client.post.return_value = {"id": "TP123"}

        result = provisioning_service.create_application(descope_config, "Portal", "Customer portal")

        assert result.status is ResultStatus.CREATED
        assert result.data.id == "TP123"
        assert result.data.description == "Customer portal"
        assert result.message == "Application 'Portal' created successfully"

    def test_existing_application(self, descope_config, fake_client):
        fake_client.get.return_value = {"apps": [{"id": "TP1", "name": "Portal", "description": "x"}]}

        result = provisioning_service.create_application(descope_config, "Portal")

        assert result.status is ResultStatus.ALREADY_EXISTS
        assert result.data.id == "TP1"
        fake_client.post.assert_not_called()


class TestCreateUser:
    def test_existing_login_id(self, descope_config, fake_client):
        fake_client.get.return_value = {"user": {"userId": "U1", "email": "a@example.com"}}

        result = provisioning_service.create_user(descope_config, "alice", "a@example.com")

        assert result.status is ResultStatus.ALREADY_EXISTS
        assert result.data.id == "U1"
        fake_client.get.assert_called_once_with("/v1/mgmt/user", params={"loginid": "alice"})
        fake_client.post.assert_not_called()

    def test_lookup_miss_creates_user(self, descope_config, fake_client):
        fake_client.get.side_effect = DescopeAPIError(400, "User not found", "/v1/mgmt/user")
        fake_client.post.return_value = {"user": {"userId": "U2"}}

        result = provisioning_service.create_user(descope_config, "alice", "a@example.com", "my-tenant")

        assert result.status is ResultStatus.CREATED
        assert result.data.id == "U2"
        assert result.data.email == "a@example.com"
        assert result.data.tenant_id == "my-tenant"
        fake_client.post.assert_called_once_with(
            "/v1/mgmt/user/create",
            json={"loginId": "alice", "email": "a@example.com", "userTenants": [{"tenantId": "my-tenant"}]},
        )


class TestCreateFederatedApplication:
    def test_existing_app_type_is_inferred(self, descope_config, fake_client):
        fake_client.get.return_value = {
            "apps": [{"id": "SA1", "name": "HR", "appType": "SAML", "samlSettings": {"loginPageUrl": "https://hr/login"}}]
        }

        result = provisioning_service.create_federated_application(descope_config, "HR", "oidc")

        assert result.status is ResultStatus.ALREADY_EXISTS
        assert result.data.app_type is FederatedAppType.SAML
        assert result.data.login_page_url == "https://hr/login"

    def test_unknown_existing_type_defaults_to_oidc(self, descope_config, fake_client):
        fake_client.get.return_value = {"apps": [{"id": "SA2", "name": "HR"}]}

        result = provisioning_service.create_federated_application(descope_config, "HR", "saml", metadata_url="https://sp/meta")

        assert result.data.app_type is FederatedAppType.OIDC

    def test_creates_oidc_app(self, descope_config, fake_client):
        fake_client.get.side_effect = route({
            "/v1/mgmt/sso/idp/apps/load": {"apps": []},
            "/v1/mgmt/sso/idp/app/load": {"id": "SA9", "name": "Wiki", "oidcSettings": {"loginPageUrl": "https://wiki/login"}},
        })
        fake_client.post.return_value = {"id": "SA9"}

        result = provisioning_service.create_federated_application(
            descope_config, "Wiki", FederatedAppType.OIDC, login_page_url="https://wiki/login"
        )

        assert result.status is ResultStatus.CREATED
        assert result.data.id == "SA9"
        assert result.data.app_type is FederatedAppType.OIDC
        assert result.data.login_page_url == "https://wiki/login"
        assert fake_client.post.call_args.args[0] == "/v1/mgmt/sso/idp/app/oidc/create"

    def test_saml_requires_service_provider_details(self, descope_config, fake_client):
        with pytest.raises(ValidationError, match="SAML applications require"):
            provisioning_service.create_federated_application(descope_config, "HR", "saml", entity_id="urn:hr")
        fake_client.get.assert_not_called()

    def test_invalid_type(self, descope_config, fake_client):
        with pytest.raises(ValidationError, match="Invalid federated app type: 'ldap'"):
            provisioning_service.create_federated_application(descope_config, "HR", "ldap")


class TestRoles:
    def test_create_tenant_role(self, descope_config, fake_client):
        result = provisioning_service.create_role(descope_config, "editor", "Edits", ["doc.write"], "my-tenant")

        assert result.status is ResultStatus.CREATED
        assert result.message == "Role 'editor' created successfully in tenant: my-tenant"
        fake_client.post.assert_called_once_with(
            "/v1/mgmt/role/create",
            json={"name": "editor", "description": "Edits", "permissionNames": ["doc.write"], "tenantId": "my-tenant"},
        )

    def test_list_roles(self, descope_config, fake_client):
        fake_client.get.return_value = {"roles": [{"name": "admin", "permissionNames": ["all"]}, {"name": "viewer"}]}

        result = provisioning_service.list_roles(descope_config)

        assert result.status is ResultStatus.SUCCESS
        assert [role.name for role in result.data] == ["admin", "viewer"]
        assert result.data[0].permission_names == ("all",)
        assert result.message == "Loaded 2 roles"

    def test_update_role_keeps_name_by_default(self, descope_config, fake_client):
        result = provisioning_service.update_role(descope_config, "viewer", description="Read only")

        assert result.data.name == "viewer"
        assert result.message == "Role 'viewer' updated successfully (project-level)"

    def test_delete_role_error_is_wrapped(self, descope_config, fake_client):
        fake_client.post.side_effect = DescopeAPIError(400, "Role not found", "/v1/mgmt/role/delete")

        with pytest.raises(DescopeOperationError, match="Failed to delete role 'ghost'"):
            provisioning_service.delete_role(descope_config, "ghost")
