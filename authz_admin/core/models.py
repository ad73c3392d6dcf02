"""Value objects for identity resources managed through the backend."""
from __future__ import annotations
import enum
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional, Tuple


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


@dataclass(frozen=True)
class Application:
    id: str
    name: str
    description: str = ""
    created_at: Optional[datetime] = None

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "description": self.description, "createdAt": _iso(self.created_at)}


@dataclass(frozen=True)
class Tenant:
    id: str
    name: str
    app_id: str = ""
    created_at: Optional[datetime] = None

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "appId": self.app_id, "createdAt": _iso(self.created_at)}


@dataclass(frozen=True)
class User:
    id: str
    login_id: str
    email: Optional[str] = None
    tenant_id: str = ""
    created_at: Optional[datetime] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "loginId": self.login_id,
            "email": self.email,
            "tenantId": self.tenant_id,
            "createdAt": _iso(self.created_at),
        }


@dataclass(frozen=True)
class MigratedUser:
    """A legacy user recreated in the backend with its original bcrypt hash."""
    user_id: str
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    tenant_id: Optional[str] = None
    roles: Tuple[str, ...] = ()
    migrated_at: Optional[datetime] = None

    def __post_init__(self):
        object.__setattr__(self, "roles", tuple(self.roles or ()))

    def to_dict(self) -> dict[str, Any]:
        return {
            "userId": self.user_id,
            "email": self.email,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "tenantId": self.tenant_id,
            "roles": list(self.roles),
            "migratedAt": _iso(self.migrated_at),
        }


class FederatedAppType(enum.Enum):
    OIDC = "oidc"
    SAML = "saml"

    @classmethod
    def from_string(cls, value: Optional[str]) -> "FederatedAppType":
        """Parse a type name case-insensitively."""
        if value is None:
            raise ValueError("Federated app type cannot be null")
        try:
            return cls[value.strip().upper()]
        except KeyError:
            raise ValueError(
                f"Invalid federated app type: '{value}'. Valid types are: oidc, saml (case-insensitive)"
            ) from None


@dataclass(frozen=True)
class FederatedApplication:
    id: str
    name: str
    description: str
    app_type: FederatedAppType
    login_page_url: str = ""
    created_at: Optional[datetime] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "type": self.app_type.value,
            "loginPageUrl": self.login_page_url,
            "createdAt": _iso(self.created_at),
        }


@dataclass(frozen=True)
class Role:
    name: str
    description: str = ""
    permission_names: Tuple[str, ...] = field(default_factory=tuple)
    tenant_id: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "permission_names", tuple(self.permission_names or ()))

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "permissionNames": list(self.permission_names),
            "tenantId": self.tenant_id,
        }
