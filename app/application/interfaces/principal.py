from dataclasses import dataclass, field

ADMIN = "admin"
AIRLINE_STAFF = "airline_staff"
HOTEL_STAFF = "hotel_staff"


@dataclass(frozen=True)
class Principal:
    """Identidad verificada que produce la capa de autenticación."""

    user_id: str
    email: str | None = None
    roles: frozenset[str] = field(default_factory=frozenset)

    def has_any_role(self, *roles: str) -> bool:
        return bool(self.roles.intersection(roles))

    @property
    def is_admin(self) -> bool:
        return ADMIN in self.roles
