from dataclasses import dataclass


@dataclass(frozen=True)
class Identity:
    """Who is making the request, resolved once from the session."""
    user_id: str | None = None
    username: str | None = None
    is_admin: bool = False

    @property
    def is_authenticated(self) -> bool:
        return self.user_id is not None

    def owns(self, owner_id: str) -> bool:
        return self.is_authenticated and self.user_id == owner_id


ANONYMOUS = Identity()
