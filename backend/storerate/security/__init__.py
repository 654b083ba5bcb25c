from storerate.security.password import PasswordHasher
from storerate.security.tokens import TokenClaims, TokenService

__all__ = ["PasswordHasher", "TokenClaims", "TokenService"]
