from __future__ import annotations


class RegistryError(Exception):
    pass


class TenantContextError(RegistryError):
    pass


class NotFoundError(RegistryError):
    pass


class ConflictError(RegistryError):
    pass


class AuthError(RegistryError):
    pass


class ForbiddenError(RegistryError):
    pass
