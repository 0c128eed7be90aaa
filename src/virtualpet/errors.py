class VirtualPetError(Exception):
    """Base error for virtual pet domain exceptions."""


class UnknownPetTypeError(VirtualPetError):
    """Raised when a pet is constructed with an archetype that does not exist."""


class CatalogError(VirtualPetError):
    """Raised when catalog seed data is malformed or contains duplicate names."""


class SettingsError(VirtualPetError):
    """Raised when a settings file cannot be parsed into game settings."""
