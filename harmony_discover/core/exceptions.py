"""Custom exceptions for Harmony Discover."""


class HarmonyDiscoverError(Exception):
    """Base exception for all Harmony Discover errors."""

    pass


class NotFoundError(HarmonyDiscoverError):
    """Track or other catalog resource not found."""

    pass


class ValidationError(HarmonyDiscoverError):
    """Input failed validation (duplicate ids, bad limits)."""

    pass


class CatalogSourceError(HarmonyDiscoverError):
    """A catalog or event source could not be read."""

    def __init__(self, source: str, message: str):
        self.source = source
        super().__init__(f"{source}: {message}")
