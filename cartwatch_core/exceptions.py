"""
cartwatch exceptions
"""


class CartwatchError(Exception):
    """Base exception for cartwatch"""
    pass


class SelectorUnsupportedError(CartwatchError):
    """Selector cannot be evaluated by the current page implementation"""
    pass


class CatalogError(CartwatchError):
    """Pattern catalog data is missing or malformed"""
    pass


class StorageError(CartwatchError):
    """Cart storage collaborator failed"""
    pass


class PageLoadError(CartwatchError):
    """Page could not be loaded or rendered"""
    pass
