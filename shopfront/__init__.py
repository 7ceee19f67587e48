"""shopfront: storefront catalog, ordering and back-office reporting API."""

__version__ = "0.1.0"
