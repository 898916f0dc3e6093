"""Assets Module -- company assets, custody lifecycle and maintenance."""

from workforce_modules.assets.helpers import book_value, straight_line
from workforce_modules.assets.service import AssetHolding, AssetService
from workforce_modules.assets.workflows import ASSET_WORKFLOW

__all__ = [
    "ASSET_WORKFLOW",
    "AssetHolding",
    "AssetService",
    "book_value",
    "straight_line",
]
