"""SellerDesk engine.

Catalog submission and point-of-sale backend for marketplace sellers.
"""

__version__ = "0.1.0"
