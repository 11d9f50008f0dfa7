"""Storefront - e-commerce backend with a server-rendered user CRUD demo"""

__version__ = "1.0.0"
