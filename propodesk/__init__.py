"""Propodesk - proposals, contracts and invoices for agency sales teams."""

__version__ = "1.0.0"
