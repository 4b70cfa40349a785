"""Invoices - billing, milestone splits and payment status"""
