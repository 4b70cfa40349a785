"""Contracts - agreements, public signing and countersignature"""
