"""Proposals - documents, pricing snapshots and recipient decisions"""
