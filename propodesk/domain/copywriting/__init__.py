"""Copywriting - text quality scanning"""
