"""Routers for outside-service endpoints (email, uploads, AI, images, status)"""
