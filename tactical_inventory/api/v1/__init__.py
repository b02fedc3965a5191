"""Version 1 API routes"""
