"""Configuration, logging, database bootstrap and error taxonomy"""
