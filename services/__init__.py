"""
Services Package

Business logic for the spelling voice engine.
"""
