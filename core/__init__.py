"""
AI Bookmaker core: content model, rendering adapters, export, pipeline.
"""
