"""
Entity store, conflict checking, mutation services and asset lifecycle
"""
