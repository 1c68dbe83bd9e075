"""
ProjectDesk - project management backend with a mirrored secondary store.
"""
