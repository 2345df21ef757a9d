"""
Reptile Keeper REST API package.
"""
