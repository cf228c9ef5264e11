"""
API routers for the user resource service.
"""
