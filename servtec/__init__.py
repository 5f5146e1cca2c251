"""
ServTec service-desk bot
"""
__version__ = "1.0.0"
