"""
Hospital Pharmacy Service

A FastAPI-based service for the hospital front-end's pharmacy workflow:
prescription fulfilment and dispensing, with role-based access to views.
"""

__version__ = "1.0.0"
