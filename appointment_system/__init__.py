"""
Appointment System

A FastAPI-based booking application for managing staff, appointments and
user accounts, with role-based access control and per-user navigation menus.
"""

__version__ = "1.0.0"
