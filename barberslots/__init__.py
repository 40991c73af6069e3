"""
barberslots - Appointment slot resolution for multi-tenant barbershops.
"""

__version__ = "0.1.0"
