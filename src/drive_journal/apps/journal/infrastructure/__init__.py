# Infrastructure package for the driving journal
"""
This package contains the Django ORM models and the repositories implementing
the drive and grouped-drive store interfaces.
"""
