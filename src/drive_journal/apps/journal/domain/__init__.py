# Domain package for the driving journal
"""
This package contains the domain models, exceptions, store interfaces and the
pure classification/grouping rules of the driving journal.

The domain layer is independent of Django and focuses solely on the rules
governing drives, grouped drives and totals.
"""
