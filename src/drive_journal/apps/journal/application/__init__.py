# Application package for the driving journal
"""
This package contains the journal service, which runs classify, group and
ungroup requests against the repositories inside one transaction each.
"""
