"""fco-backup - git mirror of the UK FCO foreign travel advice pages."""

__version__ = "0.1.0"
