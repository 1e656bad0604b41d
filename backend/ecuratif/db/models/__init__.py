"""Database models package."""
from ecuratif.db.models.import_job import ImportJob
from ecuratif.db.models.info import Info
from ecuratif.db.models.source import Source

__all__ = ["Info", "ImportJob", "Source"]
