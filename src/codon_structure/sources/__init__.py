"""
Structural data sources: local directory layout or public web services.
"""

from .base import StructuralDataSource
from .local import LocalDataSource
from .remote import RemoteDataSource
