#!/usr/bin/env python
"""
    Models Configurations for Circulation,
    the ORM tables backing the persistence collaborator.

    :copyright: (c) 2015 by AUTHORS
    :license: see LICENSE for more details
"""
from sqlalchemy.orm import declarative_base

Base = declarative_base()

# Import all models here to ensure they are registered with Base
from . import books, members, loans, fines, reservations

__all__ = ["Base", "books", "members", "loans", "fines", "reservations"]
