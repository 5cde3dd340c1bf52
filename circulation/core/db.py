#!/usr/bin/env python

"""
    Database engine and sessions for Circulation.

    :copyright: (c) 2015 by AUTHORS
    :license: see LICENSE for more details
"""

import logging
from sqlalchemy import create_engine
from sqlalchemy.orm import scoped_session, sessionmaker
from sqlalchemy.pool import StaticPool
from circulation.configs import DB_URI, DEBUG
from circulation.models import Base

logger = logging.getLogger(__name__)

def make_engine(uri=DB_URI):
    # Only use client_encoding for PostgreSQL, not SQLite
    engine_kwargs = {'echo': DEBUG}
    if uri.startswith('sqlite'):
        engine_kwargs['connect_args'] = {'check_same_thread': False}
        if ':memory:' in uri:
            engine_kwargs['poolclass'] = StaticPool
    else:
        engine_kwargs['client_encoding'] = 'utf8'
    return create_engine(uri, **engine_kwargs)

def make_session(engine):
    return scoped_session(sessionmaker(
        bind=engine, autocommit=False, autoflush=False, expire_on_commit=False))

def init_db(engine):
    """Initializes the database and creates tables."""
    Base.metadata.create_all(bind=engine)
    logger.info(f"Initialized circulation tables on {engine.url.render_as_string(hide_password=True)}")

def init(uri=DB_URI):
    engine = make_engine(uri)
    init_db(engine)
    return make_session(engine)
