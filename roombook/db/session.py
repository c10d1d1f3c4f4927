from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from roombook.core.config import get_settings

DATABASE_URL = get_settings().DATABASE_URL

connect_args = {}
if DATABASE_URL.startswith("sqlite"):
    # request handlers and the availability fan-out run on worker threads
    connect_args = {"check_same_thread": False}

engine = create_engine(DATABASE_URL, pool_pre_ping=True, connect_args=connect_args)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()
