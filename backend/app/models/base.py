# app/models/base.py
from sqlalchemy import MetaData
from sqlalchemy.orm import declarative_base
from app.core.config import settings

Base = declarative_base(metadata=MetaData(naming_convention=settings.db.naming_convention))
