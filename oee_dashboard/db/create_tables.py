# create_tables.py
from sqlalchemy import create_engine

from oee_dashboard.services.db_service import resolve_database_url
from .models import Base


if __name__ == "__main__":
    engine = create_engine(resolve_database_url(), future=True)
    print("Creating tables from models.py ...")
    Base.metadata.create_all(bind=engine)
    print("Done!")
