from sqlalchemy.orm import declarative_base

# Single declarative base shared by every model in app.db.models
Base = declarative_base()
