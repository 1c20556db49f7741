from sqlalchemy.orm import declarative_base

Base = declarative_base()

# Models import Base from here; app.db.models imports them all for metadata
