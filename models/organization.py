from sqlalchemy import Column, Integer, String
from models.base import Base


class Organization(Base):
    """Organization rows from ``organizations.csv``"""
    __tablename__ = "organizations"

    index = Column("Index", Integer)
    organization_id = Column("Organization Id", String(255), primary_key=True)
    name = Column("Name", String(255))
    website = Column("Website", String(255))
    country = Column("Country", String(255))
    description = Column("Description", String(255))
    founded = Column("Founded", Integer)
    industry = Column("Industry", String(255))
    number_of_employees = Column("Number of employees", Integer)
