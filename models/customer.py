from sqlalchemy import Column, Date, Integer, String
from models.base import Base


class Customer(Base):
    """
    Customer rows from ``customers.csv``.

    Column names match the CSV header verbatim (including spaces) so
    records can be inserted without renaming.
    """
    __tablename__ = "customers"

    index = Column("Index", Integer)
    customer_id = Column("Customer Id", String(255), primary_key=True)
    first_name = Column("First Name", String(255))
    last_name = Column("Last Name", String(255))
    company = Column("Company", String(255))
    city = Column("City", String(255))
    country = Column("Country", String(255))
    phone_1 = Column("Phone 1", String(255))
    phone_2 = Column("Phone 2", String(255))
    email = Column("Email", String(255))
    subscription_date = Column("Subscription Date", Date)
    website = Column("Website", String(255))
