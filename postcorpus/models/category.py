"""Category model."""

from sqlalchemy import Column, Integer, String, UniqueConstraint
from ..database import Base

ROOT_CATEGORY = "root"


class Category(Base):
    """A named category whose parent is another category name or ``root``.

    Categories form a forest per owner; parents are referenced by name,
    not by foreign key.
    """

    __tablename__ = "categories"
    __table_args__ = (
        UniqueConstraint("owner_id", "name", name="uq_categories_owner_name"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    owner_id = Column(String(50), nullable=False)
    name = Column(String(255), nullable=False)
    parent = Column(String(255), nullable=True, default=ROOT_CATEGORY)
