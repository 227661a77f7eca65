from sqlalchemy import Column, Integer, String
from sqlalchemy.orm import declarative_base

Base = declarative_base()

class SequenceCounter(Base):
    __tablename__ = 'website_hit_sequence'
    id = Column(Integer, primary_key=True, index=True)
    sequence_name = Column(String(255), unique=True, nullable=False)
    sequence_count = Column(Integer, default=0, nullable=False)
