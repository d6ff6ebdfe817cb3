#!/usr/bin/env python3
import sys
import os

# Adds the project root to the path so we can import 'hrm'
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from hrm.database import engine
from hrm.models.models import Base

if __name__ == "__main__":
    Base.metadata.create_all(bind=engine)
    print(f"✅ {len(Base.metadata.tables)} tables ensured on {engine.url.render_as_string(hide_password=True)}")
