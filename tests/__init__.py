"""
Test suite for the Hospital Pharmacy Service.

Contains unit tests for the dispense workflow, prescription store and role
table, and API tests through FastAPI's TestClient.
"""
import os

# Set environment for testing
os.environ["TESTING"] = "1"
os.environ.setdefault("TEST_DATABASE_URL", "sqlite:///./test.db")
