"""Setup script for LuxeStays."""
from setuptools import setup, find_namespace_packages

setup(
    name="luxestays",
    version="1.0.0",
    description="Resort search, booking and UPI payment backend with a Streamlit client",
    packages=find_namespace_packages(include=["luxestays", "luxestays.*"], exclude=["luxestays.backend.tests"]),
    python_requires=">=3.11",
    install_requires=[
        "fastapi>=0.110",
        "uvicorn>=0.27",
        "pydantic>=2.5",
        "pydantic-settings>=2.1",
        "sqlalchemy>=2.0",
        "aiohttp>=3.9",
        "streamlit>=1.37",
        "pandas>=2.0",
        "requests>=2.31",
    ],
    extras_require={
        "test": [
            "pytest>=7.4",
            "pytest-asyncio>=0.23",
            "httpx>=0.25",
        ],
    },
)
