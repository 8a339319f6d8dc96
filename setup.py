from setuptools import find_packages, setup

setup(
    name="pet-adoption-messaging",
    version="0.1.0",
    description="Adopter and shelter messaging service for the pet adoption platform",
    author="Pet Adoption Platform Team",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    python_requires=">=3.10",
    install_requires=[
        "fastapi>=0.110.0",
        "uvicorn[standard]>=0.29.0",
        "pydantic>=2.5.0,<3.0.0",
        "pydantic-settings>=2.2.0",
        "python-dotenv>=1.0.0",
        "sqlalchemy[asyncio]>=2.0.31,<3.0.0",
        "psycopg[binary]>=3.1.18",
        "alembic>=1.13.0",
        "python-jose[cryptography]>=3.3.0",
        "slowapi>=0.1.9",
        "httpx>=0.27.0",
    ],
    extras_require={
        "test": [
            "pytest>=8.0.0",
            "pytest-asyncio>=0.24.0",
            "aiosqlite>=0.20.0",
        ],
    },
)
