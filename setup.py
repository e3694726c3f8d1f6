from setuptools import setup, find_packages

setup(
    name="entity-dao",
    version="0.1",
    packages=find_packages(include=["entity_dao", "entity_dao.*"]),
    python_requires=">=3.8",
    install_requires=[
        "sqlalchemy>=2.0",
        "pydantic>=2.0",
        "pydantic-settings",
    ],
    extras_require={
        "test": [
            "pytest",
            "pytest-cov",
        ],
    },
)
