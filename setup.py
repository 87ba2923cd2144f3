from setuptools import setup, find_packages

setup(
    name="shift-indexer",
    version="0.1.0",
    packages=find_packages(include=["shift_indexer", "shift_indexer.*"]),
    install_requires=[
        "pandas>=2.1.1",
        "SQLAlchemy>=2.0.21",
        "alembic>=1.12.1",
        "PyYAML>=6.0.1",
        "python-dotenv>=1.0.0",
        "tqdm>=4.66.1",
        "colorlog>=6.7.0",
        "eth-utils>=2.3.0",
        "eth-hash[pycryptodome]>=0.5.2",  # keccak backend for eth-utils
    ],
    extras_require={
        "postgres": ["psycopg2-binary>=2.9.9"],
        "test": ["pytest>=7.4.0"],
    },
)
