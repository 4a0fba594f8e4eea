from setuptools import setup, find_packages

INSTALL_REQUIRES = [
    "pydantic>=2.8.0,<3.0.0",
    "sqlalchemy[asyncio]>=2.0",
    "typing-extensions>=4.6.0",
    "litestar>=2.8",
    "httpx>=0.27",
    "aiosqlite>=0.19",
]

EXTRAS_REQUIRE = {
    "postgres": [
        "asyncpg>=0.29",
    ],
    "test": [
        "pytest>=8.0",
        "pytest-asyncio>=0.23",
    ],
}

setup(
    name="testboard",
    version="0.1.0",
    description="Test results service: ingests JUnit-style results, stores them relationally and serves run history, coverage and flaky-test trends.",
    long_description=open('README.md').read(),
    long_description_content_type='text/markdown',
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires='>=3.11',
    install_requires=INSTALL_REQUIRES,
    extras_require=EXTRAS_REQUIRE,
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Programming Language :: Python :: 3.13",
    ],
)
