from setuptools import setup, find_packages

setup(
    name="meet-link",
    version="0.1",
    packages=find_packages(exclude=["tests", "tests.*"]),
    package_data={"meetlink": ["templates/*.html"]},
    install_requires=[
        "fastapi",
        "sqlalchemy[asyncio]",
        "aiosqlite",
        "httpx",
        "jinja2",
        "pydantic",
        "pydantic-settings",
        "python-dotenv",
        "google-auth",
        "uvicorn",
    ],
    extras_require={
        "test": [
            "pytest",
            "pytest-asyncio",
        ],
    },
    entry_points={
        "console_scripts": [
            "meet-link-clear=meetlink.jobs.clear_meetings:main",
        ],
    },
)
