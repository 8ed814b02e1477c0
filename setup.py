# setup.py
from setuptools import setup, find_packages

setup(
    name="cachedfs",
    version="0.1.0",
    description="Memoized filesystem nodes with short-lived attribute caching and transient-fault retries",
    package_dir={"": "src"},
    packages=find_packages(where="src"),  # Finds 'cachedfs' and its subpackages
    python_requires=">=3.8",
    install_requires=[
        "aiofiles>=23.1.0",  # Non-blocking file I/O for AsyncNode
    ],
    extras_require={
        "test": [
            "pytest",
            "pytest-asyncio",
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
    ],
)
