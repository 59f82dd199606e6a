# setup.py
from setuptools import setup, find_namespace_packages

setup(
    name="ncdudiff",
    version="0.3.0",
    description="Compare two ncdu JSON exports and show what changed on disk",
    package_dir={"": "src"},
    packages=find_namespace_packages(where="src", include=["ncdudiff", "ncdudiff.*"]),
    python_requires=">=3.8",
    install_requires=[
        "requests",  # Reports fetched over HTTP(S)
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        'console_scripts': [
            'ncdudiff=ncdudiff.interface.cli.app:main',
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
    ],
)
