from setuptools import setup, find_packages


setup(
    name="saf",
    version="0.1",
    packages=find_packages(include=["saf", "saf.*"]),
    description="A simple sequential archive format with byte-exact framing and optional per-file checksums.",
    author="vercingetorx",
    python_requires=">=3.8",
    install_requires=[
        "pycryptodomex>=3.23.0",
    ],
    entry_points={
        "console_scripts": [
            "saf=saf.cli:main",
        ]
    },
)
